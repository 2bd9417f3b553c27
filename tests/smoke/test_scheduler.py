"""
Smoke tests for flight plan scheduling.

Covers pending-set ordering, plan activation and completion, and the
recently-completed history used to reject re-announced orders.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from conftest import FakeCargo, make_plan, make_state
from aircraft.geodesy import distance_meters
from aircraft.scheduler import IngestOutcome, PendingOrderSet, PlanScheduler

NOW_MS = 1_767_960_000_000

NORTH_LEG = [(5.167, 52.640, 0.0), (5.167, 52.650, 100.0)]


@pytest.fixture
def pending():
    return PendingOrderSet()


@pytest.fixture
def scheduler(pending, cargo):
    return PlanScheduler(pending, cargo, fallback_speed_m_s=10.0)


class TestPendingOrderSet:
    """Ordering and indexing of not-yet-active plans."""

    def test_earliest_origin_window_first(self, pending):
        pending.upsert(make_plan("later", origin_start_ms=100))
        pending.upsert(make_plan("earlier", origin_start_ms=0))

        assert pending.peek().session_id == "earlier"
        assert pending.pop().session_id == "earlier"
        assert pending.pop().session_id == "later"
        assert pending.pop() is None

    def test_ties_keep_arrival_order(self, pending):
        for name in ("a", "b", "c"):
            pending.upsert(make_plan(name, origin_start_ms=50))

        assert [pending.pop().session_id for _ in range(3)] == ["a", "b", "c"]

    def test_upsert_replaces_in_place(self, pending):
        assert pending.upsert(make_plan("s1", origin_start_ms=0)) == IngestOutcome.INSERTED
        assert pending.upsert(make_plan("s2", origin_start_ms=100)) == IngestOutcome.INSERTED

        replacement = make_plan("s1", origin_start_ms=200, flight_id="flight-updated")
        assert pending.upsert(replacement) == IngestOutcome.UPDATED

        assert len(pending) == 2
        assert pending.get("s1").flight_id == "flight-updated"
        # s1 moved behind s2
        assert pending.peek().session_id == "s2"
        assert pending.pop().session_id == "s2"
        assert pending.pop().flight_id == "flight-updated"
        assert len(pending) == 0

    def test_history_is_bounded_fifo(self, pending):
        for i in range(15):
            pending.remember(f"session-{i}")

        assert len(pending.recent) == 10
        assert not pending.is_recent("session-0")
        assert not pending.is_recent("session-4")
        assert pending.is_recent("session-5")
        assert pending.is_recent("session-14")


class TestIngest:
    """Merging announced plans into the pending set."""

    def test_new_plan_is_inserted(self, scheduler, pending, state):
        assert scheduler.ingest(state, make_plan("s1")) == IngestOutcome.INSERTED
        assert "s1" in pending

    def test_current_plan_is_ignored(self, scheduler, pending, state):
        state.current_plan = make_plan("s1", waypoints=NORTH_LEG)

        assert scheduler.ingest(state, make_plan("s1")) == IngestOutcome.IGNORED
        assert "s1" not in pending

    def test_recently_completed_plan_is_ignored(self, scheduler, pending, state):
        pending.remember("s1")

        assert scheduler.ingest(state, make_plan("s1")) == IngestOutcome.IGNORED
        assert len(pending) == 0

    def test_reannounced_plan_is_updated(self, scheduler, pending, state):
        scheduler.ingest(state, make_plan("s1", target_start_ms=60_000))

        outcome = scheduler.ingest(state, make_plan("s1", target_start_ms=90_000))

        assert outcome == IngestOutcome.UPDATED
        assert pending.get("s1").target_window_start_ms == 90_000


class TestActivation:
    """Pending plan becomes current once its origin window has elapsed."""

    def test_earliest_plan_activates_first(self, scheduler, pending, state):
        scheduler.ingest(state, make_plan("t100", origin_start_ms=NOW_MS + 100,
                                          origin_end_ms=NOW_MS, waypoints=NORTH_LEG))
        scheduler.ingest(state, make_plan("t0", origin_start_ms=NOW_MS,
                                          origin_end_ms=NOW_MS, waypoints=NORTH_LEG))

        assert scheduler.try_activate_next(state, NOW_MS)

        assert state.current_plan.session_id == "t0"
        assert "t100" in pending

    def test_origin_window_not_elapsed(self, scheduler, pending, state):
        scheduler.ingest(state, make_plan("s1", origin_end_ms=NOW_MS + 5_000, waypoints=NORTH_LEG))

        assert not scheduler.try_activate_next(state, NOW_MS)
        assert state.current_plan is None
        assert "s1" in pending

        assert scheduler.try_activate_next(state, NOW_MS + 5_000)
        assert state.current_plan.session_id == "s1"

    def test_no_activation_while_a_plan_is_current(self, scheduler, pending, state):
        state.current_plan = make_plan("current", waypoints=NORTH_LEG)
        scheduler.ingest(state, make_plan("next", waypoints=NORTH_LEG))

        assert not scheduler.try_activate_next(state, NOW_MS)
        assert state.current_plan.session_id == "current"

    def test_empty_pending_set(self, scheduler, state):
        assert not scheduler.try_activate_next(state, NOW_MS)


class TestInitPlan:
    """Derivation of the first leg on activation."""

    def test_snaps_to_first_waypoint_and_paces_to_target_window(self, scheduler, cargo):
        state = make_state(5.0, 52.0, 0.0)
        plan = make_plan("s1", target_start_ms=NOW_MS + 100_000,
                         waypoints=NORTH_LEG, acquire=["parcel-1"])
        leg = distance_meters(NORTH_LEG[0][:2], NORTH_LEG[1][:2])

        scheduler.init_plan(state, plan, NOW_MS)

        assert state.current_plan is plan
        assert state.position.lonlat == (5.167, 52.640)
        assert len(plan.path) == 1
        assert state.ground_velocity_m_s == pytest.approx(leg / 100.0)
        # 100 m climb over the 100 s leg
        assert state.vertical_velocity_m_s == pytest.approx(1.0)
        assert state.track_angle_deg == pytest.approx(0.0, abs=1e-9)
        # Pickup is scanned before repositioning
        assert cargo.scans == [("parcel-1", 52.0, 5.0)]

    def test_target_window_already_started_uses_fallback(self, scheduler, state):
        plan = make_plan("s1", target_start_ms=NOW_MS - 1, waypoints=NORTH_LEG)

        scheduler.init_plan(state, plan, NOW_MS)

        assert state.ground_velocity_m_s == 10.0

    def test_empty_path_is_immediately_complete(self, scheduler, pending, cargo, state):
        plan = make_plan("s1", acquire=["parcel-1"], deliver=["parcel-1"])

        scheduler.init_plan(state, plan, NOW_MS)

        assert state.current_plan is None
        assert pending.is_recent("s1")
        assert [scan[0] for scan in cargo.scans] == ["parcel-1", "parcel-1"]

    def test_single_waypoint_plan_completes_on_next_check(self, scheduler, pending, cargo, state):
        plan = make_plan("s1", target_start_ms=NOW_MS + 60_000,
                         waypoints=[(5.2, 52.7, 0.0)], deliver=["parcel-1"])

        scheduler.init_plan(state, plan, NOW_MS)

        assert state.current_plan is plan
        assert plan.complete
        assert state.ground_velocity_m_s == 0.0

        assert scheduler.check_completion(state)
        assert state.current_plan is None
        assert pending.is_recent("s1")
        assert cargo.scans == [("parcel-1", 52.7, 5.2)]

    def test_cargo_failures_do_not_block_activation(self, pending, state):
        scheduler = PlanScheduler(pending, FakeCargo(ok=False))
        plan = make_plan("s1", waypoints=NORTH_LEG, acquire=["parcel-1", "parcel-2"])

        scheduler.init_plan(state, plan, NOW_MS)

        assert state.current_plan is plan
        assert len(scheduler.cargo.scans) == 2


class TestCompletion:
    """Ending the current plan."""

    def test_incomplete_plan_is_kept(self, scheduler, state):
        state.current_plan = make_plan("s1", waypoints=NORTH_LEG)

        assert not scheduler.check_completion(state)
        assert state.current_plan is not None

    def test_end_plan_stops_aircraft(self, scheduler, pending, cargo, state):
        state.current_plan = make_plan("s1", deliver=["parcel-9"])
        state.ground_velocity_m_s = 4.0
        state.vertical_velocity_m_s = -1.0

        scheduler.end_plan(state)

        assert state.current_plan is None
        assert state.ground_velocity_m_s == 0.0
        assert state.vertical_velocity_m_s == 0.0
        assert pending.is_recent("s1")
        assert cargo.scans == [("parcel-9", 52.640, 5.167)]

    def test_end_plan_without_current_plan(self, scheduler, pending, state):
        scheduler.end_plan(state)

        assert state.current_plan is None
        assert len(pending.recent) == 0
