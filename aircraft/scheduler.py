"""
Flight plan scheduling.

Pending plans wait in an ascending min-heap keyed by origin window start
(ties broken by arrival order) and are indexed by session id so that
re-announced orders update in place. At most one plan is current; completed
session ids are kept in a bounded FIFO so stale re-announcements are ignored.
"""

import heapq
import itertools
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, List, Deque

from contracts.constants import RECENT_HISTORY_CAPACITY
from aircraft.metrics import (
    PLANS_ACTIVATED,
    PLANS_COMPLETED,
    PENDING_PLANS,
    PARCEL_SCANS,
)
from aircraft.models import AircraftState, FlightPlan, Position
from aircraft.motion import recompute_velocity, DEFAULT_FALLBACK_GROUND_SPEED_M_S

logger = logging.getLogger(__name__)


class IngestOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    IGNORED = "ignored"


@dataclass
class _Entry:
    order: int
    plan: FlightPlan


class PendingOrderSet:
    """Not-yet-active plans plus recently completed session ids."""

    def __init__(self, history_capacity: int = RECENT_HISTORY_CAPACITY):
        self._heap: List[tuple] = []
        self._entries: Dict[str, _Entry] = {}
        self._counter = itertools.count()
        self.recent: Deque[str] = deque(maxlen=history_capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._entries

    def get(self, session_id: str) -> Optional[FlightPlan]:
        entry = self._entries.get(session_id)
        return entry.plan if entry else None

    def upsert(self, plan: FlightPlan) -> IngestOutcome:
        """Insert a new plan, or replace the pending plan with the same session id."""
        entry = self._entries.get(plan.session_id)
        if entry is None:
            entry = _Entry(order=next(self._counter), plan=plan)
            self._entries[plan.session_id] = entry
            heapq.heappush(self._heap, (plan.origin_window_start_ms, entry.order, plan.session_id))
            outcome = IngestOutcome.INSERTED
        else:
            previous_start = entry.plan.origin_window_start_ms
            entry.plan = plan
            if plan.origin_window_start_ms != previous_start:
                heapq.heappush(self._heap, (plan.origin_window_start_ms, entry.order, plan.session_id))
            outcome = IngestOutcome.UPDATED

        PENDING_PLANS.set(len(self._entries))
        return outcome

    def _discard_stale(self):
        # Heap keys left behind by in-place updates or pops
        while self._heap:
            start_ms, order, session_id = self._heap[0]
            entry = self._entries.get(session_id)
            if (entry is not None and entry.order == order
                    and entry.plan.origin_window_start_ms == start_ms):
                return
            heapq.heappop(self._heap)

    def peek(self) -> Optional[FlightPlan]:
        """Plan with the earliest origin window start, without removing it."""
        self._discard_stale()
        if not self._heap:
            return None
        return self._entries[self._heap[0][2]].plan

    def pop(self) -> Optional[FlightPlan]:
        """Remove and return the plan with the earliest origin window start."""
        self._discard_stale()
        if not self._heap:
            return None
        _, _, session_id = heapq.heappop(self._heap)
        entry = self._entries.pop(session_id)
        PENDING_PLANS.set(len(self._entries))
        return entry.plan

    def remember(self, session_id: str):
        """Record a finished session id, evicting the oldest beyond capacity."""
        self.recent.append(session_id)

    def is_recent(self, session_id: str) -> bool:
        return session_id in self.recent


class PlanScheduler:
    """Decides when pending plans become current and when they end."""

    def __init__(self, pending: PendingOrderSet, cargo,
                 fallback_speed_m_s: float = DEFAULT_FALLBACK_GROUND_SPEED_M_S):
        self.pending = pending
        self.cargo = cargo
        self.fallback_speed_m_s = fallback_speed_m_s

    # ============================================
    # Ingestion
    # ============================================

    def ingest(self, state: AircraftState, plan: FlightPlan) -> IngestOutcome:
        """Merge one announced plan into the pending set."""
        current = state.current_plan
        if current is not None and current.session_id == plan.session_id:
            logger.debug(f"| {state.identifier} | ignoring plan {plan.session_id}: already current")
            return IngestOutcome.IGNORED

        if self.pending.is_recent(plan.session_id):
            logger.debug(f"| {state.identifier} | ignoring plan {plan.session_id}: recently completed")
            return IngestOutcome.IGNORED

        outcome = self.pending.upsert(plan)
        logger.info(f"| {state.identifier} | plan {plan.session_id} {outcome.value}.")
        return outcome

    # ============================================
    # Activation / Completion
    # ============================================

    def try_activate_next(self, state: AircraftState, now_ms: int) -> bool:
        """
        Activate the earliest pending plan once its origin window has elapsed.

        Returns:
            True if a plan was popped from the pending set.
        """
        if state.current_plan is not None:
            return False

        plan = self.pending.peek()
        if plan is None:
            return False

        if plan.origin_window_end_ms > now_ms:
            return False

        plan = self.pending.pop()
        self.init_plan(state, plan, now_ms)
        return True

    def _scan_manifest(self, state: AircraftState, cargo_ids: List[str], stage: str):
        for cargo_id in cargo_ids:
            ok = self.cargo.scan_parcel(
                state.identifier,
                state.scanner_id,
                cargo_id,
                state.position.latitude,
                state.position.longitude,
            )
            PARCEL_SCANS.labels(stage=stage, status="success" if ok else "failed").inc()

    def init_plan(self, state: AircraftState, plan: FlightPlan, now_ms: int):
        """Install plan as the current plan and derive velocity for its first leg."""
        logger.info(f"| {state.identifier} | {now_ms} | new flight plan: {plan.session_id}")
        self._scan_manifest(state, plan.acquire, "acquire")

        total_distance = plan.total_distance_m()

        if plan.complete:
            logger.warning(
                f"| {state.identifier} | {now_ms} | plan {plan.session_id} has no waypoints, "
                f"treating as complete."
            )
            self._finish(state, plan)
            return

        # Ground repositioning is instantaneous
        first = plan.pop_waypoint()
        state.position = Position(first.longitude, first.latitude, first.altitude)

        total_duration_s = (plan.target_window_start_ms - now_ms) / 1000.0
        if total_duration_s > 0:
            state.ground_velocity_m_s = total_distance / total_duration_s
        else:
            logger.warning(
                f"| {state.identifier} | {now_ms} | target window of {plan.session_id} already started, "
                f"using {self.fallback_speed_m_s} m/s"
            )
            state.ground_velocity_m_s = self.fallback_speed_m_s

        state.current_plan = plan
        recompute_velocity(state, now_ms, self.fallback_speed_m_s)
        PLANS_ACTIVATED.inc()

    def check_completion(self, state: AircraftState) -> bool:
        """End the current plan if its path is exhausted."""
        plan = state.current_plan
        if plan is None or not plan.complete:
            return False
        self.end_plan(state)
        return True

    def end_plan(self, state: AircraftState):
        """Report deliveries, clear the current plan and stop the aircraft."""
        plan = state.current_plan
        if plan is None:
            logger.warning(f"| {state.identifier} | tried to end a non-existent plan.")
            return

        state.current_plan = None
        self._finish(state, plan)
        state.stop()

    def _finish(self, state: AircraftState, plan: FlightPlan):
        self._scan_manifest(state, plan.deliver, "deliver")
        self.pending.remember(plan.session_id)
        PLANS_COMPLETED.inc()
        logger.info(f"| {state.identifier} | completed flight plan: {plan.session_id}")
