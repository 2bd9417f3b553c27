"""
Shared fakes for the aircraft simulator tests.

The fakes stand in for the telemetry, order and cargo services so the tick
loop can be exercised without a network.
"""

import sys
from collections import deque
from pathlib import Path

import pytest

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from aircraft.errors import TransientError
from aircraft.models import AircraftState, FlightPlan, Position, Waypoint


class FakeTelemetry:
    """Records broadcasts; errors can be queued per call kind."""

    def __init__(self):
        self.token_failures = 0
        self.token_attempts = 0
        self.id_errors = deque()
        self.position_errors = deque()
        self.id_updates = []
        self.position_updates = []

    def acquire_token(self, identifier):
        self.token_attempts += 1
        if self.token_failures > 0:
            self.token_failures -= 1
            raise TransientError(f"({identifier}) could not acquire token: connection refused")
        return f"token-{self.token_attempts}"

    def id_update(self, token, id_type, uas_id):
        if self.id_errors:
            raise self.id_errors.popleft()
        self.id_updates.append((token, id_type, uas_id))

    def position_update(self, token, state):
        if self.position_errors:
            raise self.position_errors.popleft()
        self.position_updates.append((
            token,
            state.position.longitude,
            state.position.latitude,
            state.position.altitude,
            state.ground_velocity_m_s,
            state.track_angle_deg,
        ))


class FakeOrders:
    """Serves queued poll results; None simulates a failed poll."""

    def __init__(self):
        self.responses = deque()
        self.polls = []
        self.acknowledged = []

    def get_orders(self, fleet_uuid, callsign):
        self.polls.append((fleet_uuid, callsign))
        if not self.responses:
            return []
        return self.responses.popleft()

    def acknowledge_order(self, flight_id, callsign):
        self.acknowledged.append(flight_id)
        return True


class FakeCargo:
    def __init__(self, ok=True):
        self.ok = ok
        self.scans = []

    def scan_parcel(self, identifier, scanner_id, cargo_id, latitude, longitude):
        self.scans.append((cargo_id, latitude, longitude))
        return self.ok


def make_plan(session_id="session-1", origin_start_ms=0, origin_end_ms=0,
              target_start_ms=60_000, waypoints=(), acquire=(), deliver=(), flight_id=None):
    return FlightPlan(
        flight_id=flight_id or f"flight-{session_id}",
        session_id=session_id,
        origin_window_start_ms=origin_start_ms,
        origin_window_end_ms=origin_end_ms,
        target_window_start_ms=target_start_ms,
        path=deque(Waypoint(*w) for w in waypoints),
        acquire=list(acquire),
        deliver=list(deliver),
    )


def make_state(longitude=5.167, latitude=52.640, altitude=0.0):
    return AircraftState(
        identifier="AETH-00042",
        scanner_id="scanner-1",
        position=Position(longitude, latitude, altitude),
    )


@pytest.fixture
def telemetry():
    return FakeTelemetry()


@pytest.fixture
def orders():
    return FakeOrders()


@pytest.fixture
def cargo():
    return FakeCargo()


@pytest.fixture
def state():
    return make_state()
