"""
Data models for the simulated aircraft and its flight plans.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Deque, List

from contracts.validation import FlightPlanPayload
from aircraft.geodesy import normalize_bearing, path_length_meters


class Activity(str, Enum):
    IDLE = "IDLE"
    CRUISE = "CRUISE"


@dataclass
class Position:
    """Live position; longitude/latitude in degrees, altitude in meters."""
    longitude: float
    latitude: float
    altitude: float = 0.0

    @property
    def lonlat(self) -> tuple:
        return self.longitude, self.latitude


@dataclass(frozen=True)
class Waypoint:
    longitude: float
    latitude: float
    altitude: float = 0.0

    @property
    def lonlat(self) -> tuple:
        return self.longitude, self.latitude


def _to_ms(dt) -> int:
    return int(dt.timestamp() * 1000)


@dataclass
class FlightPlan:
    """
    Delivery flight plan.

    The path is consumed strictly from the front; the plan is complete
    exactly when the path is empty.
    """
    flight_id: str
    session_id: str
    origin_window_start_ms: int
    origin_window_end_ms: int
    target_window_start_ms: int
    target_window_end_ms: Optional[int] = None
    path: Deque[Waypoint] = field(default_factory=deque)
    acquire: List[str] = field(default_factory=list)
    deliver: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: FlightPlanPayload) -> "FlightPlan":
        """Build a plan from a validated order payload."""
        return cls(
            flight_id=payload.flight_uuid,
            session_id=payload.session_id,
            origin_window_start_ms=_to_ms(payload.origin_timeslot_start),
            origin_window_end_ms=_to_ms(payload.origin_timeslot_end),
            target_window_start_ms=_to_ms(payload.target_timeslot_start),
            target_window_end_ms=(
                _to_ms(payload.target_timeslot_end)
                if payload.target_timeslot_end is not None else None
            ),
            path=deque(
                Waypoint(p.longitude, p.latitude, p.altitude_meters)
                for p in payload.path
            ),
            acquire=[c.id for c in payload.acquire],
            deliver=[c.id for c in payload.deliver],
        )

    @property
    def complete(self) -> bool:
        return not self.path

    def next_waypoint(self) -> Optional[Waypoint]:
        return self.path[0] if self.path else None

    def pop_waypoint(self) -> Waypoint:
        return self.path.popleft()

    def total_distance_m(self) -> float:
        return path_length_meters([w.lonlat for w in self.path])


@dataclass
class AircraftState:
    """
    Aggregate state of the simulated aircraft.

    Owned exclusively by the tick loop and passed explicitly into every
    motion, scheduling and reporting operation.
    """
    identifier: str
    scanner_id: str
    position: Position
    current_plan: Optional[FlightPlan] = None
    token: Optional[str] = None
    ground_velocity_m_s: float = 0.0
    vertical_velocity_m_s: float = 0.0
    _track_angle_deg: float = 0.0
    last_id_update_ms: int = 0
    last_position_update_ms: int = 0
    last_order_poll_ms: int = 0
    last_tick_ms: int = 0

    @property
    def track_angle_deg(self) -> float:
        return self._track_angle_deg

    @track_angle_deg.setter
    def track_angle_deg(self, value: float):
        self._track_angle_deg = normalize_bearing(value)

    @property
    def activity(self) -> Activity:
        return Activity.CRUISE if self.current_plan is not None else Activity.IDLE

    def stop(self):
        """Zero both velocities."""
        self.ground_velocity_m_s = 0.0
        self.vertical_velocity_m_s = 0.0
