"""
Fixed-period reporting triggers.

Each cadence reads and writes its own "last fired" timestamp on
AircraftState and is evaluated against wall-clock deltas, independent of the
tick rate. A cadence is only marked as fired after its call succeeded.
"""

from dataclasses import dataclass

from contracts.constants import (
    ID_UPDATE_INTERVAL_MS,
    POSITION_UPDATE_INTERVAL_MS,
    ORDER_POLL_INTERVAL_MS,
)
from aircraft.models import AircraftState


@dataclass(frozen=True)
class Cadence:
    name: str
    period_ms: int
    field: str

    def last_fired(self, state: AircraftState) -> int:
        return getattr(state, self.field)

    def due(self, state: AircraftState, now_ms: int) -> bool:
        return now_ms - self.last_fired(state) >= self.period_ms

    def fired(self, state: AircraftState, now_ms: int):
        # Timestamps never move backwards
        setattr(state, self.field, max(self.last_fired(state), now_ms))


IDENTITY = Cadence("identity", ID_UPDATE_INTERVAL_MS, "last_id_update_ms")
POSITION = Cadence("position", POSITION_UPDATE_INTERVAL_MS, "last_position_update_ms")
ORDER_POLL = Cadence("order_poll", ORDER_POLL_INTERVAL_MS, "last_order_poll_ms")
