"""
Tick loop for a single simulated aircraft.

Within one tick, in this fixed order:
1. Motion engine advances the position
2. Current plan completion, then activation of the next pending plan
3. Token lifecycle
4. Identity broadcast (every 2 s)
5. Position broadcast (every 0.5 s)
6. Order poll (every 15 s)

Network calls block the tick in place; there is no concurrent access to the
aircraft state.
"""

import logging
import time
from typing import Callable, Optional

from contracts.constants import ID_TYPE_CAA_ASSIGNED, ID_TYPE_SPECIFIC_SESSION
from aircraft import cadence
from aircraft.errors import NetworkError
from aircraft.metrics import (
    TICKS_TOTAL,
    TICK_LATENCY,
    BROADCASTS_TOTAL,
    ORDER_POLLS,
    ORDERS_RECEIVED,
    GROUND_SPEED,
    ALTITUDE,
)
from aircraft.models import AircraftState
from aircraft.motion import advance, DEFAULT_FALLBACK_GROUND_SPEED_M_S
from aircraft.scheduler import PlanScheduler, PendingOrderSet
from aircraft.session import TokenSession

logger = logging.getLogger(__name__)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class AircraftSimulator:
    """Drives an AircraftState through motion, scheduling and reporting."""

    def __init__(
        self,
        state: AircraftState,
        telemetry,
        orders,
        cargo,
        fleet_uuid: str,
        tick_interval_ms: int = 50,
        fallback_speed_m_s: float = DEFAULT_FALLBACK_GROUND_SPEED_M_S,
        pending: Optional[PendingOrderSet] = None,
        clock: Callable[[], int] = wall_clock_ms,
    ):
        self.state = state
        self.telemetry = telemetry
        self.orders = orders
        self.fleet_uuid = fleet_uuid
        self.tick_interval_ms = tick_interval_ms
        self.fallback_speed_m_s = fallback_speed_m_s
        self.pending = pending if pending is not None else PendingOrderSet()
        self.scheduler = PlanScheduler(self.pending, cargo, fallback_speed_m_s)
        self.session = TokenSession(telemetry)
        self.clock = clock

    # ============================================
    # Tick
    # ============================================

    def tick(self, now_ms: int):
        """Run one simulation step at wall-clock time now_ms."""
        state = self.state

        last_ms = state.last_tick_ms or now_ms
        advance(state, now_ms, last_ms, fallback_speed_m_s=self.fallback_speed_m_s)
        state.last_tick_ms = max(state.last_tick_ms, now_ms)

        self.scheduler.check_completion(state)
        self.scheduler.try_activate_next(state, now_ms)

        GROUND_SPEED.set(state.ground_velocity_m_s)
        ALTITUDE.set(state.position.altitude)

        # Raises TokenExhaustedError once retries are used up
        token = self.session.ensure_token(state, now_ms)
        if token is not None:
            if self._report_identity(token, now_ms):
                self._report_position(token, now_ms)

        self._poll_orders(now_ms)
        TICKS_TOTAL.inc()

    def identity(self) -> tuple:
        """(id_type, uas_id) to broadcast for the current activity."""
        plan = self.state.current_plan
        if plan is not None:
            return ID_TYPE_SPECIFIC_SESSION, plan.session_id
        return ID_TYPE_CAA_ASSIGNED, self.state.identifier

    def _report_identity(self, token: str, now_ms: int) -> bool:
        """Returns False if the token was discarded."""
        if not cadence.IDENTITY.due(self.state, now_ms):
            return True

        id_type, uas_id = self.identity()
        try:
            self.telemetry.id_update(token, id_type, uas_id)
        except NetworkError as e:
            BROADCASTS_TOTAL.labels(kind="identity", status="failed").inc()
            logger.error(f"({self.state.identifier}) could not issue id update: {e}")
            self.session.invalidate(self.state, e)
            return False

        BROADCASTS_TOTAL.labels(kind="identity", status="success").inc()
        cadence.IDENTITY.fired(self.state, now_ms)
        return True

    def _report_position(self, token: str, now_ms: int) -> bool:
        if not cadence.POSITION.due(self.state, now_ms):
            return True

        try:
            self.telemetry.position_update(token, self.state)
        except NetworkError as e:
            BROADCASTS_TOTAL.labels(kind="position", status="failed").inc()
            logger.error(f"({self.state.identifier}) could not issue position update: {e}")
            self.session.invalidate(self.state, e)
            return False

        BROADCASTS_TOTAL.labels(kind="position", status="success").inc()
        cadence.POSITION.fired(self.state, now_ms)
        return True

    def _poll_orders(self, now_ms: int) -> bool:
        if not cadence.ORDER_POLL.due(self.state, now_ms):
            return True

        plans = self.orders.get_orders(self.fleet_uuid, self.state.identifier)
        if plans is None:
            ORDER_POLLS.labels(status="failed").inc()
            logger.warning(f"| {self.state.identifier} | order poll failed, retrying next tick.")
            return False

        ORDER_POLLS.labels(status="success").inc()
        for plan in plans:
            outcome = self.scheduler.ingest(self.state, plan)
            ORDERS_RECEIVED.labels(outcome=outcome.value).inc()
            self.orders.acknowledge_order(plan.flight_id, self.state.identifier)

        cadence.ORDER_POLL.fired(self.state, now_ms)
        return True

    # ============================================
    # Main Loop
    # ============================================

    def run(self, max_ticks: Optional[int] = None):
        """
        Tick at a fixed period until the process is stopped.

        FatalError propagates to the caller.
        """
        logger.info(f"({self.state.identifier}) aircraft startup.")
        ticks = 0

        while max_ticks is None or ticks < max_ticks:
            loop_start = time.monotonic()

            with TICK_LATENCY.time():
                self.tick(self.clock())
            ticks += 1

            elapsed = time.monotonic() - loop_start
            sleep_time = max(0, self.tick_interval_ms / 1000.0 - elapsed)
            if sleep_time > 0:
                time.sleep(sleep_time)
