"""
Motion engine.

Constant-velocity great-circle legs: velocity and heading are fixed per leg
and only recomputed on arrival at a waypoint or on plan activation.
"""

import logging

from contracts.constants import ARRIVAL_RADIUS_M
from aircraft.geodesy import distance_meters, bearing_degrees, destination
from aircraft.models import AircraftState

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_GROUND_SPEED_M_S = 10.0


def recompute_velocity(state: AircraftState, now_ms: int = 0,
                       fallback_speed_m_s: float = DEFAULT_FALLBACK_GROUND_SPEED_M_S):
    """
    Derive vertical velocity and heading for the leg to the next waypoint.

    Time to the next waypoint is estimated from the current ground speed. A
    non-positive ground speed is replaced by fallback_speed_m_s.
    """
    plan = state.current_plan
    if plan is None:
        return

    next_point = plan.next_waypoint()
    if next_point is None:
        logger.info(f"| {state.identifier} | {now_ms} | no more points in plan.")
        return

    if state.ground_velocity_m_s <= 0:
        logger.warning(
            f"| {state.identifier} | {now_ms} | ground speed is {state.ground_velocity_m_s} m/s, "
            f"falling back to {fallback_speed_m_s} m/s"
        )
        state.ground_velocity_m_s = fallback_speed_m_s

    distance = distance_meters(state.position.lonlat, next_point.lonlat)
    time_to_next_point_s = distance / state.ground_velocity_m_s

    if time_to_next_point_s > 0:
        state.vertical_velocity_m_s = (
            (next_point.altitude - state.position.altitude) / time_to_next_point_s
        )
    else:
        state.vertical_velocity_m_s = 0.0

    state.track_angle_deg = bearing_degrees(state.position.lonlat, next_point.lonlat)

    logger.debug(
        f"| {state.identifier} | {now_ms} | next point: {next_point} in {time_to_next_point_s:.1f} s"
    )
    logger.info(
        f"| {state.identifier} | {now_ms} | adjusted velocity; "
        f"hor m/s: {state.ground_velocity_m_s:.2f}, vert m/s: {state.vertical_velocity_m_s:.2f}, "
        f"bearing (deg): {state.track_angle_deg:.1f}"
    )


def advance(state: AircraftState, now_ms: int, last_ms: int,
            arrival_radius_m: float = ARRIVAL_RADIUS_M,
            fallback_speed_m_s: float = DEFAULT_FALLBACK_GROUND_SPEED_M_S) -> bool:
    """
    Integrate position over the time elapsed since last_ms.

    Returns:
        True if the aircraft arrived at a waypoint during this step.
    """
    plan = state.current_plan
    if plan is None:
        return False

    # A wall clock stepping backwards never moves the aircraft backwards
    elapsed_s = max(0, now_ms - last_ms) / 1000.0
    state.position.altitude += state.vertical_velocity_m_s * elapsed_s

    horizontal_travel_distance_m = state.ground_velocity_m_s * elapsed_s
    longitude, latitude = destination(
        state.position.lonlat, state.track_angle_deg, horizontal_travel_distance_m
    )
    state.position.longitude = longitude
    state.position.latitude = latitude

    next_point = plan.next_waypoint()
    if next_point is None:
        return False

    if distance_meters(state.position.lonlat, next_point.lonlat) >= arrival_radius_m:
        return False

    logger.info(f"| {state.identifier} | {now_ms} | arrived at intermediate point.")
    plan.pop_waypoint()
    recompute_velocity(state, now_ms, fallback_speed_m_s)
    return True
