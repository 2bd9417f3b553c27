"""
Great-circle helpers on a spherical Earth.

Points are passed as (longitude, latitude) in degrees, matching the x/y order
used by the waypoints announced by the order service.
"""

import math
from typing import Tuple

from contracts.constants import EARTH_RADIUS_M

LonLat = Tuple[float, float]


def distance_meters(p1: LonLat, p2: LonLat) -> float:
    """Haversine distance between two points."""
    lon1, lat1 = p1
    lon2, lat2 = p2
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def bearing_degrees(p1: LonLat, p2: LonLat) -> float:
    """Initial bearing from p1 to p2 in (-180, 180]."""
    lon1, lat1 = p1
    lon2, lat2 = p2
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlmb = math.radians(lon2 - lon1)
    y = math.sin(dlmb) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlmb)
    bearing = math.degrees(math.atan2(y, x))
    # atan2 may return exactly -180
    if bearing <= -180.0:
        bearing += 360.0
    return bearing


def normalize_bearing(bearing_deg: float) -> float:
    """Fold any bearing into [0, 360)."""
    normalized = bearing_deg % 360.0
    # -1e-17 % 360 rounds to 360.0
    if normalized >= 360.0:
        normalized = 0.0
    return normalized


def destination(p: LonLat, bearing_deg: float, distance_m: float) -> LonLat:
    """Point reached from p after travelling distance_m along bearing_deg."""
    lon, lat = p
    phi1 = math.radians(lat)
    lmb1 = math.radians(lon)
    brng = math.radians(bearing_deg)
    d_div_r = distance_m / EARTH_RADIUS_M

    phi2 = math.asin(
        math.sin(phi1) * math.cos(d_div_r) +
        math.cos(phi1) * math.sin(d_div_r) * math.cos(brng)
    )
    lmb2 = lmb1 + math.atan2(
        math.sin(brng) * math.sin(d_div_r) * math.cos(phi1),
        math.cos(d_div_r) - math.sin(phi1) * math.sin(phi2)
    )
    # Wrap into [-180, 180) after crossing the antimeridian
    longitude = (math.degrees(lmb2) + 540.0) % 360.0 - 180.0
    return longitude, math.degrees(phi2)


def path_length_meters(points: list) -> float:
    """Sum of consecutive great-circle distances along a list of (lon, lat) points."""
    return sum(
        distance_meters(a, b)
        for a, b in zip(points, points[1:])
    )
