"""
Remote ID message packing.

Builds the 25-byte Basic ID and Location messages posted to the network
identity service. Layout follows ASTM F3411 broadcast messages; all
multi-byte fields are little-endian.

Encoding failures are internal invariant violations and raise EncodeError.
"""

import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from contracts.constants import (
    MESSAGE_TYPE_BASIC,
    MESSAGE_TYPE_LOCATION,
    PROTOCOL_VERSION,
    MESSAGE_SIZE_BYTES,
    UAS_ID_LENGTH,
    UA_TYPE_ROTORCRAFT,
    OPERATIONAL_STATUS_GROUND,
    OPERATIONAL_STATUS_AIRBORNE,
    HEIGHT_TYPE_ABOVE_GROUND_LEVEL,
    HORIZONTAL_ACCURACY_LT_1M,
    VERTICAL_ACCURACY_LT_1M,
    SPEED_ACCURACY_LT_1MPS,
)
from aircraft.errors import EncodeError
from aircraft.models import Activity, AircraftState

# <B header><B status><B track><B speed><b vspeed><i lat><i lon>
# <H pressure alt><H geodetic alt><H height><B v/h accuracy><B baro/speed accuracy>
# <H timestamp><B timestamp accuracy><B reserved>
_LOCATION_STRUCT = struct.Struct("<BBBBbiiHHHBBHBB")
_BASIC_STRUCT = struct.Struct(f"<BB{UAS_ID_LENGTH}s3x")

SPEED_STEP_LOW = 0.25
SPEED_STEP_HIGH = 0.75
SPEED_LOW_MAX = 255 * SPEED_STEP_LOW  # 63.75 m/s
SPEED_CODE_MAX = 254
VERTICAL_SPEED_STEP = 0.5
VERTICAL_SPEED_MAX_M_S = 62.0
ALTITUDE_OFFSET_M = 1000.0
ALTITUDE_STEP = 0.5
ALTITUDE_INVALID = 0
LATLON_SCALE = 1e7


def _header(message_type: int) -> int:
    return (message_type << 4) | PROTOCOL_VERSION


def format_uas_id(uas_id: str) -> bytes:
    """Right-align the id in a fixed 20-byte, space-padded ASCII field."""
    try:
        encoded = f"{uas_id:>{UAS_ID_LENGTH}}".encode("ascii")
    except UnicodeEncodeError as e:
        raise EncodeError(f"({uas_id}) could not convert identifier to ASCII: {e}") from e

    if len(encoded) != UAS_ID_LENGTH:
        raise EncodeError(
            f"({uas_id}) could not convert identifier to [u8; {UAS_ID_LENGTH}]: "
            f"length is {len(encoded)}"
        )
    return encoded


def encode_direction(track_deg: float) -> Tuple[int, int]:
    """Returns (ew_direction, track_direction)."""
    track = int(track_deg)
    if track < 0 or track >= 360:
        raise EncodeError(f"could not encode direction {track_deg}")
    if track < 180:
        return 0, track
    return 1, track - 180


def encode_speed(speed_m_s: float) -> Tuple[int, int]:
    """Returns (speed_multiplier, speed)."""
    if speed_m_s < 0:
        raise EncodeError(f"could not encode speed {speed_m_s}")
    if speed_m_s <= SPEED_LOW_MAX:
        return 0, min(int(speed_m_s / SPEED_STEP_LOW), 255)
    code = int((speed_m_s - SPEED_LOW_MAX) / SPEED_STEP_HIGH)
    return 1, min(code, SPEED_CODE_MAX)


def encode_vertical_speed(vertical_speed_m_s: float) -> int:
    clamped = max(-VERTICAL_SPEED_MAX_M_S, min(VERTICAL_SPEED_MAX_M_S, vertical_speed_m_s))
    return int(clamped / VERTICAL_SPEED_STEP)


def encode_latitude(latitude: float) -> int:
    if not -90.0 <= latitude <= 90.0:
        raise EncodeError(f"could not encode latitude {latitude}")
    return int(round(latitude * LATLON_SCALE))


def encode_longitude(longitude: float) -> int:
    if not -180.0 <= longitude <= 180.0:
        raise EncodeError(f"could not encode longitude {longitude}")
    return int(round(longitude * LATLON_SCALE))


def encode_altitude(altitude_m: float) -> int:
    code = int((altitude_m + ALTITUDE_OFFSET_M) / ALTITUDE_STEP)
    return max(ALTITUDE_INVALID, min(0xFFFF, code))


def encode_timestamp(now: datetime) -> int:
    """Tenths of a second since the start of the current hour."""
    if now.tzinfo is None:
        raise EncodeError("could not encode timestamp: naive datetime")
    tenths = (now.minute * 60 + now.second) * 10 + now.microsecond // 100000
    return tenths


def operational_status(activity: Activity) -> int:
    if activity == Activity.CRUISE:
        return OPERATIONAL_STATUS_AIRBORNE
    return OPERATIONAL_STATUS_GROUND


@dataclass(frozen=True)
class LocationFields:
    """Encoded Location message fields, exposed for inspection and tests."""
    operational_status: int
    ew_direction: int
    speed_multiplier: int
    track_direction: int
    speed: int
    vertical_speed: int
    latitude: int
    longitude: int
    altitude: int
    timestamp: int


def pack_basic_message(id_type: int, uas_id: str, ua_type: int = UA_TYPE_ROTORCRAFT) -> bytes:
    """Pack a Basic ID message."""
    payload = _BASIC_STRUCT.pack(
        _header(MESSAGE_TYPE_BASIC),
        ((id_type & 0x0F) << 4) | (ua_type & 0x0F),
        format_uas_id(uas_id),
    )
    if len(payload) != MESSAGE_SIZE_BYTES:
        raise EncodeError(f"({uas_id}) could not pack BasicMessage")
    return payload


def location_fields(state: AircraftState, now: Optional[datetime] = None) -> LocationFields:
    """Encode the aircraft state into Location message field values."""
    now = now or datetime.now(timezone.utc)
    ew_direction, track_direction = encode_direction(state.track_angle_deg)
    speed_multiplier, speed = encode_speed(state.ground_velocity_m_s)
    return LocationFields(
        operational_status=operational_status(state.activity),
        ew_direction=ew_direction,
        speed_multiplier=speed_multiplier,
        track_direction=track_direction,
        speed=speed,
        vertical_speed=encode_vertical_speed(state.vertical_velocity_m_s),
        latitude=encode_latitude(state.position.latitude),
        longitude=encode_longitude(state.position.longitude),
        altitude=encode_altitude(state.position.altitude),
        timestamp=encode_timestamp(now),
    )


def pack_location_message(state: AircraftState, now: Optional[datetime] = None) -> bytes:
    """Pack a Location message for the current aircraft state."""
    f = location_fields(state, now)
    status = (
        (f.operational_status << 4)
        | (HEIGHT_TYPE_ABOVE_GROUND_LEVEL << 2)
        | (f.ew_direction << 1)
        | f.speed_multiplier
    )
    try:
        payload = _LOCATION_STRUCT.pack(
            _header(MESSAGE_TYPE_LOCATION),
            status,
            f.track_direction,
            f.speed,
            f.vertical_speed,
            f.latitude,
            f.longitude,
            f.altitude,  # pressure altitude
            f.altitude,  # geodetic altitude
            f.altitude,  # height
            (VERTICAL_ACCURACY_LT_1M << 4) | HORIZONTAL_ACCURACY_LT_1M,
            (VERTICAL_ACCURACY_LT_1M << 4) | SPEED_ACCURACY_LT_1MPS,
            f.timestamp,
            0,
            0,
        )
    except struct.error as e:
        raise EncodeError(f"({state.identifier}) could not pack LocationMessage: {e}") from e

    if len(payload) != MESSAGE_SIZE_BYTES:
        raise EncodeError(f"({state.identifier}) could not pack LocationMessage")
    return payload


def message_type(frame: bytes) -> int:
    """Message type tag of a packed frame."""
    return frame[0] >> 4
