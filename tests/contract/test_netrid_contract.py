"""
Contract tests for the Remote ID frames posted to the network identity service.

Validates frame size, message type tags and field encodings.
These tests run independently (no services required).
"""

import struct
import pytest
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from contracts.constants import (
    MESSAGE_SIZE_BYTES,
    MESSAGE_TYPE_BASIC,
    MESSAGE_TYPE_LOCATION,
    ID_TYPE_CAA_ASSIGNED,
    ID_TYPE_SPECIFIC_SESSION,
    UA_TYPE_ROTORCRAFT,
    OPERATIONAL_STATUS_GROUND,
    OPERATIONAL_STATUS_AIRBORNE,
)
from aircraft import netrid
from aircraft.errors import EncodeError, FatalError
from aircraft.models import AircraftState, FlightPlan, Position, Waypoint


def make_state(**kwargs) -> AircraftState:
    state = AircraftState(
        identifier="AETH-00042",
        scanner_id="scanner-1",
        position=Position(5.133053153910531, 52.64237411858314, 120.0),
    )
    for key, value in kwargs.items():
        setattr(state, key, value)
    return state


FIXED_NOW = datetime(2026, 1, 9, 12, 34, 56, 700000, tzinfo=timezone.utc)


class TestBasicMessage:
    """Basic ID message layout."""

    def test_basic_message_size_and_type(self):
        frame = netrid.pack_basic_message(ID_TYPE_CAA_ASSIGNED, "AETH-00042")

        assert len(frame) == MESSAGE_SIZE_BYTES
        assert netrid.message_type(frame) == MESSAGE_TYPE_BASIC

    def test_basic_message_id_and_types(self):
        frame = netrid.pack_basic_message(ID_TYPE_SPECIFIC_SESSION, "session-7")

        assert frame[1] >> 4 == ID_TYPE_SPECIFIC_SESSION
        assert frame[1] & 0x0F == UA_TYPE_ROTORCRAFT
        assert frame[2:22] == b" " * 11 + b"session-7"
        assert frame[22:] == b"\x00\x00\x00"

    def test_uas_id_is_right_aligned_and_space_padded(self):
        assert netrid.format_uas_id("AETH-00042") == b" " * 10 + b"AETH-00042"
        assert netrid.format_uas_id("X" * 20) == b"X" * 20

    def test_overlong_uas_id_is_fatal(self):
        with pytest.raises(EncodeError):
            netrid.format_uas_id("X" * 21)

        # Encode failures are invariant violations, not retryable network errors
        assert issubclass(EncodeError, FatalError)

    def test_non_ascii_uas_id_is_fatal(self):
        with pytest.raises(EncodeError):
            netrid.format_uas_id("AÉTH")


class TestLocationMessage:
    """Location message layout and field encodings."""

    def test_location_message_size_and_type(self):
        frame = netrid.pack_location_message(make_state(), FIXED_NOW)

        assert len(frame) == MESSAGE_SIZE_BYTES
        assert netrid.message_type(frame) == MESSAGE_TYPE_LOCATION

    def test_location_latitude_longitude_fields(self):
        frame = netrid.pack_location_message(make_state(), FIXED_NOW)
        latitude, longitude = struct.unpack_from("<ii", frame, 5)

        assert latitude == 526423741
        assert longitude == 51330532

    def test_operational_status_follows_current_plan(self):
        idle = make_state()
        assert netrid.location_fields(idle, FIXED_NOW).operational_status == OPERATIONAL_STATUS_GROUND

        cruising = make_state(current_plan=FlightPlan(
            flight_id="f", session_id="s",
            origin_window_start_ms=0, origin_window_end_ms=0, target_window_start_ms=0,
            path=deque([Waypoint(5.0, 52.0, 0.0)]),
        ))
        fields = netrid.location_fields(cruising, FIXED_NOW)
        assert fields.operational_status == OPERATIONAL_STATUS_AIRBORNE

        frame = netrid.pack_location_message(cruising, FIXED_NOW)
        assert frame[1] >> 4 == OPERATIONAL_STATUS_AIRBORNE

    def test_timestamp_is_tenths_since_hour(self):
        assert netrid.encode_timestamp(FIXED_NOW) == (34 * 60 + 56) * 10 + 7

    def test_naive_timestamp_is_rejected(self):
        with pytest.raises(EncodeError):
            netrid.encode_timestamp(datetime(2026, 1, 9, 12, 0, 0))

    def test_direction_encoding(self):
        assert netrid.encode_direction(0.0) == (0, 0)
        assert netrid.encode_direction(179.9) == (0, 179)
        assert netrid.encode_direction(180.0) == (1, 0)
        assert netrid.encode_direction(359.5) == (1, 179)

        with pytest.raises(EncodeError):
            netrid.encode_direction(360.0)

    def test_speed_encoding(self):
        assert netrid.encode_speed(0.0) == (0, 0)
        assert netrid.encode_speed(5.0) == (0, 20)
        assert netrid.encode_speed(63.75) == (0, 255)
        assert netrid.encode_speed(64.5) == (1, 1)
        assert netrid.encode_speed(1000.0) == (1, 254)

        with pytest.raises(EncodeError):
            netrid.encode_speed(-1.0)

    def test_vertical_speed_is_clamped(self):
        assert netrid.encode_vertical_speed(5.0) == 10
        assert netrid.encode_vertical_speed(-2.5) == -5
        assert netrid.encode_vertical_speed(100.0) == 124
        assert netrid.encode_vertical_speed(-100.0) == -124

    def test_altitude_encoding(self):
        assert netrid.encode_altitude(0.0) == 2000
        assert netrid.encode_altitude(120.0) == 2240
        assert netrid.encode_altitude(-2000.0) == 0

        frame = netrid.pack_location_message(make_state(), FIXED_NOW)
        pressure, geodetic, height = struct.unpack_from("<HHH", frame, 13)
        assert pressure == geodetic == height == 2240
