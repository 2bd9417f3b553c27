"""
Validation library for the aircraft simulator's service contracts.

Provides Pydantic models for the JSON bodies exchanged with the order (ATC)
and cargo services. Clients validate every inbound payload before it touches
the simulation and every outbound body before it is sent.
"""

from typing import Optional, Literal
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator

from contracts.constants import ACK_STATUS_CONFIRM, UAS_ID_LENGTH


def _parse_datetime(v):
    """Parse ISO 8601 datetime string; times without an offset are UTC."""
    if isinstance(v, str):
        v = datetime.fromisoformat(v.replace("Z", "+00:00"))
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


def is_uas_id(value: str) -> bool:
    """Whether value fits the fixed-width ASCII Remote ID field."""
    return value.isascii() and 0 < len(value) <= UAS_ID_LENGTH


# ============================================================================
# Shared Components
# ============================================================================

class PointZ(BaseModel):
    """Waypoint with altitude."""
    longitude: float = Field(ge=-180, le=180, description="Longitude in degrees (WGS84)")
    latitude: float = Field(ge=-90, le=90, description="Latitude in degrees (WGS84)")
    altitude_meters: float = 0.0


class CargoInfo(BaseModel):
    """Single manifest item."""
    id: str = Field(min_length=1)


# ============================================================================
# Flight Plan Payload (ATC -> aircraft)
# ============================================================================

class FlightPlanPayload(BaseModel):
    """Delivery flight plan as announced by the order service."""
    flight_uuid: str = Field(min_length=1)
    session_id: str = Field(min_length=1, max_length=UAS_ID_LENGTH)
    origin_timeslot_start: datetime
    origin_timeslot_end: datetime
    target_timeslot_start: datetime
    target_timeslot_end: Optional[datetime] = None
    path: list[PointZ] = Field(default_factory=list)
    acquire: list[CargoInfo] = Field(default_factory=list)
    deliver: list[CargoInfo] = Field(default_factory=list)

    @field_validator(
        "origin_timeslot_start",
        "origin_timeslot_end",
        "target_timeslot_start",
        "target_timeslot_end",
        mode="before",
    )
    @classmethod
    def parse_timeslot(cls, v):
        """Parse ISO 8601 datetime string."""
        return _parse_datetime(v)

    @field_validator("session_id")
    @classmethod
    def session_id_is_ascii(cls, v):
        """Broadcast as the Remote ID while the plan is current."""
        if not v.isascii():
            raise ValueError("session_id must be ASCII")
        return v

    @field_validator("path", "acquire", "deliver", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        """Treat a null list as an empty one."""
        return [] if v is None else v


# ============================================================================
# Outbound Bodies (aircraft -> ATC / cargo)
# ============================================================================

class AckRequest(BaseModel):
    """Acknowledgement of a received flight plan."""
    fp_id: str = Field(min_length=1)
    status: Literal["Confirm", "Deny"] = ACK_STATUS_CONFIRM


class CargoScan(BaseModel):
    """Parcel scan reported when cargo is picked up or delivered."""
    scanner_id: str = Field(min_length=1)
    cargo_id: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    timestamp: datetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        """Parse ISO 8601 datetime string."""
        return _parse_datetime(v)


# ============================================================================
# Validation Functions
# ============================================================================

def validate_flight_plan_payload(data: dict) -> tuple[bool, Optional[FlightPlanPayload], Optional[str]]:
    """
    Validate FlightPlanPayload.

    Returns:
        (is_valid, payload_or_none, error_message_or_none)
    """
    try:
        payload = FlightPlanPayload(**data)
        return True, payload, None
    except Exception as e:
        return False, None, str(e)


def validate_ack_request(data: dict) -> tuple[bool, Optional[AckRequest], Optional[str]]:
    """
    Validate AckRequest.

    Returns:
        (is_valid, request_or_none, error_message_or_none)
    """
    try:
        request = AckRequest(**data)
        return True, request, None
    except Exception as e:
        return False, None, str(e)


def validate_cargo_scan(data: dict) -> tuple[bool, Optional[CargoScan], Optional[str]]:
    """
    Validate CargoScan.

    Returns:
        (is_valid, scan_or_none, error_message_or_none)
    """
    try:
        scan = CargoScan(**data)
        return True, scan, None
    except Exception as e:
        return False, None, str(e)
