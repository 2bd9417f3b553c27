"""
Aircraft Simulator Contracts Package

Provides shared constants and validation for service payload contracts.
"""

from contracts.constants import *
from contracts.validation import (
    PointZ,
    CargoInfo,
    FlightPlanPayload,
    AckRequest,
    CargoScan,
    validate_flight_plan_payload,
    validate_ack_request,
    validate_cargo_scan,
    is_uas_id,
)

__all__ = [
    # Constants
    "TELEMETRY_LOGIN_PATH",
    "TELEMETRY_NETRID_PATH",
    "ATC_PLANS_PATH",
    "ATC_ACKNOWLEDGE_PATH",
    "CARGO_SCAN_PATH",
    "MESSAGE_TYPE_BASIC",
    "MESSAGE_TYPE_LOCATION",
    "ID_TYPE_CAA_ASSIGNED",
    "ID_TYPE_SPECIFIC_SESSION",
    "OPERATIONAL_STATUS_GROUND",
    "OPERATIONAL_STATUS_AIRBORNE",
    # Models
    "PointZ",
    "CargoInfo",
    "FlightPlanPayload",
    "AckRequest",
    "CargoScan",
    # Validators
    "validate_flight_plan_payload",
    "validate_ack_request",
    "validate_cargo_scan",
    "is_uas_id",
]
