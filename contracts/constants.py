"""
Shared constants for the aircraft simulator.

This module provides a single source of truth for:
- Service endpoint paths
- Remote ID message types and field codes
- Reporting cadences and scheduling limits

All modules should import from this module to ensure consistency.
"""

# Service Endpoints (relative to each service's base url)
TELEMETRY_LOGIN_PATH = "/telemetry/login"
TELEMETRY_NETRID_PATH = "/telemetry/netrid"
ATC_PLANS_PATH = "/plans"
ATC_ACKNOWLEDGE_PATH = "/acknowledge"
CARGO_SCAN_PATH = "/scan"

# Acknowledgement Status
ACK_STATUS_CONFIRM = "Confirm"

# Remote ID Message Types (header high nibble)
MESSAGE_TYPE_BASIC = 0x0
MESSAGE_TYPE_LOCATION = 0x1
PROTOCOL_VERSION = 0x2
MESSAGE_SIZE_BYTES = 25
UAS_ID_LENGTH = 20

# Remote ID Id Types
ID_TYPE_CAA_ASSIGNED = 2
ID_TYPE_SPECIFIC_SESSION = 4

# Remote ID UA Types
UA_TYPE_ROTORCRAFT = 2

# Remote ID Operational Status
OPERATIONAL_STATUS_GROUND = 1
OPERATIONAL_STATUS_AIRBORNE = 2

# Remote ID Height Types
HEIGHT_TYPE_ABOVE_GROUND_LEVEL = 1

# Remote ID Accuracy Codes
HORIZONTAL_ACCURACY_LT_1M = 12
VERTICAL_ACCURACY_LT_1M = 6
SPEED_ACCURACY_LT_1MPS = 3

# Reporting Cadences (milliseconds)
ID_UPDATE_INTERVAL_MS = 2000
POSITION_UPDATE_INTERVAL_MS = 500
ORDER_POLL_INTERVAL_MS = 15000
TICK_INTERVAL_MS = 50

# Motion
ARRIVAL_RADIUS_M = 10.0
EARTH_RADIUS_M = 6371008.8

# Scheduling
RECENT_HISTORY_CAPACITY = 10

# Token Lifecycle
TOKEN_MAX_RETRIES = 5
TOKEN_RETRY_BACKOFF_MS = 5000
