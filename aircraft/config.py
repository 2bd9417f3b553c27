"""
Process configuration.

Read from environment variables; the command line in aircraft.run may
override individual values.
"""

import os
import random
import uuid
from dataclasses import dataclass

from contracts.constants import TICK_INTERVAL_MS as DEFAULT_TICK_INTERVAL_MS, UAS_ID_LENGTH
from contracts.validation import is_uas_id

# ============================================
# Environment
# ============================================

HOST = os.getenv("HOST", "localhost")
TELEMETRY_HOST_PORT_REST = int(os.getenv("TELEMETRY_HOST_PORT_REST", "8000"))
ATC_HOST_PORT_REST = int(os.getenv("ATC_HOST_PORT_REST", "8001"))
CARGO_HOST_PORT_REST = int(os.getenv("CARGO_HOST_PORT_REST", "8002"))

AIRCRAFT_NAME = os.getenv("AIRCRAFT_NAME")
AIRCRAFT_UUID = os.getenv("AIRCRAFT_UUID")
SCANNER_ID = os.getenv("SCANNER_ID")
INITIAL_LONGITUDE = float(os.getenv("INITIAL_LONGITUDE", "5.133053153910531"))
INITIAL_LATITUDE = float(os.getenv("INITIAL_LATITUDE", "52.64237411858314"))

TICK_INTERVAL_MS = int(os.getenv("TICK_INTERVAL_MS", str(DEFAULT_TICK_INTERVAL_MS)))
FALLBACK_GROUND_SPEED_M_S = float(os.getenv("FALLBACK_GROUND_SPEED_M_S", "10.0"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "5"))
METRICS_PORT = int(os.getenv("METRICS_PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def random_identifier() -> str:
    return f"AETH-{random.randint(0, 255):05d}"


@dataclass(frozen=True)
class AircraftConfig:
    host: str
    telemetry_port: int
    atc_port: int
    cargo_port: int
    name: str
    uuid: str
    scanner_id: str
    initial_longitude: float
    initial_latitude: float
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    fallback_ground_speed_m_s: float = 10.0
    request_timeout_s: float = 5.0
    metrics_port: int = 8080
    log_level: str = "INFO"

    @property
    def telemetry_url(self) -> str:
        return f"http://{self.host}:{self.telemetry_port}"

    @property
    def atc_url(self) -> str:
        return f"http://{self.host}:{self.atc_port}"

    @property
    def cargo_url(self) -> str:
        return f"http://{self.host}:{self.cargo_port}"

    def __post_init__(self):
        # The name is broadcast as the Remote ID while idle
        if not is_uas_id(self.name):
            raise ValueError(
                f"aircraft name {self.name!r} must be 1-{UAS_ID_LENGTH} ASCII characters"
            )


def load_config(**overrides) -> AircraftConfig:
    """Build the configuration from the environment, applying non-None overrides."""
    values = dict(
        host=HOST,
        telemetry_port=TELEMETRY_HOST_PORT_REST,
        atc_port=ATC_HOST_PORT_REST,
        cargo_port=CARGO_HOST_PORT_REST,
        name=AIRCRAFT_NAME or random_identifier(),
        uuid=AIRCRAFT_UUID or str(uuid.uuid4()),
        scanner_id=SCANNER_ID or str(uuid.uuid4()),
        initial_longitude=INITIAL_LONGITUDE,
        initial_latitude=INITIAL_LATITUDE,
        tick_interval_ms=TICK_INTERVAL_MS,
        fallback_ground_speed_m_s=FALLBACK_GROUND_SPEED_M_S,
        request_timeout_s=REQUEST_TIMEOUT_SECONDS,
        metrics_port=METRICS_PORT,
        log_level=LOG_LEVEL,
    )
    values.update({k: v for k, v in overrides.items() if v is not None})
    return AircraftConfig(**values)
