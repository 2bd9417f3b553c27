"""
Cargo service client - reports parcel scans on pickup and delivery.

Scans are advisory telemetry: every failure is logged and reported as False,
never raised.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from contracts.constants import CARGO_SCAN_PATH
from contracts.validation import validate_cargo_scan

logger = logging.getLogger(__name__)


class CargoClient:
    """Client for the cargo service."""

    def __init__(self, base_url: str, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def scan_parcel(
        self,
        identifier: str,
        scanner_id: str,
        cargo_id: str,
        latitude: float,
        longitude: float,
    ) -> bool:
        """
        Report a parcel scan at the given position.

        Returns:
            True if the cargo service accepted the scan, False otherwise.
        """
        body = {
            "scanner_id": scanner_id,
            "cargo_id": cargo_id,
            "latitude": latitude,
            "longitude": longitude,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        is_valid, scan, error = validate_cargo_scan(body)
        if not is_valid:
            logger.error(f"({identifier}) invalid parcel scan for {cargo_id}: {error}")
            return False

        try:
            response = self.session.put(
                f"{self.base_url}{CARGO_SCAN_PATH}",
                data=scan.model_dump_json(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"({identifier}) could not issue parcel scan for {cargo_id}: {e}")
            return False

        if response.status_code != 200:
            logger.error(
                f"({identifier}) could not issue parcel scan for {cargo_id}: HTTP {response.status_code}"
            )
            return False

        logger.info(f"| {identifier} | scanned parcel {cargo_id}.")
        return True
