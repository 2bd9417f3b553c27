"""
Order service (ATC) client - fetches and acknowledges delivery flight plans.
"""

import json
import logging
from typing import Optional, List

import requests

from contracts.constants import ATC_PLANS_PATH, ATC_ACKNOWLEDGE_PATH, ACK_STATUS_CONFIRM
from contracts.validation import validate_flight_plan_payload, validate_ack_request
from aircraft.metrics import ORDERS_RECEIVED
from aircraft.models import FlightPlan

logger = logging.getLogger(__name__)


class OrdersClient:
    """Client for the fleet-coordination order service."""

    def __init__(self, base_url: str, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_orders(self, fleet_uuid: str, callsign: str) -> Optional[List[FlightPlan]]:
        """
        Fetch flight plans assigned to this aircraft.

        Payload entries that fail validation are dropped with a warning.

        Returns:
            List of plans (possibly empty), or None if the poll failed.
        """
        try:
            response = self.session.get(
                f"{self.base_url}{ATC_PLANS_PATH}",
                data=fleet_uuid,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"({callsign}) request to acquire plans failed: {e}")
            return None

        if response.status_code != 200:
            logger.error(f"({callsign}) could not acquire plans: HTTP {response.status_code}")
            return None

        try:
            entries = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"({callsign}) could not parse plans: {e}")
            return None

        if not isinstance(entries, list):
            logger.error(f"({callsign}) could not parse plans: expected a list, got {type(entries).__name__}")
            return None

        plans = []
        for entry in entries:
            if not isinstance(entry, dict):
                logger.warning(f"({callsign}) skipping malformed plan entry: {entry!r}")
                ORDERS_RECEIVED.labels(outcome="invalid").inc()
                continue

            is_valid, payload, error = validate_flight_plan_payload(entry)
            if not is_valid:
                logger.warning(f"({callsign}) invalid flight plan payload: {error}")
                ORDERS_RECEIVED.labels(outcome="invalid").inc()
                continue

            plans.append(FlightPlan.from_payload(payload))

        if plans:
            logger.info(f"| {callsign} | acquired {len(plans)} plans.")
            for plan in plans:
                logger.debug(f"| {callsign} | plan: {plan}")

        return plans

    def acknowledge_order(self, flight_id: str, callsign: str) -> bool:
        """
        Confirm receipt of a flight plan.

        Returns:
            True if the order service accepted the acknowledgement.
        """
        is_valid, request, error = validate_ack_request(
            {"fp_id": flight_id, "status": ACK_STATUS_CONFIRM}
        )
        if not is_valid:
            logger.error(f"| {callsign} | invalid acknowledgement for {flight_id}: {error}")
            return False

        url = f"{self.base_url}{ATC_ACKNOWLEDGE_PATH}"
        logger.info(f"| {callsign} | confirming flight_id {flight_id} at {url}.")

        try:
            response = self.session.post(
                url,
                data=request.model_dump_json(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"| {callsign} | request to confirm flight plan failed: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"| {callsign} | could not confirm flight plan: HTTP {response.status_code}")
            return False

        return True
