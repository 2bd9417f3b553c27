"""
Network identity (telemetry) service client.

Acquires a bearer token and posts packed Remote ID frames. Token bookkeeping
(retries, invalidation) lives in aircraft.session; this client only maps
HTTP outcomes onto the error taxonomy.
"""

import logging
from typing import Optional

import requests

from contracts.constants import TELEMETRY_LOGIN_PATH, TELEMETRY_NETRID_PATH
from aircraft.errors import UnauthorizedError, TransientError
from aircraft.models import AircraftState
from aircraft import netrid

logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUS_CODES = (401, 403)


class TelemetryClient:
    """Client for the network identity service."""

    def __init__(self, base_url: str, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def acquire_token(self, identifier: str) -> str:
        """
        Log in with the aircraft identifier.

        Returns:
            The bearer token.

        Raises:
            UnauthorizedError: the service refused the identifier.
            TransientError: connection failure or unreadable response.
        """
        url = f"{self.base_url}{TELEMETRY_LOGIN_PATH}"
        logger.info(f"| {identifier} | acquiring token from {url}.")

        try:
            response = self.session.get(
                url,
                data=identifier.encode(),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransientError(f"({identifier}) could not acquire token: {e}") from e

        if response.status_code in UNAUTHORIZED_STATUS_CODES:
            raise UnauthorizedError(f"({identifier}) could not acquire token: HTTP {response.status_code}")
        if response.status_code != 200:
            raise TransientError(f"({identifier}) could not acquire token: HTTP {response.status_code}")

        token = response.text.strip().strip('"').replace('"', "")
        if not token:
            raise TransientError(f"({identifier}) could not acquire token: empty response")

        logger.info(f"| {identifier} | acquired token.")
        return token

    def _post_frame(self, token: str, frame: bytes, identifier: str, kind: str):
        try:
            response = self.session.post(
                f"{self.base_url}{TELEMETRY_NETRID_PATH}",
                data=frame,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Authorization": f"Bearer {token}",
                },
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransientError(f"({identifier}) could not issue {kind} update: {e}") from e

        if response.status_code in UNAUTHORIZED_STATUS_CODES:
            raise UnauthorizedError(f"({identifier}) could not issue {kind} update: HTTP {response.status_code}")
        if response.status_code != 200:
            raise TransientError(f"({identifier}) could not issue {kind} update: HTTP {response.status_code}")

    def id_update(self, token: str, id_type: int, uas_id: str):
        """Broadcast a Basic ID message for uas_id."""
        frame = netrid.pack_basic_message(id_type, uas_id)
        self._post_frame(token, frame, uas_id, "id")
        logger.debug(f"({uas_id}) issued id update.")

    def position_update(self, token: str, state: AircraftState):
        """Broadcast a Location message for the current aircraft state."""
        frame = netrid.pack_location_message(state)
        self._post_frame(token, frame, state.identifier, "position")
        logger.debug(f"({state.identifier}) issued position update.")
