"""
Authorization token lifecycle.

NoToken -> HasToken on a successful acquisition. Failed acquisitions are
retried after a fixed backoff, up to a bound; exceeding the bound is fatal.
Any failed dependent call drops the token.
"""

import logging
from typing import Optional

from contracts.constants import TOKEN_MAX_RETRIES, TOKEN_RETRY_BACKOFF_MS
from aircraft.errors import NetworkError, UnauthorizedError, TokenExhaustedError
from aircraft.metrics import TOKEN_ACQUISITIONS, TOKEN_INVALIDATIONS
from aircraft.models import AircraftState

logger = logging.getLogger(__name__)


class TokenSession:
    """Tracks the aircraft's bearer token on AircraftState.token."""

    def __init__(self, telemetry, max_retries: int = TOKEN_MAX_RETRIES,
                 backoff_ms: int = TOKEN_RETRY_BACKOFF_MS):
        self.telemetry = telemetry
        self.max_retries = max_retries
        self.backoff_ms = backoff_ms
        self.retries = 0
        self._retry_at_ms: Optional[int] = None

    def ensure_token(self, state: AircraftState, now_ms: int) -> Optional[str]:
        """
        Return a usable token, acquiring one if needed.

        Returns None while waiting out the backoff after a failed attempt.

        Raises:
            TokenExhaustedError: more than max_retries consecutive failures.
        """
        if state.token is not None:
            return state.token

        if self._retry_at_ms is not None and now_ms < self._retry_at_ms:
            return None

        try:
            token = self.telemetry.acquire_token(state.identifier)
        except NetworkError as e:
            TOKEN_ACQUISITIONS.labels(status="failed").inc()
            self.retries += 1
            logger.warning(f"{e} (attempt {self.retries}/{self.max_retries + 1})")
            if self.retries > self.max_retries:
                raise TokenExhaustedError(state.identifier, self.retries) from e
            self._retry_at_ms = now_ms + self.backoff_ms
            return None

        TOKEN_ACQUISITIONS.labels(status="success").inc()
        state.token = token
        self.retries = 0
        self._retry_at_ms = None
        return token

    def invalidate(self, state: AircraftState, error: NetworkError):
        """Drop the token after a failed dependent call."""
        if state.token is None:
            return
        reason = "unauthorized" if isinstance(error, UnauthorizedError) else "transient"
        TOKEN_INVALIDATIONS.labels(reason=reason).inc()
        logger.warning(f"| {state.identifier} | discarding token ({reason}): {error}")
        state.token = None
