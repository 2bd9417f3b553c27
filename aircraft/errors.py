"""
Error taxonomy for the aircraft simulator.

NetworkError subclasses are recoverable: the affected operation is skipped
and retried on the next eligible cycle. FatalError subclasses stop the
process.
"""


class AircraftError(Exception):
    """Base class for simulator errors."""


class NetworkError(AircraftError):
    """A remote call failed."""


class UnauthorizedError(NetworkError):
    """The network identity service rejected the token."""


class TransientError(NetworkError):
    """Connection, timeout, unexpected status or unparseable response."""


class FatalError(AircraftError):
    """Unrecoverable condition; the process must stop."""


class TokenExhaustedError(FatalError):
    """Token acquisition failed more times than the retry bound allows."""

    def __init__(self, identifier: str, attempts: int):
        super().__init__(
            f"({identifier}) could not acquire token, exhausted all retries ({attempts} attempts)"
        )
        self.identifier = identifier
        self.attempts = attempts


class EncodeError(FatalError):
    """A Remote ID field could not be encoded; an internal invariant was violated."""
