"""
Exceptions raised by secondseat.

Nothing here is retried automatically. Every error propagates to the
command line, which reports it and exits non-zero.
"""

from enum import Enum, auto


class SecondSeatError(Exception):
    """Base exception for secondseat errors."""
    pass


class GatewayError(SecondSeatError):
    """Raised when a call into the X input environment fails."""
    pass


class QueryFailure(GatewayError):
    """
    Raised when the device listing cannot be obtained or parsed.

    One malformed record fails the whole listing rather than being
    dropped, so that no device can slip past later validation.
    """
    pass


class PairingFailure(Enum):
    """Why a candidate set is not a valid primary pair."""
    WRONG_COUNT = auto()
    TYPE_MISMATCH = auto()
    LINK_MISMATCH = auto()


class PairingError(SecondSeatError):
    """Raised when candidates do not form a consistent primary pair."""

    def __init__(self, reason: PairingFailure, message: str):
        super().__init__(message)
        self.reason = reason


class DetectionError(SecondSeatError):
    """Raised when a detection step does not find exactly one device."""
    pass
