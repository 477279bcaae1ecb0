"""
Error taxonomy for the dcTrack client.

Every failure surfaced by the client derives from DCTrackError so callers can
catch one base class. Transport and API failures are retried by the page
fetcher; everything else propagates immediately.
"""

from __future__ import annotations

import enum
from typing import Optional


class DCTrackError(Exception):
    """Base class for all client errors."""


class ConfigurationError(DCTrackError):
    """Required connection settings are missing or unreadable."""


class AuthFailure(str, enum.Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    MALFORMED_RESPONSE = "malformed_response"


class AuthError(DCTrackError):
    """Login did not yield a usable token. Never retried."""

    def __init__(self, reason: AuthFailure, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code


class TransportError(DCTrackError):
    """Network-level failure (connect, read, TLS, timeout)."""


class APIError(DCTrackError):
    """The service answered with a non-200 status."""

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"request failed with status {status_code}")
        self.status_code = status_code


class DecodeError(DCTrackError):
    """Response body is not JSON or matches no known envelope shape."""


class MappingError(DCTrackError):
    """A raw record failed required-field validation."""

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"missing required field: {field}")
        self.field = field


class NotFoundError(DCTrackError):
    """A requested item id was not among the retrieved items."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"item with ID {item_id} not found")
        self.item_id = item_id


class FetchError(DCTrackError):
    """All retry attempts for a page failed; wraps the last cause."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"all {attempts} retry attempts failed, last error: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class FetchTimeoutError(DCTrackError, TimeoutError):
    """The operation deadline expired before the fetch completed."""


__all__ = [
    "DCTrackError",
    "ConfigurationError",
    "AuthFailure",
    "AuthError",
    "TransportError",
    "APIError",
    "DecodeError",
    "MappingError",
    "NotFoundError",
    "FetchError",
    "FetchTimeoutError",
]
