"""
dctrack-client - async client for the dcTrack datacenter asset-tracking API.

The package retrieves inventory items through an authenticated, paginated,
retrying fetch pipeline and normalizes the service's loosely-typed records
into immutable `Item` models:

- Per-operation login with the bearer token kept local to the operation
- Page-by-page retrieval with short-page termination
- Bounded, fixed-delay retries for transport and HTTP status failures
- Alias-aware, total field coercion for drifting wire schemas
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from dctrack.client import DCTrackClient, fetch_items_sync
from dctrack.config import Settings, get_settings
from dctrack.domain import (
    Credentials,
    FieldSet,
    FilterSpec,
    Item,
    Token,
    build_fields_payload,
    by_location,
    by_vendor,
    installed_only,
    power_assets,
    with_power,
)
from dctrack.errors import (
    APIError,
    AuthError,
    AuthFailure,
    ConfigurationError,
    DCTrackError,
    DecodeError,
    FetchError,
    FetchTimeoutError,
    MappingError,
    NotFoundError,
    TransportError,
)
from dctrack.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Client
    "DCTrackClient",
    "fetch_items_sync",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Credentials",
    "FieldSet",
    "FilterSpec",
    "Item",
    "Token",
    "build_fields_payload",
    "by_location",
    "by_vendor",
    "installed_only",
    "power_assets",
    "with_power",
    # Errors
    "APIError",
    "AuthError",
    "AuthFailure",
    "ConfigurationError",
    "DCTrackError",
    "DecodeError",
    "FetchError",
    "FetchTimeoutError",
    "MappingError",
    "NotFoundError",
    "TransportError",
    # Logging
    "configure_logging",
    "get_logger",
]
