"""
Domain package for the dcTrack client.

Exports the typed inventory model, credential/token value objects, and the
filter specification used to narrow item fetches. Keep this package free of
network concerns.
"""

from dctrack.domain.filters import (
    FieldSet,
    FilterSpec,
    build_fields_payload,
    by_location,
    by_vendor,
    installed_only,
    power_assets,
    with_power,
)
from dctrack.domain.models import Credentials, Item, Token

__all__ = [
    "Credentials",
    "Item",
    "Token",
    "FieldSet",
    "FilterSpec",
    "build_fields_payload",
    "by_location",
    "by_vendor",
    "installed_only",
    "power_assets",
    "with_power",
]
