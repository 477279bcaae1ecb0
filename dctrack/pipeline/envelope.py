"""
Page envelope decoding.

The quicksearch endpoint has shipped two response shapes:

- Shape A (flat):   {"records": [...]}
- Shape B (nested): {"totalRows": n, "pageNumber": n, "pageSize": n,
                     "searchResults": {"items": [...]}}

`decode_envelope` tries each registered decoder in order. A decoder returns
None when the payload is not its shape; add new shapes to `ENVELOPE_DECODERS`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple

from dctrack.errors import DecodeError


@dataclass(frozen=True)
class Page:
    """One decoded page: the raw records plus whatever metadata the shape carries."""

    records: List[Any]
    shape: str
    total_rows: Optional[int] = None
    page_number: Optional[int] = None
    page_size: Optional[int] = None


def _optional_int(payload: Mapping[str, Any], key: str) -> Optional[int]:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _decode_flat(payload: Mapping[str, Any]) -> Optional[Page]:
    if "records" not in payload:
        return None
    records = payload["records"]
    if records is None:
        records = []
    if not isinstance(records, list):
        raise DecodeError(f"'records' must be a list, got {type(records).__name__}")
    return Page(records=records, shape="records")


def _decode_search_results(payload: Mapping[str, Any]) -> Optional[Page]:
    if "searchResults" not in payload:
        return None
    results = payload["searchResults"]
    if results is None:
        results = {}
    if not isinstance(results, Mapping):
        raise DecodeError(f"'searchResults' must be an object, got {type(results).__name__}")
    items = results.get("items")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise DecodeError(f"'searchResults.items' must be a list, got {type(items).__name__}")
    return Page(
        records=items,
        shape="searchResults",
        total_rows=_optional_int(payload, "totalRows"),
        page_number=_optional_int(payload, "pageNumber"),
        page_size=_optional_int(payload, "pageSize"),
    )


ENVELOPE_DECODERS: Tuple[Callable[[Mapping[str, Any]], Optional[Page]], ...] = (
    _decode_flat,
    _decode_search_results,
)


def decode_envelope(payload: Any) -> Page:
    """
    Decode a parsed JSON body into a Page.

    Raises
    ------
    DecodeError
        If the payload is not an object or matches no known shape.
    """
    if not isinstance(payload, Mapping):
        raise DecodeError(f"response envelope must be a JSON object, got {type(payload).__name__}")
    for decoder in ENVELOPE_DECODERS:
        page = decoder(payload)
        if page is not None:
            return page
    keys = ", ".join(sorted(map(str, payload))) or "<none>"
    raise DecodeError(f"unrecognized response envelope (keys: {keys})")


__all__ = ["ENVELOPE_DECODERS", "Page", "decode_envelope"]
