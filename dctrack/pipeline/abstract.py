"""
Interfaces and result contracts for the fetch pipeline.

The paginator talks to authentication and page retrieval only through these
protocols, so tests (or alternative transports) can substitute in-memory
fakes without touching HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from dctrack.domain.models import Credentials, Item, Token


@dataclass(frozen=True)
class FetchedPage:
    """
    Outcome of one successful page exchange.

    Attributes
    ----------
    items : list[Item]
        Records that mapped cleanly, in wire order.
    record_count : int
        Raw records on the page before mapping; pagination decisions use this.
    skipped : int
        Records rejected by the mapper.
    total_rows : int | None
        Server-reported total, when the envelope carries one.
    """

    items: List[Item] = field(default_factory=list)
    record_count: int = 0
    skipped: int = 0
    total_rows: Optional[int] = None


@runtime_checkable
class Authenticator(Protocol):
    """Exchanges credentials for a bearer token."""

    async def login(self, credentials: Credentials) -> Token:
        ...


@runtime_checkable
class PageSource(Protocol):
    """Retrieves and normalizes a single page of items."""

    async def fetch(
        self,
        url: str,
        params: Mapping[str, Any],
        payload: Dict[str, Any],
        token: Token,
    ) -> FetchedPage:
        """
        Fetch one page.

        Parameters
        ----------
        url : str
            Absolute quicksearch URL without query string.
        params : Mapping[str, Any]
            Query parameters, including pageNumber and pageSize.
        payload : dict
            JSON request body (field selection).
        token : Token
            Bearer token for this operation.
        """
        ...


__all__ = ["Authenticator", "FetchedPage", "PageSource"]
