"""
High-level dcTrack client.

`DCTrackClient` wires settings into the fetch pipeline (AuthSession,
PageFetcher, Paginator) over one shared `httpx.AsyncClient`. Every public
operation logs in afresh and keeps its token local, so independent
operations may run concurrently on the same client.

Example
-------
    async with DCTrackClient(get_settings()) as client:
        items = await client.get_items_with_params(by_location("RDU2"), timeout=30)
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, List, Optional, TypeVar

import httpx

from dctrack.config import Settings, get_settings
from dctrack.domain.filters import FilterSpec, build_fields_payload
from dctrack.domain.models import Item
from dctrack.errors import FetchTimeoutError, NotFoundError
from dctrack.infrastructure.http_factory import create_http_client
from dctrack.pipeline.auth import AuthSession
from dctrack.pipeline.fetcher import PageFetcher, SleepFn
from dctrack.pipeline.mapper import RecordMapper
from dctrack.pipeline.paginator import Paginator
from dctrack.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class DCTrackClient:
    """
    Async facade over the fetch pipeline.

    Parameters
    ----------
    settings : Settings | None
        Connection and retry configuration; defaults to `get_settings()`.
    http : httpx.AsyncClient | None
        Borrowed HTTP client. When omitted the client builds and owns one.
    sleep : callable
        Inter-retry sleep, forwarded to the PageFetcher.

    Raises
    ------
    ConfigurationError
        If URL, username or password is missing.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.settings = settings or get_settings()
        self._credentials = self.settings.credentials()
        self._owns_http = http is None
        self._http = http if http is not None else create_http_client(self.settings)

        mapper = RecordMapper.strict() if self.settings.strict_validation else RecordMapper()
        self._paginator = Paginator(
            auth=AuthSession(self._http, self.settings.base_url),
            source=PageFetcher(
                self._http,
                mapper,
                max_retries=self.settings.max_retries,
                retry_delay=self.settings.retry_delay,
                sleep=sleep,
            ),
            base_url=self.settings.base_url,
            default_page_size=self.settings.page_size,
            payload=build_fields_payload(self.settings.field_set),
        )

    async def __aenter__(self) -> "DCTrackClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def get_items(self, timeout: Optional[float] = None) -> List[Item]:
        """Retrieve every item, paging until the service runs out."""
        return await self.get_items_with_params(FilterSpec(), timeout=timeout)

    async def get_items_with_params(
        self,
        filter_spec: FilterSpec,
        timeout: Optional[float] = None,
    ) -> List[Item]:
        """
        Retrieve items matching a filter.

        Parameters
        ----------
        filter_spec : FilterSpec
            Predicates and optional pagination cursor.
        timeout : float | None
            Deadline in seconds for the whole operation, retries included.

        Raises
        ------
        FetchTimeoutError
            If the deadline expires first.
        """
        log.info(
            "Fetching items",
            extra={"filter": filter_spec.model_dump(exclude_none=True), "timeout": timeout},
        )
        return await self._with_deadline(
            self._paginator.collect(self._credentials, filter_spec), timeout
        )

    async def search_items(self, query: str, timeout: Optional[float] = None) -> List[Item]:
        """Free-text search across item fields."""
        if not query or not query.strip():
            raise ValueError("search query cannot be empty")
        return await self.get_items_with_params(FilterSpec(search_text=query), timeout=timeout)

    async def get_item_by_id(self, item_id: str, timeout: Optional[float] = None) -> Item:
        """
        Look up a single item by its identifier.

        The service has no direct lookup, so this searches for the id and
        returns the exact match.

        Raises
        ------
        NotFoundError
            If no returned item carries exactly this id.
        """
        if not item_id:
            raise ValueError("item ID cannot be empty")
        items = await self.get_items_with_params(FilterSpec(search_text=item_id), timeout=timeout)
        for item in items:
            if item.id == item_id:
                return item
        raise NotFoundError(item_id)

    async def _with_deadline(self, operation: Awaitable[T], timeout: Optional[float]) -> T:
        if timeout is None:
            return await operation
        try:
            async with asyncio.timeout(timeout):
                return await operation
        except TimeoutError as exc:
            log.warning("Operation deadline exceeded", extra={"timeout": timeout})
            raise FetchTimeoutError(f"operation exceeded deadline of {timeout}s") from exc


def fetch_items_sync(
    filter_spec: Optional[FilterSpec] = None,
    settings: Optional[Settings] = None,
    timeout: Optional[float] = None,
) -> List[Item]:
    """
    Blocking convenience wrapper around `DCTrackClient.get_items_with_params`.

    Raises
    ------
    RuntimeError
        If called from inside a running event loop; await the client instead.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("fetch_items_sync cannot be used inside a running event loop")

    async def _run() -> List[Item]:
        async with DCTrackClient(settings) as client:
            return await client.get_items_with_params(filter_spec or FilterSpec(), timeout=timeout)

    return asyncio.run(_run())


__all__ = ["DCTrackClient", "fetch_items_sync"]
