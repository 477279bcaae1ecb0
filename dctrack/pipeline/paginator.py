"""
Page-by-page collection loop.

One `collect` call logs in once, then walks quicksearch pages in order until
a termination rule fires. Any error aborts the whole operation; items from
earlier pages are discarded with it.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from dctrack.domain.filters import FilterSpec
from dctrack.domain.models import Credentials, Item
from dctrack.pipeline.abstract import Authenticator, PageSource
from dctrack.utils.logging import get_logger

log = get_logger(__name__)

QUICKSEARCH_PATH = "/quicksearch/items"
DEFAULT_PAGE_SIZE = 1000


def next_page(page: int, size: int, record_count: int, single_page: bool) -> Optional[int]:
    """
    Decide the page after `page`, or None when collection is done.

    A page with no records, fewer records than the page size, or a caller
    pinned to one page ends the loop.
    """
    if single_page or record_count == 0 or record_count < size:
        return None
    return page + 1


class Paginator:
    """
    Drive authentication and page retrieval for one fetch operation.

    Parameters
    ----------
    auth : Authenticator
        Issues the per-operation token.
    source : PageSource
        Fetches one page; usually a PageFetcher.
    base_url : str
        Service root, e.g. ``https://dctrack.example.com/api/v2``.
    default_page_size : int
        Page size when the filter does not set one.
    payload : dict | None
        Field-selection body sent with every page request.
    """

    def __init__(
        self,
        auth: Authenticator,
        source: PageSource,
        base_url: str,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        if default_page_size < 1:
            raise ValueError("default_page_size must be at least 1")
        self._auth = auth
        self._source = source
        self.page_url = f"{base_url.rstrip('/')}{QUICKSEARCH_PATH}"
        self.default_page_size = default_page_size
        self._payload = dict(payload or {})

    async def collect(
        self,
        credentials: Credentials,
        filter_spec: Optional[FilterSpec] = None,
    ) -> List[Item]:
        """Return every matching item in page-fetch order."""
        filter_spec = filter_spec or FilterSpec()
        page: Optional[int] = filter_spec.page_number or 1
        size = filter_spec.page_size or self.default_page_size

        token = await self._auth.login(credentials)

        items: List[Item] = []
        skipped = 0
        pages = 0
        start = time.perf_counter()
        while page is not None:
            params = filter_spec.to_query_params(page, size)
            result = await self._source.fetch(self.page_url, params, self._payload, token)
            items.extend(result.items)
            skipped += result.skipped
            pages += 1
            log.debug(
                "Fetched page",
                extra={
                    "page_number": page,
                    "page_size": size,
                    "records": result.record_count,
                    "items": len(result.items),
                    "total_items": len(items),
                },
            )
            page = next_page(page, size, result.record_count, filter_spec.single_page)

        log.info(
            "Collection complete",
            extra={
                "pages": pages,
                "items": len(items),
                "skipped": skipped,
                "duration_seconds": round(time.perf_counter() - start, 3),
            },
        )
        return items


__all__ = ["DEFAULT_PAGE_SIZE", "Paginator", "QUICKSEARCH_PATH", "next_page"]
