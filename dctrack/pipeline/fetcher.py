"""
Single-page retrieval with a bounded, fixed-delay retry policy.

Each page is one `POST {base}/quicksearch/items` exchange. Network failures
and non-200 statuses are retried up to `max_retries` attempts in total (the
first attempt counts), waiting exactly `retry_delay` seconds between attempts.
Worst-case latency per page is `max_retries * timeout + (max_retries - 1) *
retry_delay`.

The wait is an awaited sleep, so cancelling the surrounding task or hitting
an operation deadline interrupts it immediately instead of running out the
remaining attempts.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Mapping

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from dctrack.domain.models import Item, Token
from dctrack.errors import APIError, DecodeError, FetchError, MappingError, TransportError
from dctrack.pipeline.abstract import FetchedPage
from dctrack.pipeline.envelope import decode_envelope
from dctrack.pipeline.mapper import RecordMapper
from dctrack.utils.logging import get_logger

log = get_logger(__name__)

RETRYABLE_ERRORS = (TransportError, APIError)
PREVIEW_CHARS = 500

SleepFn = Callable[[float], Awaitable[Any]]


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    log.warning(
        "Request failed, retrying",
        extra={
            "attempt": retry_state.attempt_number,
            "retry_delay": delay,
            "error": str(error),
        },
    )


class PageFetcher:
    """
    Fetch, decode, and map one quicksearch page.

    Parameters
    ----------
    http : httpx.AsyncClient
        Shared client; carries timeout, TLS and User-Agent settings.
    mapper : RecordMapper
        Converts each raw record into an Item.
    max_retries : int
        Total attempts per page (>= 1).
    retry_delay : float
        Seconds to wait between attempts.
    sleep : callable
        Awaitable sleep used between attempts; injectable for tests.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        mapper: RecordMapper,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if retry_delay < 0:
            raise ValueError("retry_delay must not be negative")
        self._http = http
        self._mapper = mapper
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=False,
        )

    async def fetch(
        self,
        url: str,
        params: Mapping[str, Any],
        payload: Dict[str, Any],
        token: Token,
    ) -> FetchedPage:
        """
        Fetch one page, retrying transient failures.

        Raises
        ------
        FetchError
            When every attempt failed with a transport or API error.
        DecodeError
            When a 200 response is not a recognizable envelope (not retried).
        """
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._send(
                        url, params, payload, token, attempt.retry_state.attempt_number
                    )
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            log.error(
                "All retry attempts failed",
                extra={"url": url, "attempts": self.max_retries, "error": str(last_error)},
            )
            raise FetchError(self.max_retries, last_error) from last_error

        return self._decode(response)

    async def _send(
        self,
        url: str,
        params: Mapping[str, Any],
        payload: Dict[str, Any],
        token: Token,
        attempt: int,
    ) -> httpx.Response:
        log.debug(
            "Making dcTrack request",
            extra={"method": "POST", "url": url, "params": dict(params), "attempt": attempt},
        )
        try:
            response = await self._http.post(
                url,
                params=params,
                json=payload,
                headers={
                    "Authorization": token.authorization_header(),
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        except httpx.TransportError as exc:
            raise TransportError(f"request to {url} failed: {exc}") from exc

        if response.status_code != 200:
            raise APIError(response.status_code)
        return response

    def _decode(self, response: httpx.Response) -> FetchedPage:
        try:
            body = response.json()
        except ValueError as exc:
            log.error(
                "Failed to decode dcTrack response",
                extra={"response_preview": response.text[:PREVIEW_CHARS]},
            )
            raise DecodeError(f"response is not valid JSON: {exc}") from exc

        page = decode_envelope(body)
        log.debug(
            "dcTrack response parsed",
            extra={
                "shape": page.shape,
                "total_rows": page.total_rows,
                "page_number": page.page_number,
                "page_size": page.page_size,
                "records_in_response": len(page.records),
            },
        )

        items: List[Item] = []
        skipped = 0
        for index, record in enumerate(page.records):
            try:
                items.append(self._mapper.map(record))
            except MappingError as exc:
                skipped += 1
                log.warning(
                    "Skipping dcTrack record",
                    extra={"record_index": index, "field": exc.field, "error": str(exc)},
                )

        return FetchedPage(
            items=items,
            record_count=len(page.records),
            skipped=skipped,
            total_rows=page.total_rows,
        )


__all__ = ["PageFetcher", "RETRYABLE_ERRORS"]
