"""
HTTP client factory for the dcTrack client.

Builds the `httpx.AsyncClient` shared by login and page requests so that
timeout, TLS verification and User-Agent come from one place. The client
holds a connection pool and is safe to share between concurrent fetches.
"""

from __future__ import annotations

from typing import Optional

import httpx

from dctrack import __version__
from dctrack.config import Settings, get_settings

USER_AGENT = f"dctrack-client/{__version__}"


def create_http_client(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create an AsyncClient configured from settings.

    Parameters
    ----------
    settings : Settings | None
        Source of timeout and TLS options; defaults to `get_settings()`.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (e.g. `httpx.MockTransport` in tests).

    Returns
    -------
    httpx.AsyncClient
        Caller owns the client and must close it.
    """
    settings = settings or get_settings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout),
        verify=settings.verify_ssl,
        headers={"User-Agent": USER_AGENT},
        transport=transport,
    )


__all__ = ["USER_AGENT", "create_http_client"]
