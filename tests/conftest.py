"""
Pytest configuration for the dcTrack client.

Provides fixtures for:
- Settings pointing at an in-process fake dcTrack service
- The fake service itself, served through httpx.MockTransport
- A recording sleep so retry delays cost no wall time
"""

from __future__ import annotations

import base64
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from dctrack import client as client_module
from dctrack.config import Settings, get_settings
from dctrack.infrastructure.http_factory import create_http_client

BASE_URL = "https://dctrack.test/api/v2"
USERNAME = "admin"
PASSWORD = "secret"
TOKEN = "tok-123"


class FakeDCTrack:
    """
    Minimal stand-in for the dcTrack REST API.

    Serves login and quicksearch from an in-memory record list, slicing pages
    by pageNumber/pageSize and honouring the location/status/make/searchText
    predicates. `failures` holds status codes returned by the next quicksearch
    requests before normal service resumes. `page_bodies` maps a page number to
    a JSON body served verbatim for that page.
    """

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None) -> None:
        self.records: List[Dict[str, Any]] = list(records or [])
        self.requests: List[httpx.Request] = []
        self.failures: List[int] = []
        self.page_bodies: Dict[int, Any] = {}
        self.shape = "records"
        self.token_in_body = False

    @property
    def login_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/authentication/login")]

    @property
    def page_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/quicksearch/items")]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/authentication/login"):
            return self._login(request)
        if request.url.path.endswith("/quicksearch/items"):
            return self._search(request)
        return httpx.Response(404)

    def _login(self, request: httpx.Request) -> httpx.Response:
        expected = base64.b64encode(f"{USERNAME}:{PASSWORD}".encode()).decode()
        if request.headers.get("Authorization") != f"Basic {expected}":
            return httpx.Response(401, json={"error": "unauthorized"})
        if self.token_in_body:
            return httpx.Response(200, json={"data": {"accessToken": TOKEN}})
        return httpx.Response(200, headers={"Authorization": f"Bearer {TOKEN}"})

    def _search(self, request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401)
        if self.failures:
            return httpx.Response(self.failures.pop(0))

        params = request.url.params
        number = int(params["pageNumber"])
        size = int(params["pageSize"])
        if number in self.page_bodies:
            return httpx.Response(200, json=self.page_bodies[number])
        matching = [record for record in self.records if self._matches(record, params)]
        chunk = matching[(number - 1) * size : number * size]

        if self.shape == "records":
            return httpx.Response(200, json={"records": chunk})
        return httpx.Response(
            200,
            json={
                "totalRows": len(matching),
                "pageNumber": number,
                "pageSize": size,
                "searchResults": {"items": chunk},
            },
        )

    @staticmethod
    def _matches(record: Dict[str, Any], params: httpx.QueryParams) -> bool:
        for param, key in (("location", "cmbLocation"), ("status", "cmbStatus"), ("make", "cmbMake")):
            if param in params and record.get(key) != params[param]:
                return False
        if "searchText" in params:
            needle = params["searchText"].lower()
            return any(needle in str(value).lower() for value in record.values())
        return True


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _wire_record(item_id: Any, **fields: Any) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": item_id,
        "tiName": f"server-{item_id}",
        "tiClass": "Device",
        "cmbStatus": "Installed",
        "cmbLocation": "RDU2",
        "cmbMake": "Dell",
        "cmbModel": "PowerEdge R650",
        "tiItemOriginalPower": 500,
    }
    record.update(fields)
    return record


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """
    Drop the cached Settings around every test so env tweaks never leak.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def wire_record() -> Callable[..., Dict[str, Any]]:
    """
    Factory for raw quicksearch records in the service's field vocabulary.
    """
    return _wire_record


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings for the fake service: small pages, three attempts, no .env file.
    """
    return Settings(
        _env_file=None,
        url=BASE_URL,
        username=USERNAME,
        password=PASSWORD,
        page_size=2,
        max_retries=3,
        retry_delay=0.25,
        log_level="WARNING",
    )


@pytest.fixture
def fake_service() -> FakeDCTrack:
    return FakeDCTrack()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def mock_http(monkeypatch: pytest.MonkeyPatch, fake_service: FakeDCTrack) -> FakeDCTrack:
    """
    Route every client-built httpx.AsyncClient to the fake service.
    """

    def _factory(settings: Optional[Settings] = None) -> httpx.AsyncClient:
        return create_http_client(settings, transport=fake_service.transport())

    monkeypatch.setattr(client_module, "create_http_client", _factory)
    return fake_service
