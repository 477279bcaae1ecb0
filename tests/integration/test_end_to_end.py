"""End-to-end fetches through DCTrackClient against the in-process fake service."""

from __future__ import annotations

import asyncio
import json

import pytest
from pydantic import SecretStr

from dctrack.client import DCTrackClient
from dctrack.config import Settings
from dctrack.domain.filters import FieldSet, FilterSpec, by_location, by_vendor
from dctrack.errors import AuthError, AuthFailure, DecodeError, FetchError
from dctrack.infrastructure.http_factory import USER_AGENT

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_get_items_walks_every_page(test_settings: Settings, mock_http, wire_record, recording_sleep) -> None:
    mock_http.records = [wire_record(str(n)) for n in range(1, 6)]

    async with DCTrackClient(test_settings, sleep=recording_sleep) as client:
        items = await client.get_items()

    assert [item.id for item in items] == ["1", "2", "3", "4", "5"]
    assert len(mock_http.login_requests) == 1
    assert [r.url.params["pageNumber"] for r in mock_http.page_requests] == ["1", "2", "3"]
    assert all(r.headers["User-Agent"] == USER_AGENT for r in mock_http.requests)
    assert recording_sleep.calls == []


@pytest.mark.asyncio
async def test_exact_multiple_needs_trailing_empty_page(test_settings, mock_http, wire_record) -> None:
    mock_http.records = [wire_record(str(n)) for n in range(1, 5)]

    async with DCTrackClient(test_settings) as client:
        items = await client.get_items()

    assert len(items) == 4
    assert len(mock_http.page_requests) == 3


@pytest.mark.asyncio
async def test_filters_reach_the_service(test_settings, mock_http, wire_record) -> None:
    mock_http.records = [
        wire_record("1", cmbLocation="RDU2", cmbMake="Dell"),
        wire_record("2", cmbLocation="IAD1", cmbMake="Dell"),
        wire_record("3", cmbLocation="RDU2", cmbMake="HPE"),
        wire_record("4", cmbLocation="RDU2", cmbStatus="Planned"),
    ]

    async with DCTrackClient(test_settings) as client:
        in_rdu2 = await client.get_items_with_params(by_location("RDU2"))
        dell = await client.get_items_with_params(by_vendor("Dell"))

    assert [item.id for item in in_rdu2] == ["1", "3"]
    assert [item.id for item in dell] == ["1", "2"]
    first = mock_http.page_requests[0].url.params
    assert first["location"] == "RDU2"
    assert first["status"] == "Installed"


@pytest.mark.asyncio
async def test_search_results_shape_and_body_token(test_settings, mock_http, wire_record) -> None:
    mock_http.shape = "searchResults"
    mock_http.token_in_body = True
    mock_http.records = [
        wire_record("a", tiName="PowerEdge-01"),
        wire_record("b", tiName="switch", cmbModel="Nexus 93180"),
    ]

    async with DCTrackClient(test_settings) as client:
        items = await client.search_items("poweredge")

    assert [item.name for item in items] == ["PowerEdge-01"]


@pytest.mark.asyncio
async def test_field_set_payload_is_sent(test_settings, mock_http, wire_record) -> None:
    mock_http.records = [wire_record("1")]
    settings = test_settings.model_copy(update={"field_set": FieldSet.MINIMAL})

    async with DCTrackClient(settings) as client:
        await client.get_items()

    body = json.loads(mock_http.page_requests[0].content)
    assert body["selectedColumns"][0] == {"name": "id"}


@pytest.mark.asyncio
async def test_wrong_password_is_invalid_credentials(test_settings, mock_http) -> None:
    settings = test_settings.model_copy(update={"password": SecretStr("wrong")})

    async with DCTrackClient(settings) as client:
        with pytest.raises(AuthError) as excinfo:
            await client.get_items()

    assert excinfo.value.reason is AuthFailure.INVALID_CREDENTIALS
    assert mock_http.page_requests == []


@pytest.mark.asyncio
async def test_transient_errors_recover_with_fixed_delay(test_settings, mock_http, wire_record, recording_sleep) -> None:
    mock_http.records = [wire_record("1")]
    mock_http.failures = [500, 502]

    async with DCTrackClient(test_settings, sleep=recording_sleep) as client:
        items = await client.get_items()

    assert [item.id for item in items] == ["1"]
    assert recording_sleep.calls == [test_settings.retry_delay] * 2


@pytest.mark.asyncio
async def test_failure_on_later_page_returns_nothing(test_settings, mock_http, wire_record, recording_sleep) -> None:
    mock_http.records = [wire_record(str(n)) for n in range(1, 6)]
    original = mock_http._search
    served = 0

    def failing_after_first(request):
        nonlocal served
        served += 1
        if served > 1:
            mock_http.failures.append(503)
        return original(request)

    mock_http._search = failing_after_first

    async with DCTrackClient(test_settings, sleep=recording_sleep) as client:
        with pytest.raises(FetchError) as excinfo:
            await client.get_items()

    assert excinfo.value.attempts == test_settings.max_retries
    assert len(mock_http.page_requests) == 1 + test_settings.max_retries


@pytest.mark.asyncio
@pytest.mark.parametrize("shape", ["records", "searchResults"])
@pytest.mark.parametrize("body", [{"searchResults": []}, {"searchResults": {"items": {}}}, {"unexpected": 1}])
async def test_malformed_later_page_discards_earlier_pages(
    test_settings, mock_http, wire_record, recording_sleep, shape, body
) -> None:
    mock_http.records = [wire_record(str(n)) for n in range(1, 6)]
    mock_http.shape = shape
    mock_http.page_bodies[2] = body

    async with DCTrackClient(test_settings, sleep=recording_sleep) as client:
        with pytest.raises(DecodeError):
            await client.get_items()

    assert [r.url.params["pageNumber"] for r in mock_http.page_requests] == ["1", "2"]
    assert recording_sleep.calls == []


@pytest.mark.asyncio
async def test_invalid_records_are_skipped(test_settings, mock_http, wire_record) -> None:
    mock_http.records = [wire_record("1"), {"tiName": "no-id"}, wire_record("3")]

    async with DCTrackClient(test_settings) as client:
        items = await client.get_items()

    assert [item.id for item in items] == ["1", "3"]
    assert len(mock_http.page_requests) == 2


@pytest.mark.asyncio
async def test_strict_validation_skips_incomplete_records(test_settings, mock_http, wire_record) -> None:
    incomplete = wire_record("2")
    del incomplete["cmbStatus"]
    mock_http.records = [wire_record("1"), incomplete]
    settings = test_settings.model_copy(update={"strict_validation": True})

    async with DCTrackClient(settings) as client:
        items = await client.get_items()

    assert [item.id for item in items] == ["1"]


@pytest.mark.asyncio
async def test_concurrent_operations_log_in_independently(test_settings, mock_http, wire_record) -> None:
    mock_http.records = [wire_record(str(n), cmbLocation="RDU2" if n % 2 else "IAD1") for n in range(6)]

    async with DCTrackClient(test_settings) as client:
        rdu2, iad1 = await asyncio.gather(
            client.get_items_with_params(FilterSpec(location="RDU2")),
            client.get_items_with_params(FilterSpec(location="IAD1")),
        )

    assert [item.id for item in rdu2] == ["1", "3", "5"]
    assert [item.id for item in iad1] == ["0", "2", "4"]
    assert len(mock_http.login_requests) == 2
