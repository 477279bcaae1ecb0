from __future__ import annotations

import httpx
import pytest

from dctrack.domain.models import Credentials, Token
from dctrack.errors import AuthError, AuthFailure, TransportError
from dctrack.pipeline.auth import AuthSession, token_from_body, token_from_header

BASE_URL = "https://dctrack.test/api/v2"
CREDENTIALS = Credentials(username="admin", password="secret")


def _session(handler) -> tuple[AuthSession, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AuthSession(http, BASE_URL), http


@pytest.mark.asyncio
async def test_login_reads_bearer_header() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, headers={"Authorization": "Bearer abc.def.ghi"})

    session, http = _session(handler)
    async with http:
        token = await session.login(CREDENTIALS)

    assert token.value == "abc.def.ghi"
    assert token.authorization_header() == "Bearer abc.def.ghi"
    assert seen[0].method == "POST"
    assert seen[0].url == f"{BASE_URL}/authentication/login"
    assert seen[0].headers["Authorization"].startswith("Basic ")


@pytest.mark.asyncio
async def test_login_falls_back_to_body_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"accessToken": "from-body"}})

    session, http = _session(handler)
    async with http:
        token = await session.login(CREDENTIALS)

    assert token.value == "from-body"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403, 500])
async def test_non_200_is_invalid_credentials(status: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status)

    session, http = _session(handler)
    async with http:
        with pytest.raises(AuthError) as excinfo:
            await session.login(CREDENTIALS)

    assert excinfo.value.reason is AuthFailure.INVALID_CREDENTIALS
    assert excinfo.value.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200),
        httpx.Response(200, headers={"Authorization": "Basic nope"}),
        httpx.Response(200, json={"status": "ok"}),
        httpx.Response(200, text="<html>login</html>"),
    ],
)
async def test_missing_token_is_malformed(response: httpx.Response) -> None:
    session, http = _session(lambda request: response)
    async with http:
        with pytest.raises(AuthError) as excinfo:
            await session.login(CREDENTIALS)

    assert excinfo.value.reason is AuthFailure.MALFORMED_RESPONSE


@pytest.mark.asyncio
async def test_network_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    session, http = _session(handler)
    async with http:
        with pytest.raises(TransportError):
            await session.login(CREDENTIALS)


def test_token_from_header() -> None:
    assert token_from_header("Bearer xyz") == "xyz"
    assert token_from_header("bearer   xyz ") == "xyz"
    assert token_from_header("Basic xyz") is None
    assert token_from_header("Bearer ") is None
    assert token_from_header(None) is None


def test_token_from_body() -> None:
    assert token_from_body({"token": "a"}) == "a"
    assert token_from_body({"access_token": "Bearer b"}) == "b"
    assert token_from_body({"data": {"jwt": "c"}}) == "c"
    assert token_from_body({"token": 5}) is None
    assert token_from_body(["token"]) is None


def test_credentials_and_token_repr_hide_secrets() -> None:
    assert "secret" not in repr(CREDENTIALS)
    assert "abc" not in repr(Token("abc.def"))
