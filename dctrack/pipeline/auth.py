"""
Login against the dcTrack authentication endpoint.

`POST {base}/authentication/login` with HTTP basic auth returns 200 and the
JWT in an `Authorization: Bearer <token>` response header. Some service
builds also (or only) put the token in the JSON body, so both carriers are
accepted, header first.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from dctrack.domain.models import Credentials, Token
from dctrack.errors import AuthError, AuthFailure, TransportError
from dctrack.utils.logging import get_logger

log = get_logger(__name__)

LOGIN_PATH = "/authentication/login"
BEARER_PREFIX = "bearer "
BODY_TOKEN_KEYS = ("token", "access_token", "accessToken", "jwt")


def _strip_bearer(value: str) -> Optional[str]:
    value = value.strip()
    if value.lower().startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX) :].strip()
    return value or None


def token_from_header(header: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header value."""
    if not header:
        return None
    if not header.strip().lower().startswith(BEARER_PREFIX):
        return None
    return _strip_bearer(header)


def token_from_body(body: Any) -> Optional[str]:
    """Look for a token under the conventional keys, top level then under `data`."""
    candidates = [body]
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        candidates.append(body["data"])
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        for key in BODY_TOKEN_KEYS:
            value = candidate.get(key)
            if isinstance(value, str):
                token = _strip_bearer(value)
                if token:
                    return token
    return None


class AuthSession:
    """
    Stateless login helper.

    The returned Token belongs to the caller; nothing is cached here, so
    concurrent operations sharing one AuthSession never see each other's
    tokens.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str) -> None:
        self._http = http
        self.login_url = f"{base_url.rstrip('/')}{LOGIN_PATH}"

    async def login(self, credentials: Credentials) -> Token:
        """
        Exchange credentials for a bearer token.

        Raises
        ------
        AuthError
            INVALID_CREDENTIALS on any non-200 status, MALFORMED_RESPONSE when a
            200 response carries no usable token.
        TransportError
            If the login request never got a response. Not retried.
        """
        log.debug(
            "Making dcTrack login request",
            extra={"url": self.login_url, "username": credentials.username},
        )
        try:
            response = await self._http.post(
                self.login_url,
                auth=httpx.BasicAuth(credentials.username, credentials.password),
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        except httpx.TransportError as exc:
            raise TransportError(f"login request failed: {exc}") from exc

        if response.status_code != 200:
            raise AuthError(
                AuthFailure.INVALID_CREDENTIALS,
                f"login failed with status {response.status_code}",
                status_code=response.status_code,
            )

        token = token_from_header(response.headers.get("Authorization"))
        if token is None:
            try:
                token = token_from_body(response.json())
            except ValueError:
                token = None
        if token is None:
            raise AuthError(
                AuthFailure.MALFORMED_RESPONSE,
                "login response carried no bearer token in header or body",
                status_code=response.status_code,
            )

        log.debug("Obtained dcTrack token", extra={"token_length": len(token)})
        return Token(token)


__all__ = ["AuthSession", "LOGIN_PATH", "token_from_body", "token_from_header"]
