"""
Tests for Auth0 token validation and the current-user dependencies.

Tokens are signed with a throwaway RSA key; the JWKS lookup is replaced so no
network access is needed.
"""
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

from core import auth
from core.auth import (
    DEV_USER_ID,
    decode_jwt,
    get_current_user,
    get_optional_user,
    user_from_token,
)
from core.config import Settings

PRIVATE_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)


class StaticJWKClient:
    """Stands in for PyJWKClient, returning one fixed key or raising an error."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    def get_signing_key_from_jwt(self, _token: str) -> SimpleNamespace:
        if self.error is not None:
            raise self.error
        return SimpleNamespace(key=PRIVATE_KEY.public_key())


@pytest.fixture
def settings(settings_factory: Callable[..., Settings]) -> Settings:
    return settings_factory()


@pytest.fixture
def jwks(monkeypatch: pytest.MonkeyPatch) -> StaticJWKClient:
    client = StaticJWKClient()
    monkeypatch.setattr(auth, "get_jwks_client", lambda _settings: client)
    return client


def make_token(settings: Settings, **claims: Any) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": "auth0|alice",
        "email": "alice@example.com",
        "aud": settings.auth0_audience,
        "iss": settings.auth0_issuer,
        "iat": now,
        "exp": now + timedelta(hours=1),
        **claims,
    }
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, PRIVATE_KEY, algorithm="RS256", headers={"kid": "test-key"})


def make_request(cookies: dict[str, str] | None = None) -> Request:
    headers = []
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        headers.append((b"cookie", cookie_header.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


# =============================================================================
# Token validation
# =============================================================================


class TestDecodeJwt:
    """Tests for decode_jwt and user_from_token."""

    def test__user_from_token__valid(self, settings: Settings, jwks: StaticJWKClient) -> None:  # noqa: ARG002
        user = user_from_token(make_token(settings), settings)
        assert user.id == "auth0|alice"
        assert user.email == "alice@example.com"

    def test__user_from_token__email_optional(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        user = user_from_token(make_token(settings, email=None), settings)
        assert user.id == "auth0|alice"
        assert user.email is None

    def test__user_from_token__missing_sub(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        with pytest.raises(HTTPException) as exc_info:
            user_from_token(make_token(settings, sub=None), settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token: missing sub claim"

    def test__decode_jwt__expired(self, settings: Settings, jwks: StaticJWKClient) -> None:  # noqa: ARG002
        token = make_token(settings, exp=datetime.now(UTC) - timedelta(minutes=5))
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(token, settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test__decode_jwt__wrong_audience(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(make_token(settings, aud="https://other.api"), settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid audience"

    def test__decode_jwt__wrong_issuer(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(make_token(settings, iss="https://evil.example/"), settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid issuer"

    def test__decode_jwt__signed_with_other_key(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        token = jwt.encode(
            {"sub": "auth0|mallory", "aud": settings.auth0_audience, "iss": settings.auth0_issuer},
            other_key,
            algorithm="RS256",
        )
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(token, settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token"

    def test__decode_jwt__jwks_unreachable(
        self, settings: Settings, jwks: StaticJWKClient,
    ) -> None:
        jwks.error = jwt.PyJWKClientConnectionError("connection refused")
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(make_token(settings), settings)
        assert exc_info.value.status_code == 503


# =============================================================================
# Dependencies
# =============================================================================


class TestGetCurrentUser:
    """Tests for get_current_user and get_optional_user."""

    async def test__get_current_user__dev_mode(
        self, settings_factory: Callable[..., Settings],
    ) -> None:
        settings = settings_factory(dev_mode=True)
        user = await get_current_user(make_request(), None, settings)
        assert user.id == DEV_USER_ID

    async def test__get_current_user__no_token(self, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(make_request(), None, settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Not authenticated"

    async def test__get_current_user__bearer_header(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        user = await get_current_user(make_request(), bearer(make_token(settings)), settings)
        assert user.id == "auth0|alice"

    async def test__get_current_user__session_cookie(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        request = make_request({settings.session_cookie_name: make_token(settings)})
        user = await get_current_user(request, None, settings)
        assert user.id == "auth0|alice"

    async def test__get_current_user__header_wins_over_cookie(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        request = make_request(
            {settings.session_cookie_name: make_token(settings, sub="auth0|cookie-user")},
        )
        token = make_token(settings, sub="auth0|header-user")
        user = await get_current_user(request, bearer(token), settings)
        assert user.id == "auth0|header-user"

    async def test__get_optional_user__signed_out_is_none(self, settings: Settings) -> None:
        assert await get_optional_user(make_request(), None, settings) is None

    async def test__get_optional_user__invalid_token_is_none(
        self, settings: Settings, jwks: StaticJWKClient,  # noqa: ARG002
    ) -> None:
        token = make_token(settings, exp=datetime.now(UTC) - timedelta(minutes=5))
        assert await get_optional_user(make_request(), bearer(token), settings) is None

    async def test__get_optional_user__auth0_outage_propagates(
        self, settings: Settings, jwks: StaticJWKClient,
    ) -> None:
        jwks.error = jwt.PyJWKClientConnectionError("connection refused")
        with pytest.raises(HTTPException) as exc_info:
            await get_optional_user(make_request(), bearer(make_token(settings)), settings)
        assert exc_info.value.status_code == 503
