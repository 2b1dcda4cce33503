"""Auth0 Universal Login helpers (authorization code flow)."""
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from core.config import Settings

logger = logging.getLogger(__name__)

LOGIN_SCOPE = "openid profile email"


class Auth0LoginError(Exception):
    """Raised when Auth0 refuses to exchange an authorization code."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class TokenResponse:
    """Access token issued by Auth0 at the end of the login flow."""

    access_token: str
    expires_in: int


def build_authorize_url(settings: Settings, state: str) -> str:
    """Return the Auth0 /authorize URL that starts a login."""
    params = {
        "response_type": "code",
        "client_id": settings.auth0_client_id,
        "redirect_uri": settings.auth0_callback_url,
        "scope": LOGIN_SCOPE,
        "audience": settings.auth0_audience,
        "state": state,
    }
    return f"https://{settings.auth0_domain}/authorize?{urlencode(params)}"


def build_logout_url(settings: Settings) -> str:
    """Return the Auth0 logout URL that comes back to the sign-in page."""
    params = {
        "client_id": settings.auth0_client_id,
        "returnTo": f"{settings.app_url.rstrip('/')}/sign-in",
    }
    return f"https://{settings.auth0_domain}/v2/logout?{urlencode(params)}"


async def exchange_code(
    settings: Settings,
    code: str,
    http_client: httpx.AsyncClient | None = None,
) -> TokenResponse:
    """
    Exchange an authorization code for an access token.

    Raises:
        Auth0LoginError: If Auth0 rejects the code or cannot be reached.
    """
    payload = {
        "grant_type": "authorization_code",
        "client_id": settings.auth0_client_id,
        "client_secret": settings.auth0_client_secret,
        "code": code,
        "redirect_uri": settings.auth0_callback_url,
    }
    url = f"https://{settings.auth0_domain}/oauth/token"

    client = http_client or httpx.AsyncClient(timeout=10.0)
    try:
        response = await client.post(url, data=payload)
    except httpx.HTTPError as e:
        logger.error("Failed to reach Auth0 token endpoint: %s", e, exc_info=True)
        raise Auth0LoginError("Could not reach the identity provider") from e
    finally:
        if http_client is None:
            await client.aclose()

    if response.is_error:
        logger.warning(
            "Auth0 code exchange failed with status %s: %s",
            response.status_code,
            response.text,
        )
        raise Auth0LoginError("Sign-in was rejected", status_code=response.status_code)

    try:
        body = response.json()
        return TokenResponse(
            access_token=body["access_token"],
            expires_in=int(body.get("expires_in", 86400)),
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.error("Malformed Auth0 token response: %s", response.text)
        raise Auth0LoginError("Sign-in response was invalid") from e
