"""
Client for the Auth0 Management API.

Only the user operations the seed script needs are implemented: create, list,
and delete. Authentication uses the client-credentials grant of a
machine-to-machine application; the token is fetched once per client instance.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import httpx

from core.config import Settings

logger = logging.getLogger(__name__)


class Auth0ManagementError(Exception):
    """
    Raised when the Management API returns an error.

    `errors` holds Auth0's JSON error body (statusCode, error, message, errorCode)
    when one was returned, so callers can log the provider-specific detail.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.errors = errors
        super().__init__(message)


@dataclass(frozen=True)
class NewAccount:
    """Details for an account to create in Auth0."""

    email: str
    password: str
    first_name: str
    last_name: str


@dataclass(frozen=True)
class Account:
    """An Auth0 account as returned by the Management API."""

    id: str
    email_addresses: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Account":
        email = data.get("email")
        return cls(id=data["user_id"], email_addresses=[email] if email else [])


def _raise_for_error(response: httpx.Response, action: str) -> None:
    if not response.is_error:
        return
    try:
        errors = response.json()
    except ValueError:
        errors = None
    detail = errors.get("message") if isinstance(errors, dict) else None
    raise Auth0ManagementError(
        f"Auth0 {action} failed ({response.status_code}): {detail or response.text}",
        status_code=response.status_code,
        errors=errors if isinstance(errors, dict) else None,
    )


class Auth0ManagementClient:
    """Async Auth0 Management API client."""

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        connection: str = "Username-Password-Authentication",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.domain = domain
        self.connection = connection
        self._client_id = client_id
        self._client_secret = client_secret
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=f"https://{domain}",
            timeout=30.0,
        )
        self._token: str | None = None
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Auth0ManagementClient":
        """Build a client from application settings (credentials must be present)."""
        settings.require_management_credentials()
        return cls(
            domain=settings.auth0_domain,
            client_id=settings.auth0_management_client_id,
            client_secret=settings.auth0_management_client_secret,
            connection=settings.auth0_connection,
        )

    async def __aenter__(self) -> "Auth0ManagementClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    @property
    def audience(self) -> str:
        """Management API audience for the tenant."""
        return f"https://{self.domain}/api/v2/"

    async def _get_token(self) -> str:
        # Concurrent callers share one token request
        async with self._token_lock:
            if self._token is None:
                response = await self._client.post(
                    "/oauth/token",
                    json={
                        "grant_type": "client_credentials",
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "audience": self.audience,
                    },
                )
                _raise_for_error(response, "token request")
                self._token = response.json()["access_token"]
        return self._token

    async def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {await self._get_token()}"}

    async def create_user(self, account: NewAccount) -> Account:
        """Create an account in the configured database connection."""
        response = await self._client.post(
            "/api/v2/users",
            json={
                "connection": self.connection,
                "email": account.email,
                "password": account.password,
                "given_name": account.first_name,
                "family_name": account.last_name,
            },
            headers=await self._headers(),
        )
        _raise_for_error(response, "user creation")
        created = Account.from_api(response.json())
        logger.debug("Created Auth0 user %s", created.id)
        return created

    async def list_users(self, email: str | None = None) -> list[Account]:
        """List accounts, optionally only those with the given email."""
        params = {"q": f'email:"{email}"', "search_engine": "v3"} if email else None
        response = await self._client.get(
            "/api/v2/users", params=params, headers=await self._headers(),
        )
        _raise_for_error(response, "user listing")
        return [Account.from_api(item) for item in response.json()]

    async def delete_user(self, user_id: str) -> None:
        """Delete an account by id."""
        response = await self._client.delete(
            f"/api/v2/users/{user_id}", headers=await self._headers(),
        )
        _raise_for_error(response, "user deletion")
