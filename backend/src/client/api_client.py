"""HTTP client for the prompt JSON API."""
import os
from types import TracebackType
from typing import Any

import httpx

from schemas.prompt import PromptCreate, PromptResponse, PromptUpdate
from services.exceptions import PromptActionError

PROMPTS_PATH = "/api/prompts"


def get_api_base_url() -> str:
    """Get the API base URL from environment."""
    return os.getenv("PROMPT_MANAGER_API_URL", "http://localhost:8000")


def get_default_timeout() -> float:
    """Get the default request timeout."""
    return float(os.getenv("PROMPT_MANAGER_API_TIMEOUT", "30.0"))


def error_message(response: httpx.Response) -> str:
    """
    Turn an error response into the single plain message shown to the user.

    401 always reads "Unauthorized". Otherwise the API's `detail` is used: a string
    as-is, or the messages of a FastAPI validation error list joined together.
    """
    if response.status_code == 401:
        return "Unauthorized"

    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None

    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list):
        messages = [str(err.get("msg", "")) for err in detail if isinstance(err, dict)]
        messages = [m for m in messages if m]
        if messages:
            return "; ".join(messages)
    if response.status_code == 404:
        return "Prompt not found"
    return f"Request failed with status {response.status_code}"


class PromptApiClient:
    """
    Prompt actions over HTTP, authenticated with an Auth0 access token.

    Implements the same create/update/delete coroutines as SessionPromptActions,
    so a PromptGrid can run against a remote server. Every failure, including
    transport errors, surfaces as PromptActionError with a plain message.
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url or get_api_base_url(),
            timeout=timeout if timeout is not None else get_default_timeout(),
        )

    async def __aenter__(self) -> "PromptApiClient":
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

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, path, json=json, headers=self._headers(),
            )
        except httpx.RequestError as e:
            raise PromptActionError("Failed to reach the server") from e
        if response.is_error:
            raise PromptActionError(error_message(response))
        return response

    async def list_prompts(self) -> list[PromptResponse]:
        """Fetch the caller's prompts, newest first."""
        response = await self._request("GET", f"{PROMPTS_PATH}/")
        return [PromptResponse.model_validate(item) for item in response.json()]

    async def get_prompt(self, prompt_id: int) -> PromptResponse:
        """Fetch one of the caller's prompts."""
        response = await self._request("GET", f"{PROMPTS_PATH}/{prompt_id}")
        return PromptResponse.model_validate(response.json())

    async def create_prompt(self, fields: PromptCreate) -> PromptResponse:
        """Create a prompt and return the stored record."""
        response = await self._request("POST", f"{PROMPTS_PATH}/", json=fields.model_dump())
        return PromptResponse.model_validate(response.json())

    async def update_prompt(self, prompt_id: int, fields: PromptUpdate) -> PromptResponse:
        """Replace a prompt's name, description, and content."""
        response = await self._request(
            "PUT", f"{PROMPTS_PATH}/{prompt_id}", json=fields.model_dump(),
        )
        return PromptResponse.model_validate(response.json())

    async def delete_prompt(self, prompt_id: int) -> None:
        """Delete a prompt."""
        await self._request("DELETE", f"{PROMPTS_PATH}/{prompt_id}")
