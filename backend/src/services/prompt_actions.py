"""In-process prompt mutation actions bound to one caller's session."""
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import FieldLimits
from schemas.prompt import PromptCreate, PromptResponse, PromptUpdate
from services import prompt_service
from services.exceptions import PromptNotFoundError
from services.prompt_service import DEFAULT_FIELD_LIMITS


class SessionPromptActions:
    """
    Prompt actions executed directly against the database.

    Every action is stamped with, and scoped to, the authenticated user id the
    instance was created with. Used by the server-rendered pages; API clients use
    PromptApiClient, which exposes the same three coroutines over HTTP.
    """

    def __init__(
        self,
        db: AsyncSession,
        user_id: str,
        limits: FieldLimits = DEFAULT_FIELD_LIMITS,
    ) -> None:
        self.db = db
        self.user_id = user_id
        self.limits = limits

    async def create_prompt(self, fields: PromptCreate) -> PromptResponse:
        """Create a prompt owned by the bound user and return the stored record."""
        prompt = await prompt_service.create_prompt(self.db, self.user_id, fields, self.limits)
        return PromptResponse.model_validate(prompt)

    async def update_prompt(self, prompt_id: int, fields: PromptUpdate) -> PromptResponse:
        """Replace the mutable fields of one of the bound user's prompts."""
        prompt = await prompt_service.update_prompt(
            self.db, self.user_id, prompt_id, fields, self.limits,
        )
        if prompt is None:
            raise PromptNotFoundError(prompt_id)
        return PromptResponse.model_validate(prompt)

    async def delete_prompt(self, prompt_id: int) -> None:
        """Delete one of the bound user's prompts."""
        deleted = await prompt_service.delete_prompt(self.db, self.user_id, prompt_id)
        if not deleted:
            raise PromptNotFoundError(prompt_id)
