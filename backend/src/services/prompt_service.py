"""Service layer for prompt CRUD operations."""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import FieldLimits
from models.prompt import Prompt
from schemas.prompt import PromptFields
from services.exceptions import FieldLimitExceededError

logger = logging.getLogger(__name__)

DEFAULT_FIELD_LIMITS = FieldLimits()


def validate_field_limits(data: PromptFields, limits: FieldLimits) -> None:
    """
    Validate field lengths against the configured limits.

    Raises:
        FieldLimitExceededError: If any field exceeds its limit.
    """
    if len(data.name) > limits.max_name_length:
        raise FieldLimitExceededError("name", len(data.name), limits.max_name_length)
    if len(data.description) > limits.max_description_length:
        raise FieldLimitExceededError(
            "description", len(data.description), limits.max_description_length,
        )
    if len(data.content) > limits.max_content_length:
        raise FieldLimitExceededError(
            "content", len(data.content), limits.max_content_length,
        )


async def create_prompt(
    db: AsyncSession,
    user_id: str,
    data: PromptFields,
    limits: FieldLimits = DEFAULT_FIELD_LIMITS,
) -> Prompt:
    """
    Create a new prompt owned by `user_id`.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    validate_field_limits(data, limits)

    prompt = Prompt(
        user_id=user_id,
        name=data.name,
        description=data.description,
        content=data.content,
    )
    db.add(prompt)
    await db.flush()
    await db.refresh(prompt)
    logger.info("Created prompt %s for user %s", prompt.id, user_id)
    return prompt


async def get_prompt(
    db: AsyncSession,
    user_id: str,
    prompt_id: int,
) -> Prompt | None:
    """Get a prompt by ID, scoped to user. Returns None if not found or wrong user."""
    result = await db.execute(
        select(Prompt).where(
            Prompt.id == prompt_id,
            Prompt.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def list_prompts(db: AsyncSession, user_id: str) -> list[Prompt]:
    """Get all prompts for a user, newest first."""
    result = await db.execute(
        select(Prompt)
        .where(Prompt.user_id == user_id)
        .order_by(Prompt.created_at.desc(), Prompt.id.desc()),
    )
    return list(result.scalars().all())


async def update_prompt(
    db: AsyncSession,
    user_id: str,
    prompt_id: int,
    data: PromptFields,
    limits: FieldLimits = DEFAULT_FIELD_LIMITS,
) -> Prompt | None:
    """
    Replace name, description, and content of a prompt. Returns None if not found or wrong user.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    prompt = await get_prompt(db, user_id, prompt_id)
    if prompt is None:
        return None

    validate_field_limits(data, limits)

    prompt.name = data.name
    prompt.description = data.description
    prompt.content = data.content
    prompt.updated_at = func.now()

    await db.flush()
    await db.refresh(prompt)
    return prompt


async def delete_prompt(
    db: AsyncSession,
    user_id: str,
    prompt_id: int,
) -> bool:
    """
    Delete a prompt. Returns True if deleted, False if not found or wrong user.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    prompt = await get_prompt(db, user_id, prompt_id)
    if prompt is None:
        return False

    await db.delete(prompt)
    await db.flush()
    logger.info("Deleted prompt %s for user %s", prompt_id, user_id)
    return True
