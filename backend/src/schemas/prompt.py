"""Pydantic schemas for prompt endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from schemas.validators import require_text


class PromptFields(BaseModel):
    """The user-editable fields of a prompt, all required."""

    name: str
    description: str
    content: str

    @field_validator("name", "description")
    @classmethod
    def check_label(cls, v: str, info: ValidationInfo) -> str:
        """Name and description must be non-blank; surrounding whitespace is trimmed."""
        return require_text(v, info.field_name)

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        """Content must be non-blank but is stored verbatim."""
        return require_text(v, "content", strip=False)


class PromptCreate(PromptFields):
    """Schema for creating a new prompt. The owner comes from the session, never the body."""


class PromptUpdate(PromptFields):
    """
    Schema for updating an existing prompt.

    Replaces name, description, and content together. The id is taken from the
    URL and the owner is immutable.
    """


class PromptResponse(BaseModel):
    """Schema for prompt responses (full stored record)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    name: str
    description: str
    content: str
    created_at: datetime
    updated_at: datetime
