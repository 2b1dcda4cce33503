"""Prompts CRUD endpoints (JSON API)."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from core.auth import AuthenticatedUser
from core.config import Settings
from models.prompt import Prompt
from schemas.prompt import PromptCreate, PromptResponse, PromptUpdate
from services import prompt_service
from services.exceptions import FieldLimitExceededError

router = APIRouter(prefix="/api/prompts", tags=["prompts"])

NOT_FOUND_DETAIL = "Prompt not found"


@router.get("/", response_model=list[PromptResponse])
async def list_prompts(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[Prompt]:
    """List the current user's prompts, newest first."""
    return await prompt_service.list_prompts(db, current_user.id)


@router.post("/", response_model=PromptResponse, status_code=201)
async def create_prompt(
    data: PromptCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Prompt:
    """Create a new prompt owned by the current user."""
    try:
        return await prompt_service.create_prompt(
            db, current_user.id, data, settings.field_limits,
        )
    except FieldLimitExceededError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> Prompt:
    """Get one of the current user's prompts."""
    prompt = await prompt_service.get_prompt(db, current_user.id, prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return prompt


@router.put("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: int,
    data: PromptUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Prompt:
    """
    Replace a prompt's name, description, and content.

    Returns 404 both when the prompt doesn't exist and when it belongs to another
    user, so ids of other users' prompts can't be probed.
    """
    try:
        prompt = await prompt_service.update_prompt(
            db, current_user.id, prompt_id, data, settings.field_limits,
        )
    except FieldLimitExceededError as e:
        raise HTTPException(status_code=400, detail=e.message)
    if prompt is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return prompt


@router.delete("/{prompt_id}", status_code=204)
async def delete_prompt(
    prompt_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Permanently delete one of the current user's prompts."""
    deleted = await prompt_service.delete_prompt(db, current_user.id, prompt_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
