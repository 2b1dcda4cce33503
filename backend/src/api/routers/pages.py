"""Server-rendered pages: the prompt grid and its create/edit dialog."""
from typing import Literal

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_optional_user, get_settings
from api.templating import templates
from client.prompt_grid import PromptGrid
from core.auth import AuthenticatedUser
from core.config import Settings
from schemas.prompt import PromptResponse
from services import prompt_service
from services.prompt_actions import SessionPromptActions


router = APIRouter(tags=["pages"], include_in_schema=False)


def _sign_in_redirect() -> RedirectResponse:
    return RedirectResponse("/sign-in", status_code=status.HTTP_302_FOUND)


def _grid_redirect() -> RedirectResponse:
    # 303 so the browser follows a form POST with a GET
    return RedirectResponse("/prompts", status_code=status.HTTP_303_SEE_OTHER)


async def _load_grid(
    db: AsyncSession,
    user: AuthenticatedUser,
    settings: Settings,
) -> PromptGrid:
    """Build the grid from the user's current prompts, wired to in-process actions."""
    prompts = await prompt_service.list_prompts(db, user.id)
    return PromptGrid(
        prompts=[PromptResponse.model_validate(p) for p in prompts],
        actions=SessionPromptActions(db, user.id, settings.field_limits),
    )


def _render_grid(
    request: Request,
    grid: PromptGrid,
    user: AuthenticatedUser,
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "prompts.html",
        {"grid": grid, "user": user},
        status_code=status_code,
    )


@router.get("/")
async def index() -> RedirectResponse:
    """The grid is the home page."""
    return RedirectResponse("/prompts", status_code=status.HTTP_302_FOUND)


@router.get("/prompts", response_class=HTMLResponse)
async def prompts_page(
    request: Request,
    dialog: Literal["create"] | None = None,
    edit: int | None = None,
    user: AuthenticatedUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Render the current user's prompts.

    `?dialog=create` opens the create dialog; `?edit={id}` opens the edit dialog
    pre-filled from that prompt.
    """
    if user is None:
        return _sign_in_redirect()

    grid = await _load_grid(db, user, settings)
    if edit is not None:
        try:
            grid.open_edit(edit)
        except LookupError:
            raise HTTPException(status_code=404, detail="Prompt not found")
    elif dialog == "create":
        grid.open_create()

    return _render_grid(request, grid, user)


@router.post("/prompts", response_class=HTMLResponse)
async def submit_prompt(
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    content: str = Form(""),
    editing_id: str = Form(""),
    user: AuthenticatedUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Submit the create/edit dialog.

    On success redirects back to the grid. On failure re-renders the grid with the
    dialog still open, the submitted values kept, and the error shown inline.
    """
    if user is None:
        return RedirectResponse("/sign-in", status_code=status.HTTP_303_SEE_OTHER)

    grid = await _load_grid(db, user, settings)
    if editing_id.strip():
        try:
            target = int(editing_id)
        except ValueError:
            # ids start at 1, so this never matches a row and the update reports not found
            target = 0
        grid.open_edit_target(target)
    else:
        grid.open_create()

    grid.update_form(name=name, description=description, content=content)
    if await grid.submit():
        return _grid_redirect()

    return _render_grid(request, grid, user, status_code=status.HTTP_400_BAD_REQUEST)


@router.post("/prompts/{prompt_id}/delete", response_class=HTMLResponse)
async def delete_prompt(
    request: Request,
    prompt_id: int,
    user: AuthenticatedUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Delete a prompt from the grid."""
    if user is None:
        return RedirectResponse("/sign-in", status_code=status.HTTP_303_SEE_OTHER)

    grid = await _load_grid(db, user, settings)
    if await grid.delete(prompt_id):
        return _grid_redirect()

    return _render_grid(request, grid, user, status_code=status.HTTP_404_NOT_FOUND)
