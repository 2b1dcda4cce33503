"""Sign-in, Auth0 callback, and sign-out routes."""
import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from api.dependencies import get_optional_user, get_settings
from api.templating import templates
from core.auth import AuthenticatedUser, user_from_token
from core.auth0 import Auth0LoginError, build_authorize_url, build_logout_url, exchange_code
from core.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"], include_in_schema=False)

STATE_COOKIE_NAME = "prompt_manager_auth_state"
STATE_COOKIE_MAX_AGE = 600


@router.get("/sign-in", response_class=HTMLResponse)
async def sign_in_page(
    request: Request,
    user: AuthenticatedUser | None = Depends(get_optional_user),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Show the sign-in page, or go straight to the grid if already signed in."""
    if user is not None:
        return RedirectResponse("/prompts", status_code=status.HTTP_302_FOUND)
    return templates.TemplateResponse(
        request,
        "sign_in.html",
        {"user": None, "dev_mode": settings.dev_mode},
    )


@router.get("/auth/login")
async def login(settings: Settings = Depends(get_settings)) -> RedirectResponse:
    """Start the Auth0 login, remembering a random state value to check on return."""
    if settings.dev_mode:
        return RedirectResponse("/prompts", status_code=status.HTTP_302_FOUND)

    state = secrets.token_urlsafe(32)
    response = RedirectResponse(
        build_authorize_url(settings, state), status_code=status.HTTP_302_FOUND,
    )
    response.set_cookie(
        STATE_COOKIE_NAME,
        state,
        max_age=STATE_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/auth/callback")
async def callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Complete the Auth0 login and store the access token in the session cookie."""
    if error:
        logger.warning("Auth0 login returned error: %s", error)
        raise HTTPException(status_code=400, detail="Sign-in failed")

    expected_state = request.cookies.get(STATE_COOKIE_NAME)
    if not code or not state or not expected_state or not secrets.compare_digest(
        state, expected_state,
    ):
        raise HTTPException(status_code=400, detail="Invalid sign-in state")

    try:
        token = await exchange_code(settings, code)
    except Auth0LoginError as e:
        raise HTTPException(status_code=502, detail=str(e))

    # Reject tokens we could not validate on later requests anyway
    user = user_from_token(token.access_token, settings)
    logger.info("User %s signed in", user.id)

    response = RedirectResponse("/prompts", status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        settings.session_cookie_name,
        token.access_token,
        max_age=token.expires_in,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    response.delete_cookie(STATE_COOKIE_NAME)
    return response


@router.get("/sign-out")
async def sign_out(settings: Settings = Depends(get_settings)) -> RedirectResponse:
    """Clear the session cookie and end the Auth0 session."""
    target = "/sign-in" if settings.dev_mode else build_logout_url(settings)
    response = RedirectResponse(target, status_code=status.HTTP_302_FOUND)
    response.delete_cookie(settings.session_cookie_name)
    return response
