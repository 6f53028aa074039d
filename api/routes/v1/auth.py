"""
api/routes/v1/auth.py -- JSON endpoints for the auth actions.

Routes:
  POST /api/v1/auth/signin   -- sign in; sets the session cookie
  POST /api/v1/auth/signup   -- register + sign in; sets the session cookie
  POST /api/v1/auth/signout  -- delete the session; 303 to the sign-in page
  GET  /api/v1/auth/me       -- current user info (requires auth)

Bodies may be form-encoded or JSON. The response body is always the action
result shape {success, message, errors?, error?}; the status code reflects
the variant:
  Success            200 (signin) / 201 (signup)
  ValidationFailure  422
  BusinessFailure    401 bad credentials, 409 existing account, 500 otherwise
  UnexpectedFailure  500

Security:
  POST /signin is rate-limited per client IP (Settings.signin_rate_limit).
  Cache-Control: no-store on every response that may set a session cookie.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from api.limiter import limiter
from api.models import ActionResponse, MeResponse
from auth.actions import USER_EXISTS, sign_in, sign_out, sign_up
from auth.dal import StoreUserDirectory, verify_password_async
from auth.dependencies import get_current_user, session_manager
from auth.models import User
from auth.results import ActionResult, BusinessFailure, Success, ValidationFailure
from auth.session import SessionManager
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/signin:   public, rate-limited
# - POST /api/v1/auth/signup:   public
# - POST /api/v1/auth/signout:  public -- clearing a session needs no prior auth
# - GET  /api/v1/auth/me:       requires auth (get_current_user)
router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _read_form(request: Request) -> dict[str, Any]:
    """Return the submitted fields from a JSON or form-encoded body."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    return dict(await request.form())


def _status_for(result: ActionResult, success_status: int) -> int:
    if isinstance(result, Success):
        return success_status
    if isinstance(result, ValidationFailure):
        return 422
    if isinstance(result, BusinessFailure):
        if result.errors is not None:
            return 401
        if result.code == USER_EXISTS:
            return 409
    return 500


def _action_response(result: ActionResult, success_status: int, manager: SessionManager) -> JSONResponse:
    resp = JSONResponse(
        status_code=_status_for(result, success_status),
        content=ActionResponse.from_result(result).model_dump(exclude_none=True),
    )
    manager.context.apply(resp)
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(get_settings().signin_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/signin", response_model=ActionResponse)
async def signin(request: Request, manager: SessionManager = Depends(session_manager)) -> JSONResponse:
    """Sign in with email and password."""
    users = StoreUserDirectory(request.app.state.user_store)
    result = await sign_in(
        await _read_form(request), users=users, sessions=manager, verify_password=verify_password_async
    )
    return _action_response(result, 200, manager)


@router.post("/auth/signup", response_model=ActionResponse, status_code=201)
async def signup(request: Request, manager: SessionManager = Depends(session_manager)) -> JSONResponse:
    """Create an account from email, password, and confirmPassword."""
    users = StoreUserDirectory(request.app.state.user_store)
    result = await sign_up(await _read_form(request), users=users, sessions=manager)
    return _action_response(result, 201, manager)


@router.post("/auth/signout")
async def signout(manager: SessionManager = Depends(session_manager)) -> RedirectResponse:
    """Delete the current session and redirect to the sign-in page."""
    redirect = await sign_out(sessions=manager)
    resp = RedirectResponse(redirect.location, status_code=303)
    manager.context.apply(resp)
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return identity information for the signed-in user."""
    return MeResponse(
        user_id=current_user.id,
        email=current_user.email,
        created_at=current_user.created_at,
    )
