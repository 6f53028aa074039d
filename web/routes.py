"""
web/routes.py -- Jinja2 template routes for the issue tracker web UI.

These routes serve server-rendered HTML and share app.state.user_store with
the API routes. Form posts go through the same actions as the JSON API; the
only difference is how the result is rendered.

Routes:
  GET  /          -- redirect to /issues
  GET  /signin    -- sign-in form
  POST /signin    -- run sign_in; 303 to ?next or /issues, else re-render with errors
  GET  /signup    -- sign-up form
  POST /signup    -- run sign_up; 303 to /issues, else re-render with errors
  POST /signout   -- run sign_out; 303 to /signin, cookie cleared
  GET  /issues    -- issues page inside the issues layout (auth required)
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from auth.actions import USER_EXISTS, sign_in, sign_out, sign_up
from auth.dal import StoreUserDirectory, verify_password_async
from auth.dependencies import session_manager, try_get_current_user
from auth.models import User
from auth.results import BusinessFailure, Success, ValidationFailure
from core.config import get_settings

logger = logging.getLogger("issuetracker.web")

# Templates never query the store. Routes resolve the user and pass it in as
# current_user, which layout.html uses to pick sign-in links or sign-out.
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()

_HOME = "/issues"

# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def _safe_next(next_url: Optional[str]) -> str:
    """Validate a post-sign-in redirect target. Only accept relative paths.

    Rejects absolute URLs and protocol-relative "//host" paths so the
    sign-in page cannot be used as an open redirect.
    """
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return _HOME


def _require_auth(request: Request, current_user: Optional[User]) -> Optional[RedirectResponse]:
    """Return a RedirectResponse to the sign-in page if not authenticated, None if OK.

    Call at the top of protected route handlers:
        current_user = try_get_current_user(request)
        if redirect := _require_auth(request, current_user):
            return redirect
    """
    if current_user is None:
        return RedirectResponse(f"{get_settings().signin_route}?next={request.url.path}", status_code=302)
    return None


def _status_for(result) -> int:
    """Status code for a re-rendered form after a failed action."""
    if isinstance(result, ValidationFailure):
        return 400
    if isinstance(result, BusinessFailure):
        if result.errors is not None:
            return 401
        if result.code == USER_EXISTS:
            return 409
    return 500


def _form_values(form, *keys: str) -> dict:
    """Values to echo back into a re-rendered form. Passwords are never echoed."""
    return {key: str(form.get(key) or "") for key in keys}


# ---------------------------------------------------------------------------
# GET / -- landing
# ---------------------------------------------------------------------------


@router.get("/")
def index() -> RedirectResponse:
    return RedirectResponse(_HOME, status_code=302)


# ---------------------------------------------------------------------------
# Sign in
# ---------------------------------------------------------------------------


@router.get("/signin", response_class=HTMLResponse)
def signin_form(request: Request) -> HTMLResponse:
    """Render the sign-in form. Already signed-in users go straight to /issues."""
    if try_get_current_user(request) is not None:
        return RedirectResponse(_HOME, status_code=302)
    return templates.TemplateResponse(
        request,
        "signin.html",
        {"result": None, "form_data": {}, "next": request.query_params.get("next", ""), "current_user": None},
    )


@router.post("/signin", response_class=HTMLResponse)
async def signin_post(request: Request) -> HTMLResponse:
    """Handle the sign-in form POST."""
    form = await request.form()
    manager = session_manager(request)
    result = await sign_in(
        form,
        users=StoreUserDirectory(request.app.state.user_store),
        sessions=manager,
        verify_password=verify_password_async,
    )

    if isinstance(result, Success):
        resp = RedirectResponse(_safe_next(request.query_params.get("next")), status_code=303)
    else:
        logger.info("Sign-in rejected: %s", result.message)
        current_user = await run_in_threadpool(try_get_current_user, request)
        resp = templates.TemplateResponse(
            request,
            "signin.html",
            {
                "result": result.to_dict(),
                "form_data": _form_values(form, "email"),
                "next": request.query_params.get("next", ""),
                "current_user": current_user,
            },
            status_code=_status_for(result),
        )
    manager.context.apply(resp)
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Sign up
# ---------------------------------------------------------------------------


@router.get("/signup", response_class=HTMLResponse)
def signup_form(request: Request) -> HTMLResponse:
    """Render the sign-up form."""
    if try_get_current_user(request) is not None:
        return RedirectResponse(_HOME, status_code=302)
    return templates.TemplateResponse(request, "signup.html", {"result": None, "form_data": {}, "current_user": None})


@router.post("/signup", response_class=HTMLResponse)
async def signup_post(request: Request) -> HTMLResponse:
    """Handle the sign-up form POST."""
    form = await request.form()
    manager = session_manager(request)
    result = await sign_up(form, users=StoreUserDirectory(request.app.state.user_store), sessions=manager)

    if isinstance(result, Success):
        resp = RedirectResponse(_HOME, status_code=303)
    else:
        current_user = await run_in_threadpool(try_get_current_user, request)
        resp = templates.TemplateResponse(
            request,
            "signup.html",
            {"result": result.to_dict(), "form_data": _form_values(form, "email"), "current_user": current_user},
            status_code=_status_for(result),
        )
    manager.context.apply(resp)
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Sign out
# ---------------------------------------------------------------------------


@router.post("/signout")
async def signout(request: Request) -> RedirectResponse:
    """Delete the session, clear the cookie, and go back to the sign-in page."""
    manager = session_manager(request)
    redirect = await sign_out(sessions=manager)
    resp = RedirectResponse(redirect.location, status_code=303)
    manager.context.apply(resp)
    return resp


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------


@router.get("/issues", response_class=HTMLResponse)
def issues(request: Request) -> HTMLResponse:
    current_user = try_get_current_user(request)
    if redirect := _require_auth(request, current_user):
        return redirect
    return templates.TemplateResponse(request, "issues/index.html", {"current_user": current_user})
