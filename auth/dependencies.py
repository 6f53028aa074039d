"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The only credential is the session cookie written by SessionContext.apply().
The cookie JWT names a sessions row; the row must still exist and be
unexpired, so a signed-out cookie stops working immediately.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or web/.
  auth/dependencies.py may import from fastapi because it is part of the
  FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.session import SessionContext, SessionManager, resolve_user


def try_get_current_user(request: Request) -> User | None:
    """Return the signed-in User for this request, or None. Never raises."""
    context = SessionContext.from_cookies(request.cookies)
    return resolve_user(request.app.state.user_store, context.token)


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user


def session_manager(request: Request) -> SessionManager:
    """Build a SessionManager over this request's cookie.

    The route must call manager.context.apply(response) on whatever response
    it returns, or the cookie change is lost.
    """
    return SessionManager(request.app.state.user_store, SessionContext.from_cookies(request.cookies))
