"""
auth/session.py -- Explicit session context and the session manager.

Nothing in the auth flow reads ambient request state. A route builds a
SessionContext from the incoming cookie, hands a SessionManager wrapping it to
the action, and afterwards calls context.apply(response) to write whatever
cookie change the action asked for.

  SessionContext -- the per-request cookie handle: incoming token in,
                    pending Set-Cookie / delete-cookie out.
  SessionManager -- SessionHandle implementation: creates and deletes rows in
                    UserStore and records the cookie change on the context.

Layer rule: no imports from api/ or web/. Starlette is imported only for the
thread pool helper.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from auth.errors import SessionError
from auth.models import User
from auth.store import UserStore
from auth.tokens import clear_session_cookie, create_session_token, decode_session_token, set_session_cookie
from core.config import get_settings

logger = logging.getLogger("issuetracker.auth")

_UNSET = object()


@dataclass
class SessionContext:
    """Cookie state for one request.

    token is the raw cookie value the browser sent (None if absent).
    After an action runs, outgoing is either _UNSET (leave the cookie alone),
    a new token string (set it), or None (delete it).
    """

    token: str | None = None
    outgoing: object = _UNSET

    @classmethod
    def from_cookies(cls, cookies) -> "SessionContext":
        return cls(token=cookies.get(get_settings().session_cookie_name) or None)

    def issue(self, token: str) -> None:
        self.token = token
        self.outgoing = token

    def clear(self) -> None:
        self.token = None
        self.outgoing = None

    @property
    def changed(self) -> bool:
        return self.outgoing is not _UNSET

    def apply(self, response) -> None:
        """Write the pending cookie change (if any) onto a Starlette response."""
        if self.outgoing is _UNSET:
            return
        if self.outgoing is None:
            clear_session_cookie(response)
        else:
            set_session_cookie(response, self.outgoing)


class SessionManager:
    """Create and destroy server-side sessions for one request."""

    def __init__(self, store: UserStore, context: SessionContext) -> None:
        self._store = store
        self.context = context

    async def create_session(self, user_id: str) -> None:
        expire = get_settings().session_expire_seconds
        try:
            session = await run_in_threadpool(self._store.create_session, user_id, expire)
        except SQLAlchemyError as exc:
            raise SessionError(f"could not create session for user {user_id}") from exc
        self.context.issue(create_session_token(session.id, user_id, expire))
        logger.info("Session created for user %s", user_id)

    async def delete_session(self) -> None:
        """Delete the session named by the current cookie and expire the cookie.

        A missing or unreadable cookie still clears the cookie; there is just
        no row to remove.
        """
        payload = decode_session_token(self.context.token) if self.context.token else None
        if payload is not None:
            try:
                await run_in_threadpool(self._store.delete_session, payload["sid"])
            except SQLAlchemyError as exc:
                raise SessionError("could not delete session") from exc
            logger.info("Session deleted for user %s", payload["sub"])
        self.context.clear()


def resolve_user(store: UserStore, token: str | None) -> User | None:
    """Synchronous cookie -> User lookup shared by routes and dependencies.

    Returns None for a missing, tampered, or expired token, and for a token
    whose session row was deleted by sign-out.
    """
    if not token:
        return None
    payload = decode_session_token(token)
    if payload is None:
        return None
    session = store.get_session(payload["sid"])
    if session is None or session.user_id != payload["sub"]:
        return None
    return store.get_by_id(session.user_id)
