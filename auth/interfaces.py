"""
auth/interfaces.py -- Collaborator contracts for the auth action layer.

auth/actions.py depends only on these Protocols, never on the store, the
JWT helpers, or FastAPI. auth/dal.py and auth/session.py are the production
implementations; tests pass small in-memory fakes.

All methods are coroutines. A missing user is a None return, not an error;
session failures are raised.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol

from auth.models import User

PasswordVerifier = Callable[[str, str], Awaitable[bool]]
"""async (plain_password, stored_digest) -> bool. Never raises on mismatch."""


class UserDirectory(Protocol):
    async def get_user_by_email(self, email: str) -> User | None: ...

    async def create_user(self, email: str, password: str) -> User | None:
        """Create a user from a raw password. Hashing is the implementation's job."""
        ...


class SessionHandle(Protocol):
    async def create_session(self, user_id: str) -> None: ...

    async def delete_session(self) -> None: ...
