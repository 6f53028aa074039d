"""
auth/dal.py -- Async data-access adapter over UserStore.

UserStore is synchronous SQLAlchemy Core. The action layer awaits its
collaborators, so this adapter pushes every store call (and bcrypt, which is
slow) onto Starlette's thread pool. The event loop never blocks
on SQLite or on a password hash.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from auth.errors import UserStoreError
from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password, verify_password

logger = logging.getLogger("issuetracker.auth")


class StoreUserDirectory:
    """UserDirectory backed by a UserStore."""

    def __init__(self, store: UserStore) -> None:
        self._store = store

    async def get_user_by_email(self, email: str) -> User | None:
        try:
            return await run_in_threadpool(self._store.get_by_email, email)
        except SQLAlchemyError as exc:
            raise UserStoreError(f"user lookup failed: {exc}") from exc

    async def create_user(self, email: str, password: str) -> User | None:
        """Hash the password and insert the user.

        Returns None when the email was taken between the caller's existence
        check and this insert (IntegrityError on the UNIQUE constraint).
        """
        digest = await run_in_threadpool(hash_password, password)
        try:
            user_id = await run_in_threadpool(self._store.create_user, User(email=email, password=digest))
        except IntegrityError:
            logger.warning("User creation lost a race on an existing email")
            return None
        except SQLAlchemyError as exc:
            raise UserStoreError(f"user creation failed: {exc}") from exc
        logger.info("Created user %s", user_id)
        return await run_in_threadpool(self._store.get_by_id, user_id)


async def verify_password_async(plain: str, hashed: str) -> bool:
    """Run bcrypt verification off the event loop."""
    return await run_in_threadpool(verify_password, plain, hashed)
