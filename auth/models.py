"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). The store maps rows
into these; the action layer only reads User.id and User.password.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is the login identifier and is stored lower-cased by the store.
    password holds the bcrypt digest, never the plaintext. The action layer
    passes it straight to verify_password() without looking inside.
    """

    email: str
    password: str  # bcrypt digest
    id: str | None = None  # uuid4 hex, assigned by the store
    created_at: str | None = None


@dataclass
class Session:
    """A server-side session row bound to one user.

    id is a random URL-safe token. The session cookie carries a signed JWT
    naming this id, so deleting the row revokes the cookie even before the
    JWT itself expires.
    """

    id: str
    user_id: str
    expires_at: str
    created_at: str | None = None
