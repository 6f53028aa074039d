"""
auth/errors.py -- Exceptions raised by the concrete auth collaborators.

The action layer never matches on these types: to sign_in()/sign_up() they
are just "unexpected failures" to log and convert. They exist so the store
and session adapters fail with a message that names what went wrong.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for collaborator failures in the auth package."""


class UserStoreError(AuthError):
    """The user store could not complete a read or write."""


class SessionError(AuthError):
    """A session could not be created or destroyed."""
