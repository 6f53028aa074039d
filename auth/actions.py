"""
auth/actions.py -- Sign-in, sign-up, and sign-out actions.

Each action is a coroutine over form input plus injected collaborators
(auth/interfaces.py). The actions validate, decide, and shape the response;
they never touch SQL, cookies, or the HTTP request.

Guarantees:
  sign_in / sign_up never raise. Validation problems come back as
      ValidationFailure, refusals as BusinessFailure, and any exception from a
      collaborator is logged and returned as UnexpectedFailure.
  No collaborator is called when validation fails.
  Collaborator calls are awaited one at a time, in order.
  sign_out always returns Redirect(signin route), whether or not the session
      could be deleted. A deletion error is logged, never raised.

Credential refusals differ in which field carries the message:
an unknown email is reported on "email", a wrong password on "password".
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from auth.forms import SignInForm, SignUpForm, parse_form
from auth.interfaces import PasswordVerifier, SessionHandle, UserDirectory
from auth.results import ActionResult, BusinessFailure, Redirect, Success, UnexpectedFailure, ValidationFailure
from core.config import get_settings

logger = logging.getLogger("issuetracker.auth.actions")

INVALID_CREDENTIALS = "Invalid email or password"
USER_EXISTS = "User already exists, please login..."


async def sign_in(
    form: Mapping[str, Any] | None,
    *,
    users: UserDirectory,
    sessions: SessionHandle,
    verify_password: PasswordVerifier,
) -> ActionResult:
    """Authenticate email + password and open a session."""
    data, errors = parse_form(SignInForm, form)
    if data is None:
        return ValidationFailure("Validation failed", errors)

    try:
        user = await users.get_user_by_email(data.email)
        if user is None:
            return BusinessFailure(INVALID_CREDENTIALS, errors={"email": [INVALID_CREDENTIALS]})

        if not await verify_password(data.password, user.password):
            return BusinessFailure(INVALID_CREDENTIALS, errors={"password": [INVALID_CREDENTIALS]})

        await sessions.create_session(user.id)
    except Exception:
        logger.exception("Sign in error")
        return UnexpectedFailure("An error occurred while signing in", "Failed to sign in")

    return Success("Signed in successfully")


async def sign_up(
    form: Mapping[str, Any] | None,
    *,
    users: UserDirectory,
    sessions: SessionHandle,
) -> ActionResult:
    """Register a new account and open a session for it."""
    data, errors = parse_form(SignUpForm, form)
    if data is None:
        return ValidationFailure("Invalid entries", errors)

    try:
        if await users.get_user_by_email(data.email) is not None:
            return BusinessFailure(USER_EXISTS, code=USER_EXISTS)

        user = await users.create_user(data.email, data.password)
        if user is None:
            return BusinessFailure("Failed to create user...", code="Failed to create user")

        await sessions.create_session(user.id)
    except Exception:
        logger.exception("Sign up failed")
        return UnexpectedFailure("An error occurred while creating your account", "Failed to create account")

    return Success("Account created successfully")


async def sign_out(*, sessions: SessionHandle, delay: float | None = None) -> Redirect:
    """Tear down the current session, then send the caller to sign-in.

    delay is in seconds; None means Settings.signout_delay_ms. The pause runs
    before the session is deleted.
    """
    settings = get_settings()
    if delay is None:
        delay = settings.signout_delay_ms / 1000
    try:
        await asyncio.sleep(delay)
        await sessions.delete_session()
    except Exception:
        logger.exception("Failed to sign out")
    return Redirect(settings.signin_route)
