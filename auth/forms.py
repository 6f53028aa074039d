"""
auth/forms.py -- Validation schemas for the sign-in and sign-up forms.

Form values arrive as whatever the caller collected (Starlette FormData, a
JSON dict, a plain mapping). parse_form() first coerces each expected field to
a string (missing -> "") and then validates with a Pydantic v2 model.

Error shape: every failing check on a field is reported, in declaration
order, so an empty email yields both "Email is required" and "Invalid email
format". Each field validator raises one PydanticCustomError carrying the full
list in its context; field_errors() flattens a ValidationError back into
{field_name: [messages...]} keyed by the form's own field names (aliases).

The password-confirmation check is a model validator, so it only runs once
every field has passed on its own, and it reports on confirmPassword.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

MIN_PASSWORD_LENGTH = 6

# Dot-atom local part from a restricted ASCII set, no leading dot and no "..",
# then dotted hostname labels ending in a TLD of two or more letters.
# Special-use names (.local, .test, .onion) are ordinary domains here.
EMAIL_PATTERN = re.compile(
    r"(?!\.)(?!.*\.\.)[A-Z0-9_'+\-.]*[A-Z0-9_+-]@(?:[A-Z0-9][A-Z0-9\-]*\.)+[A-Z]{2,}",
    re.IGNORECASE | re.ASCII,
)

_FormT = TypeVar("_FormT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Check helpers
# ---------------------------------------------------------------------------


def _password_length(value: str) -> int:
    """Length in UTF-16 code units, so an astral character counts as two."""
    return len(value.encode("utf-16-le", "surrogatepass")) // 2


def _reject(messages: list[str], field: str | None = None) -> PydanticCustomError:
    context: dict[str, Any] = {"summary": "; ".join(messages), "messages": messages}
    if field is not None:
        context["field"] = field
    return PydanticCustomError("form_field", "{summary}", context)


def _email_problems(value: str) -> list[str]:
    problems: list[str] = []
    if not value:
        problems.append("Email is required")
    if not EMAIL_PATTERN.fullmatch(value):
        problems.append("Invalid email format")
    return problems


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class SignInForm(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if problems := _email_problems(value):
            raise _reject(problems)
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not value:
            raise _reject(["Password is required"])
        return value


class SignUpForm(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    email: str
    password: str
    confirm_password: str = Field(alias="confirmPassword")

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if problems := _email_problems(value):
            raise _reject(problems)
        return value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if _password_length(value) < MIN_PASSWORD_LENGTH:
            raise _reject([f"Password must be at least {MIN_PASSWORD_LENGTH} characters"])
        return value

    @field_validator("confirm_password")
    @classmethod
    def check_confirm_password(cls, value: str) -> str:
        if not value:
            raise _reject(["Please confirm your password"])
        return value

    @model_validator(mode="after")
    def check_passwords_match(self) -> "SignUpForm":
        if self.password != self.confirm_password:
            raise _reject(["Passwords don't match"], field="confirmPassword")
        return self


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _form_keys(schema: type[BaseModel]) -> list[str]:
    return [info.alias or name for name, info in schema.model_fields.items()]


def coerce_form(form: Mapping[str, Any] | None, keys: list[str]) -> dict[str, str]:
    """Pick the expected keys out of form and force each value to str.

    Missing keys and None become "". Anything else goes through str(), so a
    stray number or upload object can never reach the validators as non-text.
    """
    form = form or {}
    data: dict[str, str] = {}
    for key in keys:
        value = form.get(key)
        if value is None:
            value = ""
        data[key] = value if isinstance(value, str) else str(value)
    return data


def field_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Flatten a ValidationError into {field: [messages...]}."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        ctx = err.get("ctx") or {}
        field = str(err["loc"][0]) if err["loc"] else ctx.get("field", "")
        errors.setdefault(field, []).extend(ctx.get("messages") or [err["msg"]])
    return errors


def parse_form(
    schema: type[_FormT], form: Mapping[str, Any] | None
) -> tuple[_FormT | None, dict[str, list[str]] | None]:
    """Validate form against schema.

    Returns (model, None) on success and (None, field_errors) on failure.
    Never raises for bad input.
    """
    data = coerce_form(form, _form_keys(schema))
    try:
        return schema.model_validate(data), None
    except ValidationError as exc:
        return None, field_errors(exc)
