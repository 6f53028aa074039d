"""
auth/results.py -- Tagged result types returned by the auth actions.

Each variant holds exactly the parts its case needs, so a success can never
carry field errors and an unexpected failure always carries a code. to_dict()
produces the loose response shape the forms and the JSON API render:

    {"success": bool, "message": str, "errors"?: {field: [msg, ...]}, "error"?: str}

Keys that a variant does not have are omitted, never sent as null.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Success:
    message: str

    success = True

    def to_dict(self) -> dict:
        return {"success": True, "message": self.message}


@dataclass(frozen=True)
class ValidationFailure:
    """The submitted form failed schema validation."""

    message: str
    errors: dict[str, list[str]] = field(default_factory=dict)

    success = False

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "errors": self.errors}


@dataclass(frozen=True)
class BusinessFailure:
    """A well-formed request was refused (bad credentials, duplicate account, ...).

    code is the short error string; errors attributes the refusal to a field.
    Either or both may be present.
    """

    message: str
    code: str | None = None
    errors: dict[str, list[str]] | None = None

    success = False

    def to_dict(self) -> dict:
        body: dict = {"success": False, "message": self.message}
        if self.errors is not None:
            body["errors"] = self.errors
        if self.code is not None:
            body["error"] = self.code
        return body


@dataclass(frozen=True)
class UnexpectedFailure:
    """A collaborator raised. The exception itself is only logged."""

    message: str
    code: str

    success = False

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "error": self.code}


@dataclass(frozen=True)
class Redirect:
    """Navigate the caller to location. Returned by sign_out()."""

    location: str


ActionResult = Union[Success, ValidationFailure, BusinessFailure, UnexpectedFailure]
