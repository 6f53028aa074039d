"""
API request and response models for the issue tracker REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
auth/results.py, which own the internal representation. Route handlers map
between the two.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.results import ActionResult

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth actions
# ---------------------------------------------------------------------------


class ActionResponse(BaseModel):
    """Body returned by POST /auth/signin and POST /auth/signup.

    Mirrors ActionResult.to_dict(): errors and error are omitted when absent
    (routes serialize with exclude_none=True).
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    errors: Optional[dict[str, list[str]]] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: ActionResult) -> "ActionResponse":
        return cls(**result.to_dict())


class MeResponse(BaseModel):
    """Response for GET /api/v1/auth/me."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    created_at: Optional[str] = None
