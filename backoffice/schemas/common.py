"""Error envelope shared by every endpoint."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """One failure.

    Codes: VALIDATION_FAILED, CONFLICT, NOT_FOUND, INTERNAL_ERROR.
    """

    code: str
    message: str
    detail: dict[str, Any] | None = Field(
        default=None,
        description="Offending values, e.g. {'entity': 'customer', 'id': 999}",
    )


class ErrorResponse(BaseModel):
    """Format: { "error": { "code": str, "message": str, "detail": object } }"""

    error: ErrorDetail
