"""Pydantic schemas for the message relay endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    """Documented request body for ``POST /api/send``.

    The route reads the raw body itself (malformed JSON degrades to an empty
    message instead of a 422), so this model only feeds the OpenAPI schema.
    """

    message: str = Field(
        ...,
        description="Anonymous message text (1-1000 characters, no links or @ mentions).",
    )


class SendMessageResponse(BaseModel):
    """Acknowledgment returned once the upstream API accepted the message."""

    ok: bool = Field(True, description="Always true on success.")


class ErrorResponse(BaseModel):
    """Error body shared by every failure response."""

    error: str = Field(..., description="Human-readable error message.")
    code: str = Field(..., description="Machine-readable error code.")
    request_id: str | None = Field(
        default=None, description="Correlation id echoed in X-Request-ID."
    )
