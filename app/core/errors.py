"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. Each subclass carries
the HTTP status it maps to, so the exception handler stays a thin lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    max_value: int
    actual_value: int
    http_status: int
    retry_after: int
    limit: int
    remaining: int
    reset_at: int
    allow: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when the inbound message is rejected."""


class MethodNotAllowedAppError(AppError):
    """Raised when the route is hit with an unsupported HTTP method."""

    status_code: ClassVar[int] = 405


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget."""

    status_code: ClassVar[int] = 429


class ConfigurationAppError(AppError):
    """Raised when required server configuration is missing."""

    status_code: ClassVar[int] = 500


class UpstreamTransportAppError(AppError):
    """Raised when the messaging API cannot be reached."""

    status_code: ClassVar[int] = 500


class UpstreamApplicationAppError(AppError):
    """Raised when the messaging API answers but reports a failure."""

    status_code: ClassVar[int] = 502
