"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain, routing and unexpected) and return consistent JSON responses with
proper HTTP status codes and traceability.

Design:
- AppError subclasses → their declared HTTP status (400, 405, 429, 500, 502)
- Starlette HTTP errors (404, 405) → same body shape, headers preserved
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import AppError, MethodNotAllowedAppError, RateLimitAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _error_content(code: str, message: str) -> dict[str, Any]:
    """Build the error body shared by every handler.

    ``error`` stays a plain human-readable string; ``code`` and
    ``request_id`` are additive fields for clients and log correlation.
    """
    content: dict[str, Any] = {"error": message, "code": code}
    request_id = get_request_id()
    if request_id:
        content["request_id"] = request_id
    return content


def _rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    details = exc.details or {}
    headers: dict[str, str] = {}
    if "retry_after" in details:
        headers["Retry-After"] = str(details["retry_after"])
    if "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
    if "remaining" in details:
        headers["X-RateLimit-Remaining"] = str(details["remaining"])
    if "reset_at" in details:
        headers["X-RateLimit-Reset"] = str(details["reset_at"])
    return headers


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    The status code comes from the error class (``AppError.status_code``).
    Client errors are logged at warning level, server-side failures at error
    level so operators see misconfiguration and upstream outages.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error body.
    """
    status_code = exc.status_code
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    headers: dict[str, str] | None = None
    if isinstance(exc, RateLimitAppError):
        headers = _rate_limit_headers(exc) or None
    elif isinstance(exc, MethodNotAllowedAppError) and exc.details:
        headers = {"Allow": exc.details.get("allow", "POST")}

    return JSONResponse(
        status_code=status_code,
        content=_error_content(exc.code, exc.message),
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Re-shape routing errors raised by Starlette into the error body.

    A 405 is converted to ``MethodNotAllowedAppError`` so it flows through the
    same handler as domain errors; the ``Allow`` header set by the router is
    kept.
    """
    if exc.status_code == 405:
        allow = (exc.headers or {}).get("Allow", "POST")
        return await app_error_handler(
            request,
            MethodNotAllowedAppError(
                code="method_not_allowed",
                message="Method not allowed",
                details={"allow": allow},
            ),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(f"http_{exc.status_code}", str(exc.detail)),
        headers=exc.headers,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Catches any exception not handled by specific handlers.
    Logs detailed information for debugging while returning generic message.
    Prevents information leakage (no stack traces to client).

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_content(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Must be called during app initialization, before route registration.

    Args:
        app: FastAPI application instance.

    Example:
        >>> from fastapi import FastAPI
        >>> from app.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
