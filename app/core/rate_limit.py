"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.
- Explicit ownership: the limiter is built once by the app factory and kept
  on ``app.state``; requests only borrow it.

Rate limiting strategy:
- Sliding window per client address.
- Client address is the first entry of X-Forwarded-For, then the socket peer,
  then the "unknown" sentinel.
"""

from __future__ import annotations

import logging

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import AppSettings, settings
from app.core.errors import RateLimitAppError
from app.core.logging import fingerprint

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a bit before sending another message."


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create the process-wide limiter from configuration.

    Args:
        app_settings: Optional settings override; defaults to global settings.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    cfg = app_settings or settings.app
    return InMemorySlidingWindowRateLimiter(
        limit=cfg.rate_limit_requests,
        window_ms=cfg.rate_limit_window_ms,
    )


def get_client_identity(request: Request) -> str:
    """Derive the rate-limit bucket for a request.

    The value is not validated as a network address; it's only a key.

    Args:
        request: FastAPI request.

    Returns:
        str: Client identity string.
    """

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


def _build_rate_limit_key(client_identity: str) -> str:
    return f"ip:{client_identity}"


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client sliding window.

    When enabled, records the request in the client's window. If the client
    already used its budget, raises ``RateLimitAppError`` (HTTP 429).

    Args:
        request: FastAPI request.

    Raises:
        RateLimitAppError: When the rate limit is exceeded.
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter: AbstractRateLimiter = request.app.state.rate_limiter
    key = _build_rate_limit_key(get_client_identity(request))
    key_hash = fingerprint(key)

    result = limiter.check_and_record(key)
    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_ms": settings.app.rate_limit_window_ms,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_ms": settings.app.rate_limit_window_ms,
            "retry_after_s": retry_after,
        },
    )

    details = None
    if settings.app.rate_limit_include_headers:
        details = {
            "retry_after": retry_after,
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
        }

    raise RateLimitAppError(
        code="rate_limited",
        message=RATE_LIMIT_MESSAGE,
        details=details,
    )
