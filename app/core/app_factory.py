"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
process-wide state) so tests can build isolated instances with their own
rate limiter and stubbed upstream.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.api.routes import health_router, send_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.rate_limit import build_rate_limiter
from app.services.relay_service import RelayService


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    relay_service: RelayService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Optional limiter; built from settings when omitted.
        relay_service: Optional relay service; built from settings when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and state.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Anonymous Message Relay",
        description=(
            "Accepts an anonymous text message and relays it to a fixed Telegram "
            "chat. Applies a per-client sliding-window rate limit, rejects "
            "links and @ mentions, and escapes the text for MarkdownV2."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    # Process-wide state, shared by every request handled by this app
    app.state.rate_limiter = rate_limiter or build_rate_limiter(settings.app)
    app.state.relay_service = relay_service or RelayService()

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(send_router, prefix="/api")
    app.include_router(health_router)

    return app
