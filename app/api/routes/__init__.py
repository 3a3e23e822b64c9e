from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.send import router as send_router

__all__ = ["health_router", "send_router"]
