from __future__ import annotations

from trademark_api.api.routes.health import router as health_router
from trademark_api.api.routes.trademarks import router as trademarks_router

__all__ = ["health_router", "trademarks_router"]
