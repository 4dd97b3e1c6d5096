"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
the service graph) so tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from trademark_api.api.routes import health_router, trademarks_router
from trademark_api.core.config import Settings, settings
from trademark_api.core.container import build_generation_service
from trademark_api.core.exception_handlers import setup_exception_handlers
from trademark_api.core.logging import configure_logging
from trademark_api.core.middleware import request_id_middleware
from trademark_api.services.generation_service import GenerationService

OPENAPI_TAGS = [
    {
        "name": "Trademarks",
        "description": "Generate coined trademark names and fetch the latest batch.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def create_app(
    cfg: Settings | None = None,
    *,
    service: GenerationService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        cfg: Settings to build from; defaults to the global settings.
        service: Pre-built generation service (tests inject fakes here).

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = cfg or settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Trademark Name Generator API",
        description=(
            "Generates coined, pronounceable trademark name candidates with an "
            "LLM for anonymous clients. Requests are rate limited per client "
            "identifier across minute, hour and day tiers, and the latest batch "
            "per client can be fetched without generating."
        ),
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        debug=cfg.app.debug,
    )
    app.state.generation_service = service or build_generation_service(cfg)

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(trademarks_router, prefix="/v1")
    app.include_router(health_router)

    return app
