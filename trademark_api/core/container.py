"""Service wiring.

The generation service is built once per application instance and kept on
``app.state``; routes reach it through the ``get_generation_service``
dependency, which tests can override.
"""

from __future__ import annotations

import logging
import time
from typing import Annotated, Callable

from fastapi import Depends, Request

from trademark_api.adapters.storage import create_result_store
from trademark_api.core.config import Settings, settings
from trademark_api.core.rate_limit import create_rate_limit_gate
from trademark_api.services.generation_service import GenerationService
from trademark_api.services.name_generator import NameGenerator

logger = logging.getLogger(__name__)


def build_generation_service(
    cfg: Settings | None = None,
    *,
    clock: Callable[[], float] = time.time,
) -> GenerationService:
    """Assemble the gate, generator and store from settings."""

    cfg = cfg or settings
    gate = create_rate_limit_gate(cfg.app, clock=clock)
    generator = NameGenerator(cfg.llm)
    store = create_result_store(cfg.app.result_store_path)

    logger.info(
        "service.initialised",
        extra={
            "quotas": list(gate.order),
            "store": type(store).__name__,
            "theme": cfg.app.naming_theme,
            "provider": cfg.llm.provider,
            "provider_configured": generator.is_configured,
        },
    )
    if not generator.is_configured:
        logger.warning("service.provider_not_configured", extra={"provider": cfg.llm.provider})

    return GenerationService(
        gate=gate,
        generator=generator,
        store=store,
        app_settings=cfg.app,
        clock=clock,
    )


def get_generation_service(request: Request) -> GenerationService:
    """FastAPI dependency returning the application's generation service."""

    return request.app.state.generation_service


ServiceDep = Annotated[GenerationService, Depends(get_generation_service)]
