from __future__ import annotations

from fastapi import APIRouter

from trademark_api.core.container import ServiceDep

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(service: ServiceDep) -> dict:
    """Liveness check.

    ``provider_configured`` is false when no provider credential is set; the
    process is still healthy but generation requests will fail until an
    operator configures one.
    """

    return {
        "status": "ok",
        "provider_configured": service.generator.is_configured,
    }
