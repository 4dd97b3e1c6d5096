from typing import Annotated

from fastapi import APIRouter, Body, Header, Query, Request

from trademark_api.core.client_identity import resolve_client_identifier
from trademark_api.core.container import ServiceDep
from trademark_api.schemas.trademarks import (
    GenerateTrademarksRequest,
    GenerateTrademarksResponse,
    LatestTrademarksResponse,
    RateLimitStatusResponse,
)

router = APIRouter(prefix="/trademarks", tags=["Trademarks"])

ClientIdHeader = Annotated[str | None, Header(alias="X-Client-Id")]


@router.post(
    "/generate",
    response_model=GenerateTrademarksResponse,
)
async def generate_trademarks(
    request: Request,
    service: ServiceDep,
    payload: Annotated[GenerateTrademarksRequest | None, Body()] = None,
    x_client_id: ClientIdHeader = None,
) -> GenerateTrademarksResponse:
    """Generate up to 10 coined trademark names for the calling client.

    The client identifier comes from the body (``ipAddress``), then the
    ``X-Client-Id`` header, and is otherwise derived from the request.
    Errors are returned in the standard envelope with a ``kind`` tag:
    ``invalid_request`` (400), ``rate_limited`` (429), ``provider_config``
    (500), ``generation_failed`` (502) or ``persistence_error`` (500).
    """
    client_identifier = resolve_client_identifier(
        request,
        supplied=payload.client_identifier if payload else None,
        header_value=x_client_id,
    )
    batch = await service.generate(client_identifier)
    return GenerateTrademarksResponse(
        names=batch.names,
        client_identifier=batch.client_identifier,
        created_at=batch.created_at,
    )


@router.get(
    "/latest",
    response_model=LatestTrademarksResponse,
)
async def get_latest_trademarks(
    request: Request,
    service: ServiceDep,
    client_id: Annotated[str | None, Query(description="Client identifier")] = None,
    x_client_id: ClientIdHeader = None,
) -> LatestTrademarksResponse:
    """Return the client's most recent batch without generating a new one.

    Resolves the identifier the same way as the generation endpoint, so a
    caller reads back exactly what it was last shown.
    """
    client_identifier = resolve_client_identifier(
        request,
        supplied=client_id,
        header_value=x_client_id,
    )
    return LatestTrademarksResponse(batch=await service.latest(client_identifier))


@router.get(
    "/rate-limit",
    response_model=RateLimitStatusResponse,
)
async def get_rate_limit_status(
    request: Request,
    service: ServiceDep,
    client_id: Annotated[str | None, Query(description="Client identifier")] = None,
    x_client_id: ClientIdHeader = None,
) -> RateLimitStatusResponse:
    """Report whether the client could generate right now, without spending quota.

    When a tier would reject, ``quota_name`` names it and ``retry_after``
    gives the UNIX time at which it admits again.
    """
    client_identifier = resolve_client_identifier(
        request,
        supplied=client_id,
        header_value=x_client_id,
    )
    result = service.check_rate_limit(client_identifier)
    return RateLimitStatusResponse(
        ok=result.ok,
        client_identifier=client_identifier.strip(),
        quota_name=None if result.ok else result.quota_name,
        retry_after=result.retry_after,
    )
