"""Pydantic schemas for generated names and stored result batches."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class GeneratedName(BaseModel):
    """One candidate trademark."""

    name: str = Field(
        ...,
        min_length=1,
        description="Coined brand name (trimmed, non-empty).",
    )
    description: str = Field(
        ...,
        max_length=100,
        description="Short rationale for the name, at most 100 characters.",
    )
    industry: str = Field(
        ...,
        description="Industry or category the name is aimed at.",
    )


class ResultBatch(BaseModel):
    """Names produced by one successful generation call.

    Serializes to the persisted record shape
    ``{batchId, names, createdAt, ipAddress}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    batch_id: str = Field(
        default_factory=lambda: uuid4().hex,
        alias="batchId",
        description="Idempotency key; saving the same batch twice stores it once.",
    )
    client_identifier: str = Field(
        ...,
        alias="ipAddress",
        description="Client identifier the batch was generated for.",
    )
    names: list[GeneratedName] = Field(
        default_factory=list,
        max_length=10,
        description="Names in generation order.",
    )
    created_at: int = Field(
        ...,
        alias="createdAt",
        description="Creation time in UNIX epoch milliseconds.",
    )


class GenerateTrademarksRequest(BaseModel):
    """Body of the generation endpoint.

    ``ipAddress`` is the historical field name for the client identifier; the
    value is a browser fingerprint, not a network address.
    """

    model_config = ConfigDict(populate_by_name=True)

    client_identifier: str | None = Field(
        default=None,
        alias="ipAddress",
        description="Client identifier (e.g. 'fp-1a2b3c'). Derived server-side when omitted.",
    )


class GenerateTrademarksResponse(BaseModel):
    names: list[GeneratedName] = Field(
        default_factory=list,
        description="Up to 10 generated names.",
    )
    client_identifier: str = Field(
        ...,
        description="Identifier the request was rate limited and stored under.",
    )
    created_at: int = Field(
        ...,
        description="Batch creation time in UNIX epoch milliseconds.",
    )


class LatestTrademarksResponse(BaseModel):
    batch: ResultBatch | None = Field(
        default=None,
        description="Most recent batch for the client, or null if none exists.",
    )


class RateLimitStatusResponse(BaseModel):
    """Whether a generation would be admitted right now.

    Reading the status never spends quota.
    """

    ok: bool = Field(
        ...,
        description="True when every quota tier would admit a generation now.",
    )
    client_identifier: str = Field(
        ...,
        description="Identifier the status was computed for.",
    )
    quota_name: str | None = Field(
        default=None,
        description="Tier that would reject the request, when ok is false.",
    )
    retry_after: float | None = Field(
        default=None,
        description="UNIX epoch seconds when that tier admits again, when ok is false.",
    )
