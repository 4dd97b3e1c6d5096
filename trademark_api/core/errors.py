"""Application-level exception types.

Every failure a caller can observe is one of the tagged variants below. The
``kind`` tag is what presentation code switches on; ``message`` is human copy
and must not be parsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    min_length: int
    max_length: int
    actual_length: int
    expected_prefix: str
    retry_after_seconds: float
    provider: str
    model: str
    stage: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    kind: ClassVar[str] = "app_error"
    status_code: ClassVar[int] = 400

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class InvalidRequestAppError(AppError):
    """Raised when the client identifier is missing or malformed."""

    kind = "invalid_request"
    status_code = 400


@dataclass
class RateLimitedAppError(AppError):
    """Raised when a quota tier rejects the request.

    Attributes:
        quota_name: Tier that rejected the request (minute, hour, day).
        retry_after: UNIX epoch seconds at which that tier admits again.
    """

    kind: ClassVar[str] = "rate_limited"
    status_code: ClassVar[int] = 429

    quota_name: str = ""
    retry_after: float | None = None


class ProviderConfigAppError(AppError):
    """Raised when the text-generation provider is not configured."""

    kind = "provider_config"
    status_code = 500


class LLMAppError(AppError):
    """Raised when the provider call fails or returns no content."""

    kind = "provider_error"
    status_code = 502


class GenerationFailedAppError(AppError):
    """Raised when a generation attempt produced nothing usable."""

    kind = "generation_failed"
    status_code = 502


class PersistenceAppError(AppError):
    """Raised when a result batch cannot be durably recorded or read."""

    kind = "persistence_error"
    status_code = 500
