"""Trademark generation service.

Orchestrates one generation request through fixed stages, each of which ends
the call with a typed error on failure:

    Validate -> Admit -> Generate -> Parse -> Persist -> Return

- Validation runs before any quota is consumed.
- Quota consumed by Admit is never refunded, even if a later stage fails.
- Names are returned only after the batch is durably stored, so the
  "latest" view always matches what the caller was shown.
- No stage retries; callers retry with a fresh request.

Store calls are blocking and run in the default executor so they never
stall the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Any, Callable, TypeVar

from trademark_api.adapters.rate_limit.base import AdmissionResult
from trademark_api.adapters.storage.base import AbstractResultStore
from trademark_api.core.client_identity import validate_client_identifier
from trademark_api.core.config import AppSettings, settings
from trademark_api.core.errors import (
    AppError,
    GenerationFailedAppError,
    LLMAppError,
    PersistenceAppError,
    ProviderConfigAppError,
    RateLimitedAppError,
)
from trademark_api.core.logging import hash_identifier
from trademark_api.schemas.trademarks import GeneratedName, ResultBatch
from trademark_api.services.name_generator import NameGenerator, PromptSpec
from trademark_api.services.rate_limit_gate import RateLimitGate
from trademark_api.services.response_parser import ResponseParseError, parse_trademark_response

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERATION_FAILED_MESSAGE = "Failed to generate trademarks. Please try again."

# Message copy per tier; older clients match on these phrases
RATE_LIMIT_MESSAGES = {
    "minute": "Rate limit exceeded. Please try again later.",
    "hour": "Hourly limit reached. Please wait a while before trying again.",
    "day": "Daily limit reached. Please try again tomorrow.",
}


def format_wait(seconds: float) -> str:
    """Human-readable rounding of a wait, e.g. ``"45 seconds"``, ``"3 hours"``."""

    seconds = max(0, math.ceil(seconds))
    if seconds < 60:
        value, unit = seconds, "second"
    elif seconds < 3600:
        value, unit = math.ceil(seconds / 60), "minute"
    else:
        value, unit = math.ceil(seconds / 3600), "hour"
    return f"{value} {unit}{'' if value == 1 else 's'}"


class GenerationService:
    """Entry point for generating and retrieving trademark names.

    Attributes:
        gate: Multi-tier rate limiter.
        generator: Provider-facing name generator.
        store: Result batch store.
        prompt_spec: Static naming parameters.
    """

    def __init__(
        self,
        *,
        gate: RateLimitGate,
        generator: NameGenerator,
        store: AbstractResultStore,
        prompt_spec: PromptSpec | None = None,
        app_settings: AppSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.gate = gate
        self.generator = generator
        self.store = store
        self._app_settings = app_settings or settings.app
        self.prompt_spec = prompt_spec or PromptSpec(
            theme=self._app_settings.naming_theme,
            count=self._app_settings.max_names,
        )
        self._clock = clock

    def _admit(self, client_identifier: str) -> None:
        result = self.gate.admit(client_identifier)
        if result.ok:
            return

        quota_name = result.quota_name or "minute"
        message = RATE_LIMIT_MESSAGES.get(quota_name, RATE_LIMIT_MESSAGES["minute"])
        details = None
        if result.retry_after is not None:
            wait = max(0.0, result.retry_after - self._clock())
            message = f"{message} Retry in about {format_wait(wait)}."
            details = {"retry_after_seconds": round(wait, 3)}

        raise RateLimitedAppError(
            code=f"rate_limited_{quota_name}",
            message=message,
            details=details,
            quota_name=quota_name,
            retry_after=result.retry_after,
        )

    async def _generate(self) -> str:
        try:
            return await self.generator.generate(self.prompt_spec)
        except ProviderConfigAppError:
            logger.error("generation.provider_not_configured")
            raise
        except LLMAppError as exc:
            logger.warning("generation.provider_failed", extra={"error_code": exc.code})
            raise GenerationFailedAppError(
                code="generation_failed",
                message=GENERATION_FAILED_MESSAGE,
                details={"stage": "generate"},
            ) from exc
        except AppError:
            raise
        except Exception as exc:
            logger.exception("generation.provider_unexpected_error")
            raise GenerationFailedAppError(
                code="generation_failed",
                message=GENERATION_FAILED_MESSAGE,
                details={"stage": "generate"},
            ) from exc

    def _parse(self, raw_response: str) -> list[GeneratedName]:
        try:
            return parse_trademark_response(
                raw_response,
                max_names=self._app_settings.max_names,
                description_max_chars=self._app_settings.description_max_chars,
            )
        except ResponseParseError as exc:
            logger.warning(
                "generation.unparseable_response",
                extra={"response_chars": len(raw_response)},
            )
            raise GenerationFailedAppError(
                code="generation_unparseable",
                message=GENERATION_FAILED_MESSAGE,
                details={"stage": "parse"},
            ) from exc

    async def _run_store(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        """Run a blocking store call in the default executor with a timeout."""

        loop = asyncio.get_running_loop()
        timeout_seconds = self._app_settings.result_store_timeout_seconds
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, fn, *args),
                timeout=timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "generation.store_timeout",
                extra={"operation": operation, "timeout_seconds": timeout_seconds},
            )
            raise PersistenceAppError(
                code="result_store_timeout",
                message="The result store did not respond in time",
                details={"stage": operation},
            ) from exc

    async def _persist(self, client_identifier: str, names: list[GeneratedName]) -> ResultBatch:
        batch = ResultBatch(
            client_identifier=client_identifier,
            names=names,
            created_at=int(self._clock() * 1000),
        )
        try:
            await self._run_store("persist", self.store.save, batch)
        except PersistenceAppError:
            logger.error("generation.persist_failed", extra={"batch_id": batch.batch_id})
            raise
        except Exception as exc:
            logger.exception("generation.persist_failed", extra={"batch_id": batch.batch_id})
            raise PersistenceAppError(
                code="result_store_write_failed",
                message="Generated names could not be saved",
            ) from exc
        return batch

    async def generate(self, client_identifier: str | None) -> ResultBatch:
        """Run the full pipeline and return the stored batch.

        Args:
            client_identifier: Identifier supplied by (or derived for) the caller.

        Returns:
            The persisted ResultBatch (up to ``max_names`` names, possibly none).

        Raises:
            InvalidRequestAppError: Malformed identifier; no quota consumed.
            RateLimitedAppError: A quota tier rejected the request.
            ProviderConfigAppError: The provider credential is missing.
            GenerationFailedAppError: Provider failure or unparseable output.
            PersistenceAppError: The batch could not be stored.
        """

        client_id = validate_client_identifier(client_identifier, app_settings=self._app_settings)
        client_hash = hash_identifier(client_id)

        self._admit(client_id)
        raw_response = await self._generate()
        names = self._parse(raw_response)
        batch = await self._persist(client_id, names)

        logger.info(
            "generation.completed",
            extra={
                "client_hash": client_hash,
                "batch_id": batch.batch_id,
                "names": len(names),
            },
        )
        return batch

    async def handle(self, client_identifier: str | None) -> list[GeneratedName]:
        """Generate names for a client; see :meth:`generate` for errors."""

        batch = await self.generate(client_identifier)
        return batch.names

    def check_rate_limit(self, client_identifier: str | None) -> AdmissionResult:
        """Report whether a generation would be admitted now, without spending quota.

        Raises:
            InvalidRequestAppError: Malformed identifier.
        """

        client_id = validate_client_identifier(client_identifier, app_settings=self._app_settings)
        return self.gate.check(client_id)

    async def latest(self, client_identifier: str | None) -> ResultBatch | None:
        """Most recent stored batch for a client, without generating.

        Raises:
            InvalidRequestAppError: Malformed identifier.
            PersistenceAppError: The store could not be read.
        """

        client_id = validate_client_identifier(client_identifier, app_settings=self._app_settings)
        try:
            return await self._run_store("latest", self.store.latest, client_id)
        except PersistenceAppError:
            raise
        except Exception as exc:
            logger.exception("generation.latest_failed")
            raise PersistenceAppError(
                code="result_store_read_failed",
                message="Stored results could not be read",
            ) from exc
