"""Prompt construction and provider invocation for name generation.

The prompt is a fixed template plus one of a small set of thematic framings
chosen by configuration. Nothing from the client reaches the prompt.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from trademark_api.adapters.llm.base import AbstractLLMClient
from trademark_api.adapters.llm.factory import create_llm_client, is_provider_configured
from trademark_api.core.config import LLMSettings, settings
from trademark_api.core.errors import LLMAppError

logger = logging.getLogger(__name__)

# Bump when the template changes so stored batches can be told apart in logs
PROMPT_VERSION = "v1"

THEMES: dict[str, dict[str, str]] = {
    "retail": {
        "audience": "general retail store services suitable for Amazon stores",
        "industry": "Retail",
        "closing": "modern retail businesses",
    },
    "technology": {
        "audience": "software and consumer technology products",
        "industry": "Technology",
        "closing": "ambitious technology startups",
    },
    "wellness": {
        "audience": "health, fitness and personal wellness brands",
        "industry": "Wellness",
        "closing": "calm, trustworthy wellness brands",
    },
    "food": {
        "audience": "packaged food, beverage and restaurant concepts",
        "industry": "Food & Beverage",
        "closing": "memorable food and beverage brands",
    },
    "finance": {
        "audience": "personal finance and fintech services",
        "industry": "Finance",
        "closing": "credible financial services brands",
    },
}

SYSTEM_PROMPT = (
    "You are a trademark specialist who creates unique, coined brand names. "
    "You specialize in inventing names that don't exist in the USPTO database. "
    "Always return a JSON array with exactly {count} names between "
    "{min_letters}-{max_letters} letters."
)

USER_PROMPT_TEMPLATE = """Act as a trademark naming specialist. Generate {count} unique brand names for {audience}.

CRITICAL CONSTRAINTS:
1. Length must be between {min_letters}-{max_letters} LETTERS
2. Must be COINED/INVENTED names that don't exist in USPTO database
3. Must be easily pronounceable for English speakers
4. Names should feel modern, memorable, and brandable

METHODOLOGY:
- Create completely invented words that sound professional
- Blend sounds and syllables creatively
- Focus on euphonic combinations that roll off the tongue
- Avoid existing words or obvious derivatives

Return ONLY a valid JSON array (no markdown, no explanation) with exactly {count} objects. Start with [ and end with ]. Example format:
[
  {{"name": "NEXORA", "description": "A fusion of 'next' and 'aurora', suggesting innovation", "industry": "{industry}"}},
  {{"name": "VELURA", "description": "Combines velvet and allure for premium feel", "industry": "{industry}"}}
]

Generate {count} coined, unique names perfect for {closing}."""


@dataclass(frozen=True)
class PromptSpec:
    """Static parameters of a naming request."""

    theme: str = "retail"
    count: int = 10
    min_letters: int = 4
    max_letters: int = 9

    def __post_init__(self) -> None:
        if self.theme not in THEMES:
            raise ValueError(
                f"Unknown naming theme: '{self.theme}'. Supported themes: {', '.join(THEMES)}"
            )
        if self.count < 1:
            raise ValueError("count must be >= 1")
        if not 1 <= self.min_letters <= self.max_letters:
            raise ValueError("letter bounds must satisfy 1 <= min_letters <= max_letters")


def build_system_prompt(spec: PromptSpec) -> str:
    return SYSTEM_PROMPT.format(
        count=spec.count,
        min_letters=spec.min_letters,
        max_letters=spec.max_letters,
    )


def build_prompt(spec: PromptSpec) -> str:
    """Render the user prompt for ``spec``; deterministic for a given spec."""

    theme = THEMES[spec.theme]
    return USER_PROMPT_TEMPLATE.format(
        count=spec.count,
        min_letters=spec.min_letters,
        max_letters=spec.max_letters,
        **theme,
    )


class NameGenerator:
    """Calls the text-generation provider with the naming prompt.

    The provider client is created on first use so the application can start
    without a credential; the missing credential surfaces as a
    ProviderConfigAppError on the first generation attempt instead.
    """

    def __init__(
        self,
        llm_settings: LLMSettings | None = None,
        *,
        llm_factory: Callable[[LLMSettings], AbstractLLMClient] = create_llm_client,
    ) -> None:
        self._llm_settings = llm_settings or settings.llm
        self._llm_factory = llm_factory
        self._llm: AbstractLLMClient | None = None

    @property
    def is_configured(self) -> bool:
        return self._llm is not None or is_provider_configured(self._llm_settings)

    def _client(self) -> AbstractLLMClient:
        if self._llm is None:
            self._llm = self._llm_factory(self._llm_settings)
        return self._llm

    async def generate(self, spec: PromptSpec) -> str:
        """Ask the provider for names and return its raw reply.

        Args:
            spec: Naming parameters.

        Returns:
            Unparsed completion text.

        Raises:
            ProviderConfigAppError: If no provider credential is configured.
            LLMAppError: If the provider call fails or returns no content.
        """

        llm = self._client()
        start = time.perf_counter()
        text = await llm.generate_text(
            build_prompt(spec),
            system_prompt=build_system_prompt(spec),
            temperature=self._llm_settings.temperature,
            max_tokens=self._llm_settings.max_tokens,
        )
        if not text or not text.strip():
            raise LLMAppError(
                code="llm_empty_response",
                message="LLM returned empty response",
                details={"model": self._llm_settings.model},
            )
        logger.info(
            "name_generator.completed",
            extra={
                "theme": spec.theme,
                "prompt_version": PROMPT_VERSION,
                "model": self._llm_settings.model,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                "completion_chars": len(text),
            },
        )
        return text
