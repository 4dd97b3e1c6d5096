"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before anything imports the settings module so
that the global ``settings`` object is built from them.
"""

import os
from unittest.mock import Mock

import pytest

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from tests.fakes import SAMPLE_NAMES, FakeLLMClient  # noqa: E402
from trademark_api.adapters.llm.base import AbstractLLMClient  # noqa: E402
from trademark_api.adapters.storage.in_memory import InMemoryResultStore  # noqa: E402
from trademark_api.core.config import AppSettings, LLMSettings  # noqa: E402
from trademark_api.core.rate_limit import create_rate_limit_gate  # noqa: E402
from trademark_api.services.generation_service import GenerationService  # noqa: E402
from trademark_api.services.name_generator import NameGenerator  # noqa: E402


@pytest.fixture
def sample_names() -> list[dict[str, str]]:
    return [dict(item) for item in SAMPLE_NAMES]


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX-seconds clock; set ``clock.return_value`` to move time."""
    return Mock(return_value=1_000.0)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        rate_limit_enabled=True,
        rate_limit_minute_kind="fixed_window",
        rate_limit_minute_rate=3,
        rate_limit_hour_kind="token_bucket",
        rate_limit_hour_rate=20,
        rate_limit_hour_capacity=10,
        rate_limit_day_kind="fixed_window",
        rate_limit_day_rate=50,
        result_store_path=None,
        naming_theme="retail",
    )


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def build_service(app_settings: AppSettings, clock: Mock):
    """Factory building a GenerationService around a fake provider."""

    def _build(
        llm: AbstractLLMClient | None = None,
        *,
        store=None,
        settings_override: AppSettings | None = None,
        api_key: str | None = "test-key-123",
    ) -> GenerationService:
        cfg = settings_override or app_settings
        llm_client = llm or FakeLLMClient()
        llm_settings = LLMSettings(provider="openai", model="gpt-4o-mini", api_key=api_key)
        if api_key:
            generator = NameGenerator(llm_settings, llm_factory=lambda _settings: llm_client)
        else:
            generator = NameGenerator(llm_settings)
        return GenerationService(
            gate=create_rate_limit_gate(cfg, clock=clock),
            generator=generator,
            store=store if store is not None else InMemoryResultStore(),
            app_settings=cfg,
            clock=clock,
        )

    return _build
