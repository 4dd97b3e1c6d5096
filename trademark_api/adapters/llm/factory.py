"""Factory for creating LLM client instances."""

from trademark_api.adapters.llm.base import AbstractLLMClient
from trademark_api.adapters.llm.openai_client import OpenAIClient
from trademark_api.core.config import LLMSettings, settings
from trademark_api.core.errors import ProviderConfigAppError

MISSING_KEY_MESSAGE = "OpenAI API key is not configured"


def is_provider_configured(llm_settings: LLMSettings | None = None) -> bool:
    """Whether a credential is present for the configured provider."""

    cfg = llm_settings or settings.llm
    return bool(cfg.api_key)


def create_llm_client(llm_settings: LLMSettings | None = None) -> AbstractLLMClient:
    """Instantiate the client for the configured provider.

    Args:
        llm_settings: Provider settings; defaults to global settings.

    Returns:
        AbstractLLMClient: Configured LLM client instance.

    Raises:
        ProviderConfigAppError: If the credential is missing or the provider
            is unknown. Both are operator faults, not user errors.
    """
    cfg = llm_settings or settings.llm
    provider = cfg.provider.lower()

    if provider == "openai":
        if not cfg.api_key:
            raise ProviderConfigAppError(
                code="llm_missing_api_key",
                message=MISSING_KEY_MESSAGE,
                details={"hint": "Set the LLM_API_KEY environment variable", "provider": provider},
            )
        return OpenAIClient(
            api_key=cfg.api_key,
            model=cfg.model,
            base_url=cfg.base_url,
            timeout_seconds=cfg.timeout_seconds,
        )

    raise ProviderConfigAppError(
        code="llm_unknown_provider",
        message=f"Unknown LLM provider: '{provider}'. Supported providers: openai",
        details={"provider": provider},
    )
