"""LLM adapter layer - abstracts over text-generation providers."""

from trademark_api.adapters.llm.base import AbstractLLMClient
from trademark_api.adapters.llm.factory import create_llm_client, is_provider_configured
from trademark_api.adapters.llm.openai_client import OpenAIClient

__all__ = [
    "AbstractLLMClient",
    "OpenAIClient",
    "create_llm_client",
    "is_provider_configured",
]
