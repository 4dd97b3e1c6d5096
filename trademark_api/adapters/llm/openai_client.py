"""OpenAI LLM client adapter."""

import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from trademark_api.adapters.llm.base import AbstractLLMClient
from trademark_api.core.errors import LLMAppError

logger = logging.getLogger(__name__)


class OpenAIClient(AbstractLLMClient):
    """Client for OpenAI chat completions returning raw text.

    Uses the official OpenAI Python SDK with async support.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 45.0,
    ) -> None:
        """Initialize OpenAI async client.

        Args:
            api_key: OpenAI API key for authentication.
            model: Model name (e.g., "gpt-4o-mini").
            base_url: Optional custom base URL for OpenAI API.
            timeout_seconds: Timeout for requests in seconds.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    async def generate_text(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Run one chat completion and return its content.

        Args:
            prompt: User prompt to send to the model.
            system_prompt: Optional system message placed before the prompt.
            **kwargs: Provider options (temperature, max_tokens, top_p, etc.).

        Returns:
            str: Stripped completion text.

        Raises:
            LLMAppError: If the API call fails or the completion is empty.
        """
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": kwargs.pop("temperature", 0.95),
        }

        allowed_params = {
            "max_tokens",
            "top_p",
            "frequency_penalty",
            "presence_penalty",
            "seed",
        }
        for param in allowed_params:
            if param in kwargs:
                request_params[param] = kwargs[param]

        try:
            response = await self.client.chat.completions.create(**request_params)
        except OpenAIError as exc:
            raise LLMAppError(
                code="llm_request_failed",
                message=f"OpenAI API error: {exc}",
                details={"provider": "openai", "model": self.model},
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise LLMAppError(
                code="llm_empty_response",
                message="LLM returned empty response",
                details={"provider": "openai", "model": self.model},
            )

        logger.debug(
            "llm.completion_received",
            extra={"model": self.model, "completion_chars": len(content)},
        )
        return content.strip()
