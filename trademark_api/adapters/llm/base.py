from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
	"""Interface for text-generation providers."""

	@abstractmethod
	async def generate_text(
		self,
		prompt: str,
		*,
		system_prompt: str | None = None,
		**kwargs: Any,
	) -> str:
		"""Generate a completion for ``prompt``.

		Args:
			prompt: User prompt to send to the model.
			system_prompt: Optional system instruction.
			**kwargs: Provider-specific options (e.g., temperature, max_tokens).

		Returns:
			str: The raw completion text, unparsed.

		Raises:
			LLMAppError: If the provider call fails or returns no content.
		"""
		...
