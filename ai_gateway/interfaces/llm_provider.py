"""Abstract base class for remote text-generation providers.

Every AI-backed operation ends in exactly one ``generate_json`` call per
cache miss.  The model parameters come from the router's
:class:`~ai_gateway.models.routing.ModelSelection`; the provider only
transports them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ai_gateway.models.routing import ModelSelection


# Concrete implementations: OpenAILLMProvider, HttpGenerationProvider
# Located in: ai_gateway/providers/llm/
class ILLMProvider(ABC):
    """Contract for generation backends that return JSON objects."""

    @abstractmethod
    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        selection: ModelSelection,
    ) -> dict[str, Any]:
        """Run one generation and return the parsed JSON object.

        Parameters
        ----------
        system_prompt:
            Instruction message setting the model's behaviour.
        user_prompt:
            The request data.
        selection:
            Model id, temperature and token budget chosen by the router.

        Raises
        ------
        ai_gateway.utils.errors.RateLimitError
            If the backend signals rate limiting (e.g. HTTP 429).
        ai_gateway.utils.errors.LLMError
            If the call fails or the response is not a JSON object.
        ai_gateway.utils.errors.ProviderUnavailableError
            If the backend cannot be reached.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and error messages."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (no network call)."""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Make a lightweight call to confirm the credentials are accepted."""
