"""OpenAI-compatible generation provider.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.  The
model, temperature and token budget come from the router's
:class:`ModelSelection`; responses are requested in JSON mode and parsed
into a dict before they reach the response cache.

When ``openai_base_url`` is configured the client talks to that endpoint
instead (any OpenAI-compatible API).
"""

from __future__ import annotations

import json
from typing import Any

import openai
import structlog

from ai_gateway.config.settings import Settings
from ai_gateway.interfaces.llm_provider import ILLMProvider
from ai_gateway.models.routing import ModelSelection
from ai_gateway.utils.errors import LLMError, ProviderUnavailableError, RateLimitError

logger = structlog.get_logger(logger_name=__name__)


class OpenAILLMProvider(ILLMProvider):
    """Generation provider backed by the OpenAI chat completions API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key
        self._timeout_s = settings.ai_request_timeout_s

        client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(self._timeout_s, connect=5.0),
            "max_retries": 0,
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        selection: ModelSelection,
    ) -> dict[str, Any]:
        """Run one JSON-mode chat completion with the selected model."""
        try:
            response = await self._client.chat.completions.create(
                model=selection.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=selection.temperature,
                # GPT-5 / o-series reject max_tokens.
                max_completion_tokens=selection.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.RateLimitError as exc:
            logger.warning("generation_rate_limited", provider=self._provider_label, model=selection.model)
            raise RateLimitError(provider_name=self.get_provider_name()) from exc
        except openai.APITimeoutError as exc:
            raise ProviderUnavailableError(
                message=f"{self._provider_label} timed out after {self._timeout_s:g}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIConnectionError as exc:
            raise ProviderUnavailableError(
                message=f"{self._provider_label} unreachable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content
        if not content:
            raise LLMError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )

        logger.info(
            "openai_completion",
            model=selection.model,
            provider=self._provider_label,
            cost_tier=selection.cost.value,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return self._parse_json(content)

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """List models to confirm the key is accepted, without inference cost."""
        if not self.is_available():
            return False
        try:
            await self._client.models.list()
            return True
        except openai.APIError:
            return False

    def get_provider_name(self) -> str:
        return self._provider_label

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_json(self, content: str) -> dict[str, Any]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise LLMError(
                message=f"{self._provider_label} returned invalid JSON: {exc.msg}",
                provider_name=self.get_provider_name(),
            ) from exc
        if not isinstance(data, dict):
            raise LLMError(
                message=f"{self._provider_label} returned {type(data).__name__}, expected a JSON object",
                provider_name=self.get_provider_name(),
            )
        return data
