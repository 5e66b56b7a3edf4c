"""Generation provider that calls the product's own AI endpoint over HTTP.

Used when the gateway runs next to a server-side generation route instead of
holding an OpenAI key itself.  One POST per cache miss carrying the prompts
and the router's model parameters; the endpoint answers with a JSON object.

Follows the injected-``httpx.AsyncClient`` adapter pattern used by the other
HTTP providers.  Status handling:

* 2xx with a JSON object  -> returned as-is
* 429                     -> :class:`RateLimitError` (never a generic failure)
* any other non-2xx       -> :class:`LLMError` with the status code
* transport errors        -> :class:`ProviderUnavailableError`
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ai_gateway.config.settings import Settings
from ai_gateway.interfaces.llm_provider import ILLMProvider
from ai_gateway.models.routing import ModelSelection
from ai_gateway.utils.errors import LLMError, ProviderUnavailableError, RateLimitError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "ai-endpoint"


class HttpGenerationProvider(ILLMProvider):
    """POSTs prompt payloads to ``settings.ai_endpoint_url``."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http_client
        self._url = settings.ai_endpoint_url
        self._token = settings.ai_endpoint_token
        self._timeout_s = settings.ai_request_timeout_s

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        selection: ModelSelection,
    ) -> dict[str, Any]:
        payload = {
            "model": selection.model,
            "temperature": selection.temperature,
            "maxTokens": selection.max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        try:
            response = await self._http.post(
                self._url,
                json=payload,
                headers=self._headers(),
                timeout=self._timeout_s,
            )
        except httpx.TimeoutException as exc:
            raise ProviderUnavailableError(
                message=f"AI endpoint timed out after {self._timeout_s:g}s",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"AI endpoint request failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if response.status_code == 429:
            logger.warning("generation_rate_limited", provider=_PROVIDER_NAME, model=selection.model)
            raise RateLimitError(provider_name=_PROVIDER_NAME)
        if not 200 <= response.status_code < 300:
            raise LLMError(
                message=f"Server error: {response.status_code}",
                provider_name=_PROVIDER_NAME,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMError(
                message="AI endpoint returned a non-JSON body",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if not isinstance(data, dict):
            raise LLMError(
                message=f"AI endpoint returned {type(data).__name__}, expected a JSON object",
                provider_name=_PROVIDER_NAME,
            )

        logger.info(
            "endpoint_completion",
            model=selection.model,
            cost_tier=selection.cost.value,
            status=response.status_code,
        )
        return data

    def is_available(self) -> bool:
        return bool(self._url)

    async def validate_credentials(self) -> bool:
        """The endpoint has no cheap auth probe; a HEAD must not return 401/403."""
        if not self.is_available():
            return False
        try:
            response = await self._http.head(self._url, headers=self._headers(), timeout=5.0)
        except httpx.HTTPError:
            return False
        return response.status_code not in (401, 403)

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers
