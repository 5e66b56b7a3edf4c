"""Request gateway: response cache + model router + generation provider.

Every AI-backed operation funnels through :meth:`AIGateway.generate` (or
:meth:`AIGateway.generate_prepared` when building the prompt needs I/O):

    key = ResponseCache.generate_key(operation, params)
    cache.get_or_set(key, producer, ttl_ms)
        producer:
            context, user_prompt = await prepare()
            selection = router.select_model(context)
            router.log_selection(context, selection)
            data = await llm.generate_json(system_prompt, user_prompt, selection)
            validate(data)
            return data

Prompt preparation, routing and validation all happen inside the producer,
so a cache hit or a collapsed duplicate never pays for them.  Failures,
including a payload rejected by ``validate``, propagate unchanged to every
caller waiting on the same key and are never cached.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog

from ai_gateway.interfaces.cache_provider import IResponseCache
from ai_gateway.interfaces.llm_provider import ILLMProvider
from ai_gateway.models.routing import TaskContext
from ai_gateway.services.model_router import ModelRouter

logger = structlog.get_logger(logger_name=__name__)

PrepareRequest = Callable[[], Awaitable[tuple[TaskContext, str]]]
ValidatePayload = Callable[[dict[str, Any]], Any]


class AIGateway:
    """Front door for cached, routed generation calls."""

    def __init__(
        self,
        cache: IResponseCache,
        llm: ILLMProvider,
        router: ModelRouter | None = None,
    ) -> None:
        self._cache = cache
        self._llm = llm
        self._router = router or ModelRouter()

    @property
    def cache(self) -> IResponseCache:
        return self._cache

    @property
    def router(self) -> ModelRouter:
        return self._router

    async def generate(
        self,
        operation: str,
        params: Mapping[str, Any],
        context: TaskContext,
        system_prompt: str,
        user_prompt: str,
        ttl_ms: int | None = None,
        validate: ValidatePayload | None = None,
    ) -> dict[str, Any]:
        """Return the generated JSON object for *operation* + *params*.

        *params* must identify the request completely (including any tenant
        scope): two calls with equal params share one cached result.
        *validate* runs on the fresh payload before it is cached; raising
        from it rejects the payload.
        """

        async def _prepare() -> tuple[TaskContext, str]:
            return context, user_prompt

        return await self.generate_prepared(
            operation, params, system_prompt, _prepare, ttl_ms, validate=validate
        )

    async def generate_prepared(
        self,
        operation: str,
        params: Mapping[str, Any],
        system_prompt: str,
        prepare: PrepareRequest,
        ttl_ms: int | None = None,
        validate: ValidatePayload | None = None,
    ) -> dict[str, Any]:
        """Like :meth:`generate`, with the task context and user prompt built on a miss.

        ``prepare()`` is awaited only when the producer actually runs, so
        lookups it needs (supporting files, for instance) are skipped on a
        cache hit.
        """
        key = self._cache.generate_key(operation, params)

        async def _producer() -> dict[str, Any]:
            context, user_prompt = await prepare()
            selection = self._router.select_model(context)
            self._router.log_selection(context, selection)
            logger.info(
                "generation_started",
                operation=operation,
                key=key,
                model=selection.model,
                provider=self._llm.get_provider_name(),
            )
            data = await self._llm.generate_json(system_prompt, user_prompt, selection)
            if validate is not None:
                validate(data)
            return data

        return await self._cache.get_or_set(key, _producer, ttl_ms)
