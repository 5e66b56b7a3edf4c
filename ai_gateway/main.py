"""AI gateway composition root.

Wires settings, logging, the response cache, the generation provider, the
supporting-file lookup and the generation services via constructor
injection.  Hosts (an API layer, a worker, a script) call
:func:`build_gateway` once at startup, or :func:`get_default_components`
for a process-wide instance, and :func:`shutdown_components` on exit.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ai_gateway.config.loader import cache_options, load_config, runtime_options
from ai_gateway.config.settings import Settings
from ai_gateway.interfaces.llm_provider import ILLMProvider
from ai_gateway.providers.cache.memory_cache import MemoryCacheProvider
from ai_gateway.providers.cache.response_cache import ResponseCache
from ai_gateway.providers.files.rest_file_repository import RestProjectFileRepository
from ai_gateway.providers.llm.http_generation_provider import HttpGenerationProvider
from ai_gateway.providers.llm.openai_provider import OpenAILLMProvider
from ai_gateway.services.ai_gateway import AIGateway
from ai_gateway.services.file_context_service import FileContextService
from ai_gateway.services.idea_service import IdeaService
from ai_gateway.services.insights_service import InsightsService
from ai_gateway.services.model_router import ModelRouter
from ai_gateway.services.roadmap_service import RoadmapService
from ai_gateway.utils.logging import configure_logging, get_logger

_default_components: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Generation provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings, http_client: httpx.AsyncClient) -> ILLMProvider:
    """OpenAI directly when a key is configured, otherwise the HTTP endpoint."""
    if app_settings.get_generation_backend() == "openai":
        return OpenAILLMProvider(settings=app_settings)
    return HttpGenerationProvider(http_client=http_client, settings=app_settings)


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_gateway(
    app_settings: Settings | None = None,
    config: dict | None = None,
) -> dict[str, Any]:
    """Construct every provider and service.

    Returns a flat dict of named components.  Safe to call outside an event
    loop: the response cache starts its expiry sweep on first use.
    """
    app_settings = app_settings or Settings()
    config = config if config is not None else load_config(settings=app_settings)
    app_settings = app_settings.model_copy(update=runtime_options(config, app_settings))

    log_level = (config.get("logging", {}) or {}).get("level", app_settings.log_level)
    configure_logging(log_level=log_level, json_output=app_settings.is_production)
    logger: structlog.BoundLogger = get_logger(__name__)

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.ai_request_timeout_s)

    # -- Cache + routing + generation --
    response_cache = ResponseCache(**cache_options(config, app_settings))
    router = ModelRouter()
    llm = _build_llm_provider(app_settings, http_client)
    gateway = AIGateway(cache=response_cache, llm=llm, router=router)

    # -- Supporting files --
    files_cfg = config.get("files", {}) or {}
    listing_cache = MemoryCacheProvider(
        max_size=int(files_cfg.get("listing_cache_size", app_settings.file_listing_cache_size)),
        ttl=int(files_cfg.get("listing_ttl_s", app_settings.file_listing_ttl_s)),
    )
    file_context = FileContextService(
        repository=RestProjectFileRepository(http_client=http_client, settings=app_settings),
        listing_cache=listing_cache,
    )

    # -- Generation services (mock fallback only outside production) --
    allow_mock = not app_settings.is_production
    components = {
        "settings": app_settings,
        "config": config,
        "http_client": http_client,
        "response_cache": response_cache,
        "listing_cache": listing_cache,
        "router": router,
        "llm": llm,
        "gateway": gateway,
        "file_context": file_context,
        "idea_service": IdeaService(gateway, allow_mock_fallback=allow_mock),
        "insights_service": InsightsService(gateway, file_context, allow_mock_fallback=allow_mock),
        "roadmap_service": RoadmapService(gateway, allow_mock_fallback=allow_mock),
    }

    logger.info(
        "gateway_built",
        environment=app_settings.app_env,
        provider=llm.get_provider_name(),
        mock_fallback=allow_mock,
        **cache_options(config, app_settings),
    )
    return components


def get_default_components() -> dict[str, Any]:
    """Return the process-wide components, building them on first call."""
    global _default_components
    if _default_components is None:
        _default_components = build_gateway()
    return _default_components


async def shutdown_components(components: dict[str, Any]) -> None:
    """Stop the cache sweep and close the shared HTTP client."""
    global _default_components
    await components["response_cache"].shutdown()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    if components is _default_components:
        _default_components = None
    get_logger(__name__).info("gateway_shutdown", message="HTTP client closed")
