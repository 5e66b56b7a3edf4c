"""Interfaces for every collaborator the gateway talks to.

Services receive these abstractions by injection; concrete adapters live in
``ai_gateway/providers/`` and are wired in ``ai_gateway/main.py``.

    Interface               →  Concrete implementations
    ─────────────────────────────────────────────────────────────
    IResponseCache          →  ResponseCache
    ICacheProvider          →  MemoryCacheProvider
    ILLMProvider            →  OpenAILLMProvider, HttpGenerationProvider
    IProjectFileRepository  →  RestProjectFileRepository
"""

from ai_gateway.interfaces.cache_provider import ICacheProvider, IResponseCache
from ai_gateway.interfaces.file_repository import IProjectFileRepository
from ai_gateway.interfaces.llm_provider import ILLMProvider

__all__ = [
    "ICacheProvider",
    "ILLMProvider",
    "IProjectFileRepository",
    "IResponseCache",
]
