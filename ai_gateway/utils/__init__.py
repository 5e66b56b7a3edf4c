"""Utility modules for the AI gateway.

- **errors** -- Exception hierarchy rooted at GatewayError; RateLimitError is
  kept distinct so 429s are never reported as generic failures.
- **logging** -- structlog setup with console rendering in development and
  JSON rendering in production.
- **serialization** -- Key-sorted JSON serialization and the 2-bytes-per-char
  size heuristic used by the response cache.
- **cache_keys** -- Deterministic ``<operation>_<hash>`` key generation and
  time bucketing for cache keys.
"""

from ai_gateway.utils.cache_keys import generate_cache_key, string_hash, time_bucket
from ai_gateway.utils.errors import (
    ConfigurationError,
    FileContextError,
    GatewayError,
    LLMError,
    ProviderUnavailableError,
    RateLimitError,
)
from ai_gateway.utils.logging import configure_logging, get_logger
from ai_gateway.utils.serialization import estimate_size, stable_serialize

__all__ = [
    "ConfigurationError",
    "FileContextError",
    "GatewayError",
    "LLMError",
    "ProviderUnavailableError",
    "RateLimitError",
    "configure_logging",
    "estimate_size",
    "generate_cache_key",
    "get_logger",
    "stable_serialize",
    "string_hash",
    "time_bucket",
]
