"""Configuration module: exports Settings, load_config and cache_options."""

from ai_gateway.config.loader import cache_options, load_config
from ai_gateway.config.settings import Settings

__all__ = ["Settings", "cache_options", "load_config"]
