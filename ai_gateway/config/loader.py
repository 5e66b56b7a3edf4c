"""YAML configuration loader with environment variable overrides.

Layers, later ones winning:

  1. ``config/config.yaml``: static defaults checked into the repo
  2. ``.env`` file         : local overrides (not committed)
  3. Environment variables : set at deploy time

``load_config()`` reads the YAML first, then deep-merges the values from
:class:`Settings` on top.  ``_deep_merge`` is recursive:

    base      = {"cache": {"max_entries": 100}}
    overrides = {"cache": {"default_ttl_ms": 5000}}
    result    = {"cache": {"max_entries": 100, "default_ttl_ms": 5000}}
"""

from pathlib import Path

import yaml

from ai_gateway.config.settings import Settings
from ai_gateway.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge the environment-based Settings over it.

    Args:
        path: Path to the YAML configuration file. A missing file is treated
              as an empty config.
        settings: Pre-built settings; a fresh ``Settings()`` is read otherwise.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file exists but is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a YAML mapping")
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "cache": {
            "max_entries": settings.cache_max_entries,
            "max_memory_mb": settings.cache_max_memory_mb,
            "default_ttl_ms": settings.cache_default_ttl_ms,
            "cleanup_interval_ms": settings.cache_cleanup_interval_ms,
        },
        "generation": {
            "timeout_s": settings.ai_request_timeout_s,
        },
        "files": {
            "listing_cache_size": settings.file_listing_cache_size,
            "listing_ttl_s": settings.file_listing_ttl_s,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, _explicit_only(env_overrides, settings))
    return yaml_config


def _explicit_only(overrides: dict, settings: Settings) -> dict:
    """Keep only the override sections whose fields were set explicitly.

    Without this, every Settings default would silently win over the YAML
    file.  ``model_fields_set`` holds the fields read from env/.env/kwargs.
    """
    explicit = settings.model_fields_set
    section_fields = {
        "app": {"env": "app_env"},
        "cache": {
            "max_entries": "cache_max_entries",
            "max_memory_mb": "cache_max_memory_mb",
            "default_ttl_ms": "cache_default_ttl_ms",
            "cleanup_interval_ms": "cache_cleanup_interval_ms",
        },
        "generation": {"timeout_s": "ai_request_timeout_s"},
        "files": {
            "listing_cache_size": "file_listing_cache_size",
            "listing_ttl_s": "file_listing_ttl_s",
        },
        "logging": {"level": "log_level"},
    }
    result: dict = {}
    for section, values in overrides.items():
        fields = section_fields.get(section, {})
        kept = {key: value for key, value in values.items() if fields.get(key) in explicit}
        if kept:
            result[section] = kept
    return result


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def cache_options(config: dict, settings: Settings) -> dict:
    """Resolve response-cache constructor options from merged config.

    Falls back to the Settings defaults for anything the config lacks.
    """
    cache_cfg = config.get("cache", {}) or {}
    return {
        "max_entries": int(cache_cfg.get("max_entries", settings.cache_max_entries)),
        "max_memory_mb": float(cache_cfg.get("max_memory_mb", settings.cache_max_memory_mb)),
        "default_ttl_ms": int(cache_cfg.get("default_ttl_ms", settings.cache_default_ttl_ms)),
        "cleanup_interval_ms": int(
            cache_cfg.get("cleanup_interval_ms", settings.cache_cleanup_interval_ms)
        ),
    }


def runtime_options(config: dict, settings: Settings) -> dict:
    """Resolve the app environment and generation timeout from merged config.

    ``config/config.yaml`` may set ``app.env`` and ``generation.timeout_s``;
    explicitly set environment variables have already been merged over them.
    """
    app_cfg = config.get("app", {}) or {}
    generation_cfg = config.get("generation", {}) or {}
    return {
        "app_env": str(app_cfg.get("env", settings.app_env)),
        "ai_request_timeout_s": float(
            generation_cfg.get("timeout_s", settings.ai_request_timeout_s)
        ),
    }
