"""Gateway settings loaded from environment variables via pydantic-settings.

Sources, highest priority first:

  1. Environment variables, e.g. ``CACHE_MAX_ENTRIES=500``
  2. ``.env`` in the working directory (local development only)
  3. The defaults declared below

Field ``cache_max_entries`` maps to env var ``CACHE_MAX_ENTRIES``; matching is
case-insensitive.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """AI gateway settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Generation backends ===
    # Empty key = "not configured": main.py then routes generation through
    # the HTTP endpoint below instead of calling OpenAI directly.
    openai_api_key: str = ""
    openai_base_url: str = ""
    ai_endpoint_url: str = "http://localhost:3000/api/ai/generate"
    ai_endpoint_token: str = ""
    ai_request_timeout_s: float = Field(default=25.0, gt=0)

    # === Supporting-file lookup (PostgREST-style table endpoint) ===
    files_api_url: str = ""
    files_api_key: str = ""
    file_listing_cache_size: int = Field(default=256, gt=0)
    file_listing_ttl_s: int = Field(default=300, gt=0)

    # === Response cache bounds ===
    cache_max_entries: int = Field(default=100, gt=0)
    cache_max_memory_mb: float = Field(default=50.0, gt=0)
    cache_default_ttl_ms: int = Field(default=10 * 60 * 1000, gt=0)
    cache_cleanup_interval_ms: int = Field(default=60 * 1000, gt=0)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def get_generation_backend(self) -> str:
        """Return ``"openai"`` when an API key is configured, else ``"http"``."""
        return "openai" if self.openai_api_key else "http"
