"""Shared pytest fixtures for the AI gateway test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from ai_gateway.config.settings import Settings
from ai_gateway.interfaces.llm_provider import ILLMProvider
from ai_gateway.models.project import IdeaCard, ProjectFile
from ai_gateway.providers.cache.response_cache import ResponseCache

# ---------------------------------------------------------------------------
# Clock / settings
# ---------------------------------------------------------------------------


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start_ms: float = 1_000_000.0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


def make_settings(**overrides: Any) -> Settings:
    defaults: dict[str, Any] = {
        "openai_api_key": "",
        "openai_base_url": "",
        "ai_endpoint_url": "http://gateway.test/api/ai/generate",
        "ai_endpoint_token": "endpoint-token",
        "files_api_url": "http://files.test/rest/v1",
        "files_api_key": "service-key",
        "app_env": "development",
    }
    defaults.update(overrides)
    return Settings(**defaults)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


# ---------------------------------------------------------------------------
# Caches and providers
# ---------------------------------------------------------------------------


@pytest.fixture
def response_cache(clock: FakeClock) -> ResponseCache:
    """Response cache on the fake clock with the background sweep disabled."""
    return ResponseCache(
        max_entries=100,
        max_memory_mb=50,
        default_ttl_ms=1000,
        cleanup_interval_ms=60_000,
        auto_cleanup=False,
        clock=clock,
    )


@pytest.fixture
def mock_llm() -> MagicMock:
    llm = MagicMock(spec=ILLMProvider)
    llm.generate_json = AsyncMock(return_value={"ideas": []})
    llm.get_provider_name.return_value = "mock-llm"
    llm.is_available.return_value = True
    return llm


# ---------------------------------------------------------------------------
# Domain samples
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_ideas() -> list[IdeaCard]:
    return [
        IdeaCard(id="1", content="Self-serve onboarding", details="Guided setup", x=101, y=94),
        IdeaCard(id="2", content="Usage analytics", details="Dashboards", x=344, y=120),
        IdeaCard(id="3", content="Slack integration", details="Notifications", x=90, y=400),
    ]


@pytest.fixture
def sample_files() -> list[ProjectFile]:
    return [
        ProjectFile(
            id="f1",
            project_id="p1",
            name="brief.pdf",
            file_type="pdf",
            mime_type="application/pdf",
            file_size=20480,
            storage_path="p1/brief.pdf",
            content_preview="Target market: small agencies",
        ),
        ProjectFile(
            id="f2",
            project_id="p1",
            name="mock.png",
            file_type="image",
            mime_type="image/png",
            file_size=12288,
            storage_path="p1/mock.png",
        ),
    ]


@pytest.fixture
def settings_factory():
    """Build Settings with test defaults plus keyword overrides."""
    return make_settings
