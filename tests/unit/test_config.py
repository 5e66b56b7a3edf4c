"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from ai_gateway.config.loader import _deep_merge, cache_options, load_config, runtime_options
from ai_gateway.config.settings import Settings
from ai_gateway.utils.errors import ConfigurationError


def _write(tmp_path: Path, text: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


class TestSettings:
    def test_backend_selection(self) -> None:
        assert Settings(openai_api_key="sk-x").get_generation_backend() == "openai"
        assert Settings(openai_api_key="").get_generation_backend() == "http"

    def test_is_production(self) -> None:
        assert Settings(app_env="production").is_production is True
        assert Settings(app_env="staging").is_production is False

    def test_bounds_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Settings(cache_max_entries=0)


class TestLoadConfig:
    def test_yaml_values_survive_unset_settings(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "cache:\n  max_entries: 42\n  max_memory_mb: 8\n")

        config = load_config(path, settings=Settings())

        assert config["cache"]["max_entries"] == 42
        assert config["cache"]["max_memory_mb"] == 8

    def test_explicit_settings_override_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "cache:\n  max_entries: 42\n  default_ttl_ms: 1000\n")

        config = load_config(path, settings=Settings(cache_max_entries=7))

        assert config["cache"]["max_entries"] == 7
        assert config["cache"]["default_ttl_ms"] == 1000

    def test_missing_file_yields_only_explicit_settings(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "missing.yaml"), settings=Settings(app_env="staging"))
        assert config["app"] == {"env": "staging"}

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(path, settings=Settings())

    def test_repo_config_file_loads(self, project_root: Path) -> None:
        config = load_config(str(project_root / "config" / "config.yaml"), settings=Settings())
        assert config["cache"]["default_ttl_ms"] == 600000


class TestCacheOptions:
    def test_reads_config_section(self) -> None:
        options = cache_options({"cache": {"max_entries": 3, "max_memory_mb": 1}}, Settings())
        assert options["max_entries"] == 3
        assert options["max_memory_mb"] == 1.0
        assert options["default_ttl_ms"] == Settings().cache_default_ttl_ms

    def test_empty_config_uses_settings(self) -> None:
        settings = Settings(cache_cleanup_interval_ms=5000)
        assert cache_options({}, settings)["cleanup_interval_ms"] == 5000


class TestRuntimeOptions:
    def test_reads_app_and_generation_sections(self) -> None:
        config = {"app": {"env": "production"}, "generation": {"timeout_s": 12}}
        assert runtime_options(config, Settings()) == {
            "app_env": "production",
            "ai_request_timeout_s": 12.0,
        }

    def test_empty_config_uses_settings(self) -> None:
        options = runtime_options({}, Settings(app_env="staging", ai_request_timeout_s=9))
        assert options == {"app_env": "staging", "ai_request_timeout_s": 9.0}

    def test_yaml_env_reaches_runtime_options(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "app:\n  env: production\ngeneration:\n  timeout_s: 30\n")
        settings = Settings()

        options = runtime_options(load_config(path, settings=settings), settings)

        assert options["app_env"] == "production"
        assert options["ai_request_timeout_s"] == 30.0


def test_deep_merge_is_recursive() -> None:
    base = {"cache": {"max_entries": 100}, "app": {"env": "dev"}}
    _deep_merge(base, {"cache": {"default_ttl_ms": 5000}})
    assert base == {"cache": {"max_entries": 100, "default_ttl_ms": 5000}, "app": {"env": "dev"}}
