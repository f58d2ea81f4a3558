"""Tests for configuration models, TOML loading and environment overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from articlesys.config import (
    AppConfig,
    LLMConfig,
    SummaryLength,
    apply_env_overrides,
    is_env_reference,
    load_config,
    resolve_env_reference,
)

_REPO_ROOT = Path(__file__).resolve().parents[2]


def test_defaults_match_documented_values() -> None:
    config = AppConfig()

    assert config.logging_level == "WARNING"
    assert config.defaults.summary_length is SummaryLength.MEDIUM
    assert config.defaults.output_dir == "./summaries"
    assert config.defaults.include_key_points is True
    assert config.fetcher.timeout == 10.0
    assert config.fetcher.retries == 3
    assert "nav" in config.extractor.remove_selectors
    assert config.extractor.include_images is False
    assert config.extractor.preserve_links is True
    assert config.llm.api_key == "env:GEMINI_API_KEY"
    assert config.llm.max_attempts == 3
    assert config.llm.degrade_on_failure is True


def test_shipped_default_config_loads() -> None:
    config = load_config(AppConfig, _REPO_ROOT / "config" / "default.toml")

    assert config.llm.name == "gemini/gemini-pro"
    assert config.defaults.summary_length is SummaryLength.MEDIUM


def test_load_config_reads_sections(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        """
logging_level = "DEBUG"

[defaults]
summary_length = "long"
include_key_points = false

[fetcher]
timeout = 2.5
retries = 1

[llm]
alias = "local"
base_url = "stub://"
degrade_on_failure = false
""",
        encoding="utf-8",
    )

    config = load_config(AppConfig, config_file)

    assert config.logging_level == "DEBUG"
    assert config.defaults.summary_length is SummaryLength.LONG
    assert config.defaults.include_key_points is False
    assert config.fetcher.timeout == 2.5
    assert config.fetcher.retries == 1
    assert config.llm.alias == "local"
    assert config.llm.is_stub
    assert config.llm.degrade_on_failure is False


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(AppConfig, tmp_path / "missing.toml")


def test_load_config_invalid_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "broken.toml"
    config_file.write_text("[defaults\nsummary_length = ", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_config(AppConfig, config_file)


def test_unknown_fields_are_rejected(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[fetcher]\nproxy = 'http://proxy'\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_config(AppConfig, config_file)


def test_fetcher_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"fetcher": {"timeout": 0}})


def test_env_overrides_apply(monkeypatch: pytest.MonkeyPatch) -> None:
    env = {
        "DEFAULT_SUMMARY_LENGTH": "Short",
        "DEFAULT_OUTPUT_PATH": "/tmp/articles",
        "SCRAPER_TIMEOUT": "4",
        "SCRAPER_RETRIES": "0",
    }

    config = apply_env_overrides(AppConfig(), env)

    assert config.defaults.summary_length is SummaryLength.SHORT
    assert config.defaults.output_dir == "/tmp/articles"
    assert config.fetcher.timeout == 4.0
    assert config.fetcher.retries == 0


def test_env_overrides_ignore_invalid_values() -> None:
    original = AppConfig()
    env = {
        "DEFAULT_SUMMARY_LENGTH": "epic",
        "SCRAPER_TIMEOUT": "soon",
        "SCRAPER_RETRIES": "-2",
    }

    config = apply_env_overrides(original, env)

    assert config.defaults.summary_length is SummaryLength.MEDIUM
    assert config.fetcher.timeout == 10.0
    assert config.fetcher.retries == 3


def test_env_overrides_do_not_mutate_input() -> None:
    original = AppConfig()

    apply_env_overrides(original, {"SCRAPER_RETRIES": "7"})

    assert original.fetcher.retries == 3


def test_llm_api_key_resolution(monkeypatch: pytest.MonkeyPatch) -> None:
    config = LLMConfig()
    assert config.api_key_secret is None

    monkeypatch.setenv("GEMINI_API_KEY", "  secret-key  ")
    assert config.api_key_secret == "secret-key"

    literal = LLMConfig(api_key="inline-key")
    assert literal.api_key_secret == "inline-key"


def test_resolve_env_reference_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ARTICLESYS_MISSING", raising=False)

    assert resolve_env_reference("env:ARTICLESYS_MISSING", required=False) is None
    with pytest.raises(EnvironmentError):
        resolve_env_reference("env:ARTICLESYS_MISSING")


def test_resolve_env_reference_treats_blank_values_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARTICLESYS_BLANK", "   ")

    assert resolve_env_reference("env:ARTICLESYS_BLANK", required=False) is None
    with pytest.raises(EnvironmentError, match="ARTICLESYS_BLANK"):
        resolve_env_reference("env:ARTICLESYS_BLANK")


def test_resolve_env_reference_trims_name_and_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARTICLESYS_TOKEN", " tok \n")

    assert resolve_env_reference("env: ARTICLESYS_TOKEN ") == "tok"


def test_literal_values_are_not_env_references() -> None:
    assert resolve_env_reference("plain-key") == "plain-key"
    assert resolve_env_reference(None) is None
    assert resolve_env_reference("env:", required=False) is None
    assert is_env_reference("env:NAME")
    assert not is_env_reference("environment")
    assert not is_env_reference(None)
