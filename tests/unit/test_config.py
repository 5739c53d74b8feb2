from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from fakes import sample_search_config
from kestrel.config import Settings, load_search_config
from kestrel.errors import ConfigError
from kestrel.types import ProviderConfig


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_provider_precedence_ollama_over_anthropic_over_openai() -> None:
    everything = _settings(
        openai_api_key="sk-openai",
        anthropic_api_key="sk-ant",
        ollama_base_url="http://localhost:11434",
        llm_model="llama3",
    )
    assert everything.selected_provider() == "ollama"
    assert _settings(openai_api_key="sk-openai", anthropic_api_key="sk-ant").selected_provider() == "anthropic"
    assert _settings(openai_api_key="sk-openai").selected_provider() == "openai"
    assert _settings().selected_provider() is None


def test_explicit_provider_wins() -> None:
    settings = _settings(
        llm_provider="OpenAI",
        openai_api_key="sk-openai",
        ollama_base_url="http://localhost:11434",
        llm_model="gpt-4o-mini",
    )
    config = settings.provider_config()
    assert config.kind == "openai"
    assert config.api_key == "sk-openai"
    assert config.base_url == ""


def test_provider_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
    monkeypatch.setenv("MODEL", "claude-3-5-haiku-latest")
    monkeypatch.setenv("TEMPERATURE", "0.7")

    config = Settings(_env_file=None).provider_config()

    assert config == ProviderConfig(
        kind="anthropic", model="claude-3-5-haiku-latest", temperature=0.7, api_key="sk-ant", timeout_sec=60
    )


def test_provider_config_requires_provider_and_model() -> None:
    with pytest.raises(ConfigError, match="No AI provider found"):
        _settings(llm_model="gpt-4o-mini").provider_config()
    with pytest.raises(ConfigError, match="No model specified"):
        _settings(openai_api_key="sk-openai").provider_config()


def test_explicit_provider_without_credentials_is_config_error() -> None:
    with pytest.raises(ConfigError, match="Invalid anthropic provider settings"):
        _settings(llm_provider="anthropic", llm_model="claude").provider_config()


def test_unknown_provider_is_rejected() -> None:
    with pytest.raises(ValidationError):
        _settings(llm_provider="cohere")


def test_provider_config_is_immutable_and_bounded() -> None:
    config = ProviderConfig(kind="openai", model="gpt-4o-mini", api_key="sk")
    with pytest.raises(ValidationError):
        config.model = "other"
    with pytest.raises(ValidationError):
        ProviderConfig(kind="openai", model="gpt-4o-mini", api_key="sk", temperature=2.5)


def test_require_credentials_names_missing_variables() -> None:
    with pytest.raises(ConfigError, match="LINKEDIN_EMAIL, LINKEDIN_PASSWORD"):
        _settings().require_credentials()
    _settings(linkedin_email="ada@example.com", linkedin_password="secret").require_credentials()


def test_load_search_config_reads_camel_case_keys(config_file) -> None:
    config = load_search_config(config_file)

    assert config.remote is True
    assert config.experience_level.mid_senior_level is False
    assert config.job_types.full_time is True
    assert config.date.week is True
    assert config.company_blacklist == ["ACME Corp"]
    assert config.distance == 25


def test_null_blacklists_become_empty(tmp_path) -> None:
    payload = sample_search_config()
    payload["companyBlacklist"] = None
    del payload["titleBlacklist"]
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    config = load_search_config(path)
    assert config.company_blacklist == []
    assert config.title_blacklist == []


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        (lambda payload: payload.update(distance=30), "distance"),
        (lambda payload: payload.update(remote="yes"), "remote"),
        (lambda payload: payload.pop("positions"), "positions"),
        (lambda payload: payload["experienceLevel"].pop("entry"), "experienceLevel.entry"),
    ],
)
def test_invalid_search_config_is_config_error(tmp_path, mutate, message) -> None:
    payload = sample_search_config()
    mutate(payload)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_search_config(path)


def test_missing_or_broken_config_file(tmp_path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_search_config(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_search_config(broken)
