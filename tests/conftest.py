from __future__ import annotations

import json
from pathlib import Path

import pytest

from fakes import SAMPLE_RESUME, FakeProvider, sample_search_config
from kestrel.config import Settings, get_settings
from kestrel.core import pacing
from kestrel.core.answers import AnswerResolver, QuestionCache
from kestrel.llm.answerer import ResumeAnswerer
from kestrel.types import ResumeProfile

_ENV_VARS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "OLLAMA_BASE_URL",
    "LLM_PROVIDER",
    "LLM_MODEL",
    "MODEL",
    "LLM_TEMPERATURE",
    "TEMPERATURE",
    "LINKEDIN_EMAIL",
    "LINKEDIN_PASSWORD",
    "CONFIG_FILE_PATH",
    "CV_FILE_PATH",
    "ANSWERS_FILE",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr(pacing, "sleep", recorded.append)
    return recorded


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        answers_file=tmp_path / "answers.json",
        minimum_page_time_sec=0,
        form_retry_cooldown_sec=120,
        max_form_fill_attempts=2,
        max_form_pages=5,
        loop_forever=False,
    )


@pytest.fixture
def resume_profile() -> ResumeProfile:
    return ResumeProfile.model_validate(SAMPLE_RESUME)


@pytest.fixture
def resume_file(tmp_path: Path) -> Path:
    path = tmp_path / "cv.json"
    path.write_text(json.dumps(SAMPLE_RESUME), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(sample_search_config(str(tmp_path / "output"))), encoding="utf-8")
    return path


@pytest.fixture
def make_resolver(tmp_path: Path, resume_profile: ResumeProfile):
    def factory(*replies: str, default: str = "") -> tuple[AnswerResolver, FakeProvider]:
        provider = FakeProvider(replies, default=default)
        answerer = ResumeAnswerer(provider, resume_profile)
        return AnswerResolver(QuestionCache(tmp_path / "answers.json"), answerer), provider

    return factory
