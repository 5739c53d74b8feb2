from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from kestrel.errors import ConfigError
from kestrel.types import ProviderConfig, ProviderKind

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Kestrel"
    log_level: str = "INFO"

    linkedin_email: str = ""
    linkedin_password: str = ""
    config_file_path: Path = Path("./data/config.json")
    cv_file_path: Path = Path("./data/cv.json")
    resume_path: Path | None = None
    answers_file: Path = Path("./answers.json")

    openai_api_key: str = ""
    anthropic_api_key: str = ""
    ollama_base_url: str = ""
    llm_provider: str = ""
    llm_model: str = Field(default="", validation_alias=AliasChoices("llm_model", "model"))
    llm_temperature: float = Field(default=0.2, validation_alias=AliasChoices("llm_temperature", "temperature"))
    llm_timeout_sec: int = 60

    chrome_profile_dir: Path = Path("./chrome_profile/linkedin_profile")
    headless: bool = False

    minimum_page_time_sec: int = 15 * 60
    long_break_every_pages: int = 5
    long_break_min_sec: int = 5
    long_break_max_sec: int = 34
    form_retry_cooldown_sec: int = 120
    max_form_fill_attempts: int = 5
    max_form_pages: int = 20
    navigation_attempts: int = 3
    navigation_backoff_sec: float = 2.0
    search_page_size: int = 25
    loop_forever: bool = True
    search_cycle_pause_sec: int = 60
    summarize_job_descriptions: bool = False

    @field_validator("llm_provider")
    @classmethod
    def validate_provider(cls, value: str) -> str:
        value = value.strip().lower()
        allowed = {"", "openai", "anthropic", "ollama"}
        if value not in allowed:
            raise ValueError(f"llm_provider must be one of {sorted(allowed - {''})}")
        return value

    def selected_provider(self) -> ProviderKind | None:
        if self.llm_provider:
            return self.llm_provider  # type: ignore[return-value]
        if self.ollama_base_url:
            return "ollama"
        if self.anthropic_api_key:
            return "anthropic"
        if self.openai_api_key:
            return "openai"
        return None

    def provider_config(self) -> ProviderConfig:
        kind = self.selected_provider()
        if kind is None:
            raise ConfigError(
                "No AI provider found. Set OPENAI_API_KEY, ANTHROPIC_API_KEY or OLLAMA_BASE_URL."
            )
        if not self.llm_model:
            raise ConfigError("No model specified. Set LLM_MODEL.")

        credentials = {
            "openai": {"api_key": self.openai_api_key},
            "anthropic": {"api_key": self.anthropic_api_key},
            "ollama": {"base_url": self.ollama_base_url},
        }[kind]
        try:
            return ProviderConfig(
                kind=kind,
                model=self.llm_model,
                temperature=self.llm_temperature,
                timeout_sec=self.llm_timeout_sec,
                **credentials,
            )
        except ValidationError as exc:
            raise ConfigError(f"Invalid {kind} provider settings: {exc}") from exc

    def require_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("LINKEDIN_EMAIL", self.linkedin_email),
                ("LINKEDIN_PASSWORD", self.linkedin_password),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing environment variables: {', '.join(missing)}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


class ExperienceLevels(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    internship: StrictBool
    entry: StrictBool
    associate: StrictBool
    mid_senior_level: StrictBool = Field(alias="mid-senior level")
    director: StrictBool
    executive: StrictBool


class JobTypes(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    full_time: StrictBool = Field(alias="full-time")
    contract: StrictBool
    part_time: StrictBool = Field(alias="part-time")
    temporary: StrictBool
    internship: StrictBool
    other: StrictBool
    volunteer: StrictBool


class DateFilters(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    all_time: StrictBool = Field(alias="all time")
    month: StrictBool
    week: StrictBool
    last_24_hours: StrictBool = Field(alias="24 hours")


class Uploads(BaseModel):
    model_config = ConfigDict(frozen=True)

    resume: Path | None = None
    cv: Path | None = None


class SearchConfig(BaseModel):
    """The job search parameters file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    remote: StrictBool
    experience_level: ExperienceLevels = Field(alias="experienceLevel")
    job_types: JobTypes = Field(alias="jobTypes")
    date: DateFilters
    positions: list[StrictStr]
    locations: list[StrictStr]
    distance: Literal[0, 5, 10, 25, 50, 100]
    company_blacklist: list[StrictStr] = Field(default_factory=list, alias="companyBlacklist")
    title_blacklist: list[StrictStr] = Field(default_factory=list, alias="titleBlacklist")
    output_file_directory: Path = Field(alias="outputFileDirectory")
    uploads: Uploads = Field(default_factory=Uploads)

    @field_validator("company_blacklist", "title_blacklist", mode="before")
    @classmethod
    def null_blacklist_is_empty(cls, value: object) -> object:
        return [] if value is None else value


def load_search_config(path: Path) -> SearchConfig:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file {path} not found") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc

    try:
        return SearchConfig.model_validate(payload)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigError(f"Invalid config file {path}: {problems}") from exc
