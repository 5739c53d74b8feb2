from __future__ import annotations

import json
import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import NoReturn

import typer

from kestrel.browser.authenticator import LinkedInAuthenticator
from kestrel.browser.driver import create_chrome_driver
from kestrel.browser.easy_applier import EasyApplier
from kestrel.browser.form_filler import ApplicationFormFiller
from kestrel.config import SearchConfig, Settings, get_settings, load_search_config
from kestrel.core.answers import AnswerResolver, QuestionCache
from kestrel.core.job_manager import JobManager
from kestrel.core.outcomes import OutcomeLog
from kestrel.core.resume import load_resume
from kestrel.errors import ConfigError, ResumeError
from kestrel.llm.answerer import ResumeAnswerer
from kestrel.llm.providers import build_provider
from kestrel.logging_config import configure_logging
from kestrel.types import ProviderConfig, ResumeProfile

logger = logging.getLogger(__name__)

app = typer.Typer(help="Kestrel: LinkedIn Easy Apply automation", no_args_is_help=True)

EXIT_INTERRUPTED = 130


def _package_version() -> str:
    try:
        return version("kestrel")
    except PackageNotFoundError:
        return "0.0.0+local"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"kestrel {_package_version()}")
        raise typer.Exit()


@app.callback()
def main(
    show_version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    """Apply to LinkedIn Easy Apply jobs using a resume profile and a language model."""


def _settings_with_overrides(
    *,
    provider: str | None = None,
    model: str | None = None,
    api_key: str | None = None,
    base_url: str | None = None,
    temperature: float | None = None,
    config: Path | None = None,
    cv: Path | None = None,
) -> Settings:
    """Fold command line flags over the environment settings into a fresh immutable copy."""
    settings = get_settings()
    updates: dict[str, object] = {}
    if provider is not None:
        updates["llm_provider"] = provider
    if model is not None:
        updates["llm_model"] = model
    if temperature is not None:
        updates["llm_temperature"] = temperature
    if base_url is not None:
        updates["ollama_base_url"] = base_url
    if api_key is not None:
        target = (provider or settings.selected_provider() or "openai").strip().lower()
        if target == "ollama":
            raise ConfigError("--api-key is not used by the ollama provider; pass --provider to pick another one")
        updates["anthropic_api_key" if target == "anthropic" else "openai_api_key"] = api_key
    if config is not None:
        updates["config_file_path"] = config
    if cv is not None:
        updates["cv_file_path"] = cv
    if not updates:
        return settings

    try:
        return Settings(**{**settings.model_dump(), **updates})
    except ValueError as exc:
        raise ConfigError(f"Invalid command line option: {exc}") from exc


def _load_inputs(settings: Settings) -> tuple[SearchConfig, ResumeProfile, ProviderConfig]:
    search = load_search_config(settings.config_file_path)
    resume = load_resume(settings.cv_file_path)
    return search, resume, settings.provider_config()


def _summary(settings: Settings, search: SearchConfig, provider: ProviderConfig) -> dict:
    return {
        "provider": provider.kind,
        "model": provider.model,
        "temperature": provider.temperature,
        "positions": search.positions,
        "locations": search.locations,
        "distance": search.distance,
        "remote": search.remote,
        "answers_file": str(settings.answers_file),
        "output_dir": str(search.output_file_directory),
    }


def _fail(exc: Exception) -> NoReturn:
    logger.error("%s", exc)
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command("validate")
def validate_cmd(
    config: Path | None = typer.Option(None, "--config", help="Path to the job search config JSON."),
    cv: Path | None = typer.Option(None, "--cv", help="Path to the resume profile JSON."),
) -> None:
    """Check the search config, resume profile and provider selection without opening a browser."""
    configure_logging()
    try:
        settings = _settings_with_overrides(config=config, cv=cv)
        search, resume, provider = _load_inputs(settings)
    except (ConfigError, ResumeError) as exc:
        _fail(exc)

    payload = {"ok": True, **_summary(settings, search, provider)}
    payload["candidate"] = f"{resume.personal_information.first_name} {resume.personal_information.last_name}".strip()
    typer.echo(json.dumps(payload, indent=2))


@app.command("run")
def run_cmd(
    model: str | None = typer.Option(None, "--model", help="Model name for the selected provider."),
    provider: str | None = typer.Option(None, "--provider", help="openai, anthropic or ollama."),
    api_key: str | None = typer.Option(None, "--api-key", help="API key for OpenAI or Anthropic."),
    base_url: str | None = typer.Option(None, "--base-url", help="Ollama server URL."),
    temperature: float | None = typer.Option(None, "--temperature", min=0.0, max=2.0),
    config: Path | None = typer.Option(None, "--config", help="Path to the job search config JSON."),
    cv: Path | None = typer.Option(None, "--cv", help="Path to the resume profile JSON."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Start without asking for confirmation."),
) -> None:
    """Log in to LinkedIn and apply to every matching Easy Apply job."""
    configure_logging()
    try:
        settings = _settings_with_overrides(
            provider=provider,
            model=model,
            api_key=api_key,
            base_url=base_url,
            temperature=temperature,
            config=config,
            cv=cv,
        )
        settings.require_credentials()
        search, resume, provider_config = _load_inputs(settings)
    except (ConfigError, ResumeError) as exc:
        _fail(exc)

    typer.echo(json.dumps(_summary(settings, search, provider_config), indent=2))
    if not yes:
        typer.confirm("Start applying with these settings?", abort=True)

    try:
        run_bot(settings, search, resume, provider_config)
    except KeyboardInterrupt:
        logger.warning("Interrupted, shutting down")
        raise typer.Exit(code=EXIT_INTERRUPTED)


def run_bot(
    settings: Settings,
    search: SearchConfig,
    resume: ResumeProfile,
    provider_config: ProviderConfig,
) -> None:
    answerer = ResumeAnswerer(build_provider(provider_config), resume)
    resolver = AnswerResolver(QuestionCache(settings.answers_file), answerer)
    logger.info("Answer cache loaded with %d questions", len(resolver.cache))

    output_dir = Path(search.output_file_directory)
    driver = create_chrome_driver(settings.chrome_profile_dir, headless=settings.headless)
    try:
        LinkedInAuthenticator(driver, settings.linkedin_email, settings.linkedin_password).start()
        form_filler = ApplicationFormFiller(
            driver,
            resolver,
            settings,
            resume_path=settings.resume_path or search.uploads.resume,
            artifacts_dir=output_dir / "cover_letters",
        )
        applier = EasyApplier(driver, resolver, form_filler, settings)
        manager = JobManager(driver, search, settings, applier, OutcomeLog(output_dir))
        manager.start_applying()
    finally:
        driver.quit()
