from __future__ import annotations

import logging
from typing import Any, Protocol

from anthropic import Anthropic
from openai import OpenAI

from kestrel.types import ModelResponse, ProviderConfig

logger = logging.getLogger(__name__)


class LLMProvider(Protocol):
    config: ProviderConfig

    def complete_text(self, prompt: str) -> ModelResponse: ...


def _endpoint_missing(exc: Exception) -> bool:
    if getattr(exc, "status_code", None) == 404:
        return True
    text = str(exc).lower()
    return "404" in text or "not found" in text


def _chat_message_text(completion: Any) -> str:
    choices = getattr(completion, "choices", None)
    if not choices:
        return ""
    content = getattr(getattr(choices[0], "message", None), "content", None)
    return "" if content is None else str(content)


class OpenAIProvider:
    """OpenAI models, preferring the Responses API over chat completions."""

    def __init__(self, config: ProviderConfig, base_url: str | None = None):
        self.config = config
        self.client = OpenAI(
            api_key=config.api_key,
            base_url=base_url or config.base_url or None,
            timeout=float(config.timeout_sec),
        )

    def complete_text(self, prompt: str) -> ModelResponse:
        try:
            return self.respond(prompt)
        except Exception as exc:
            if not _endpoint_missing(exc):
                raise
            logger.warning("Responses endpoint missing for %s (%s), using chat completions", self.config.model, exc)
        return self.chat(prompt)

    def respond(self, prompt: str) -> ModelResponse:
        result = self.client.responses.create(
            model=self.config.model,
            temperature=self.config.temperature,
            input=[{"role": "user", "content": [{"type": "input_text", "text": prompt}]}],
        )
        return _model_response(getattr(result, "output_text", None) or "", result, "responses")

    def chat(self, prompt: str) -> ModelResponse:
        completion = self.client.chat.completions.create(
            model=self.config.model,
            temperature=self.config.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return _model_response(_chat_message_text(completion), completion, "chat_completions")


class OllamaProvider(OpenAIProvider):
    """Local Ollama server through its OpenAI-compatible /v1 endpoint."""

    def __init__(self, config: ProviderConfig):
        root = config.base_url.rstrip("/")
        super().__init__(
            config.model_copy(update={"api_key": config.api_key or "ollama"}),
            base_url=root if root.endswith("/v1") else f"{root}/v1",
        )

    def complete_text(self, prompt: str) -> ModelResponse:
        return self.chat(prompt)


class AnthropicProvider:
    def __init__(self, config: ProviderConfig, max_tokens: int = 4096):
        self.config = config
        self.max_tokens = max_tokens
        self.client = Anthropic(api_key=config.api_key, timeout=float(config.timeout_sec))

    def complete_text(self, prompt: str) -> ModelResponse:
        message = self.client.messages.create(
            model=self.config.model,
            max_tokens=self.max_tokens,
            temperature=self.config.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(
            getattr(block, "text", "") for block in (getattr(message, "content", None) or [])
        )
        return _model_response(text, message, "messages")


_PROVIDERS: dict[str, type] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "ollama": OllamaProvider,
}


def build_provider(config: ProviderConfig) -> LLMProvider:
    provider = _PROVIDERS[config.kind](config)
    logger.debug(
        "Provider initialized kind=%s model=%s temperature=%s base_url=%s",
        config.kind,
        config.model,
        config.temperature,
        config.base_url or "-",
    )
    return provider


def _model_response(text: str, payload: Any, api_path: str) -> ModelResponse:
    dumped = payload.model_dump() if hasattr(payload, "model_dump") else {}
    raw = dict(dumped) if isinstance(dumped, dict) else {"raw": dumped}
    raw["api_path"] = api_path
    return ModelResponse(content=text, raw=raw)


def find_content(payload: Any) -> str | None:
    """Return the first non-empty ``content`` string found in a nested envelope."""
    if isinstance(payload, dict):
        content = payload.get("content")
        if isinstance(content, str) and content:
            return content
        for value in payload.values():
            if isinstance(value, (dict, list)):
                found = find_content(value)
                if found:
                    return found
        return None
    if isinstance(payload, list):
        for item in payload:
            found = find_content(item)
            if found:
                return found
        return None
    if hasattr(payload, "model_dump"):
        return find_content(payload.model_dump())
    return None
