from __future__ import annotations

from types import SimpleNamespace

import pytest

from kestrel.llm.providers import (
    AnthropicProvider,
    OllamaProvider,
    OpenAIProvider,
    build_provider,
    find_content,
)
from kestrel.types import ProviderConfig


class StatusError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class Endpoint:
    """Records create() kwargs and replays a reply, or raises it when it is an exception."""

    def __init__(self, reply):
        self.reply = reply
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.reply, BaseException):
            raise self.reply
        return self.reply


def chat_reply(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def fake_openai(responses_reply, chat_reply_) -> SimpleNamespace:
    return SimpleNamespace(
        responses=Endpoint(responses_reply),
        chat=SimpleNamespace(completions=Endpoint(chat_reply_)),
    )


def openai_provider(client) -> OpenAIProvider:
    provider = OpenAIProvider(ProviderConfig(kind="openai", model="gpt-4o-mini", api_key="sk-test", timeout_sec=5))
    provider.client = client
    return provider


def test_responses_api_is_preferred() -> None:
    client = fake_openai(SimpleNamespace(output_text="from responses"), chat_reply("from chat"))

    result = openai_provider(client).complete_text("hello")

    assert result.content == "from responses"
    assert result.raw == {"api_path": "responses"}
    assert client.chat.completions.calls == []
    [call] = client.responses.calls
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.2
    assert call["input"][0]["content"][0]["text"] == "hello"


@pytest.mark.parametrize(
    "error",
    [StatusError("missing", status_code=404), StatusError("404 page not found"), StatusError("Not Found")],
)
def test_missing_responses_endpoint_falls_back_to_chat(error) -> None:
    client = fake_openai(error, chat_reply("from chat"))

    result = openai_provider(client).complete_text("hello")

    assert result.content == "from chat"
    assert result.raw["api_path"] == "chat_completions"
    assert client.chat.completions.calls[0]["messages"] == [{"role": "user", "content": "hello"}]


def test_other_responses_errors_propagate() -> None:
    client = fake_openai(StatusError("slow down", status_code=429), chat_reply("unused"))

    with pytest.raises(StatusError, match="slow down"):
        openai_provider(client).complete_text("hello")
    assert client.chat.completions.calls == []


def test_chat_failure_after_fallback_propagates() -> None:
    client = fake_openai(StatusError("gone", status_code=404), RuntimeError("chat broke"))

    with pytest.raises(RuntimeError, match="chat broke"):
        openai_provider(client).complete_text("hello")


def test_empty_chat_message_becomes_empty_text() -> None:
    client = fake_openai(StatusError("gone", status_code=404), chat_reply(None))
    assert openai_provider(client).complete_text("hello").content == ""

    client = fake_openai(StatusError("gone", status_code=404), SimpleNamespace(choices=[]))
    assert openai_provider(client).complete_text("hello").content == ""


def test_ollama_talks_to_v1_chat_only() -> None:
    provider = OllamaProvider(ProviderConfig(kind="ollama", model="llama3", base_url="http://localhost:11434/"))
    assert str(provider.client.base_url).rstrip("/") == "http://localhost:11434/v1"

    provider.client = fake_openai(AssertionError("responses must stay unused"), chat_reply("local answer"))
    result = provider.complete_text("hello")

    assert result.content == "local answer"
    assert result.raw["api_path"] == "chat_completions"


def test_ollama_keeps_explicit_v1_suffix() -> None:
    provider = OllamaProvider(ProviderConfig(kind="ollama", model="llama3", base_url="http://gpu-box:11434/v1"))
    assert str(provider.client.base_url).rstrip("/") == "http://gpu-box:11434/v1"


def test_anthropic_concatenates_text_blocks() -> None:
    provider = AnthropicProvider(ProviderConfig(kind="anthropic", model="claude-test", api_key="sk-ant", temperature=0.5))
    blocks = [SimpleNamespace(type="text", text="Ja, "), SimpleNamespace(type="text", text="gerne")]
    provider.client = SimpleNamespace(messages=Endpoint(SimpleNamespace(content=blocks)))

    result = provider.complete_text("hello")

    assert result.content == "Ja, gerne"
    assert result.raw["api_path"] == "messages"
    [call] = provider.client.messages.calls
    assert call["max_tokens"] == 4096
    assert call["temperature"] == 0.5
    assert call["messages"] == [{"role": "user", "content": "hello"}]


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        (ProviderConfig(kind="openai", model="gpt-4o-mini", api_key="sk-test"), OpenAIProvider),
        (ProviderConfig(kind="anthropic", model="claude-test", api_key="sk-ant"), AnthropicProvider),
        (ProviderConfig(kind="ollama", model="llama3", base_url="http://localhost:11434"), OllamaProvider),
    ],
)
def test_build_provider_dispatches_on_kind(config, expected) -> None:
    assert type(build_provider(config)) is expected


def test_find_content_walks_nested_payloads() -> None:
    assert find_content({"message": {"content": "deep"}}) == "deep"
    assert find_content({"content": "", "choices": [{"content": "first"}, {"content": "second"}]}) == "first"
    assert find_content([{"delta": {}}, {"content": "late"}]) == "late"
    assert find_content({"nothing": 1}) is None
