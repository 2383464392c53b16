"""Tests for explainer.llm_client."""

from __future__ import annotations

import logging

import anthropic
import httpx
import openai
import pytest

from explainer.errors import TransientServiceError
from explainer.llm_client import (
    ClaudeLLMClient,
    OllamaLLMClient,
    OpenAILLMClient,
    get_llm_client,
)

_REQUEST = httpx.Request("POST", "https://api.example.test/v1/messages")


class FakeAnthropicResponse:
    """Mimics anthropic message response structure."""

    def __init__(self, text: str):
        self.content = [type("Block", (), {"text": text})()]


class FakeAsyncAnthropicClient:
    """Fake anthropic.AsyncAnthropic() for testing."""

    def __init__(self, error: Exception | None = None):
        self.messages = self
        self.last_call = {}
        self.error = error

    async def create(self, **kwargs):
        self.last_call = kwargs
        if self.error:
            raise self.error
        return FakeAnthropicResponse("fake claude response")


class FakeOpenAIResponse:
    """Mimics openai chat completion response structure."""

    def __init__(self, text: str):
        self.choices = [
            type("Choice", (), {"message": type("Msg", (), {"content": text})()})()
        ]


class FakeAsyncOpenAIClient:
    """Fake openai.AsyncOpenAI() for testing."""

    def __init__(self, error: Exception | None = None):
        self.chat = type("Chat", (), {"completions": self})()
        self.last_call = {}
        self.error = error

    async def create(self, **kwargs):
        self.last_call = kwargs
        if self.error:
            raise self.error
        return FakeOpenAIResponse("fake openai response")


class TestClaudeLLMClient:
    @pytest.mark.asyncio
    async def test_complete_with_injected_client(self):
        fake = FakeAsyncAnthropicClient()
        client = ClaudeLLMClient(client=fake)
        result = await client.complete("sys prompt", "user msg", max_tokens=512)

        assert result == "fake claude response"
        assert fake.last_call["model"] == "claude-sonnet-4-20250514"
        assert fake.last_call["system"] == "sys prompt"
        assert fake.last_call["max_tokens"] == 512
        assert fake.last_call["messages"] == [{"role": "user", "content": "user msg"}]

    @pytest.mark.asyncio
    async def test_connection_error_becomes_transient(self):
        fake = FakeAsyncAnthropicClient(
            error=anthropic.APIConnectionError(request=_REQUEST)
        )
        with pytest.raises(TransientServiceError):
            await ClaudeLLMClient(client=fake).complete("s", "u")

    @pytest.mark.asyncio
    async def test_status_error_keeps_status_code(self):
        response = httpx.Response(529, request=_REQUEST)
        error = anthropic.APIStatusError("overloaded", response=response, body=None)
        fake = FakeAsyncAnthropicClient(error=error)
        with pytest.raises(TransientServiceError) as excinfo:
            await ClaudeLLMClient(client=fake).complete("s", "u")
        assert excinfo.value.status_code == 529

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        fake = FakeAsyncAnthropicClient(error=KeyError("bug"))
        with pytest.raises(KeyError):
            await ClaudeLLMClient(client=fake).complete("s", "u")


class TestOpenAILLMClient:
    @pytest.mark.asyncio
    async def test_complete_with_injected_client(self):
        fake = FakeAsyncOpenAIClient()
        client = OpenAILLMClient(client=fake)
        result = await client.complete("sys prompt", "user msg", max_tokens=256)

        assert result == "fake openai response"
        assert fake.last_call["model"] == "gpt-4o"
        assert fake.last_call["max_tokens"] == 256
        assert fake.last_call["response_format"] == {"type": "json_object"}
        messages = fake.last_call["messages"]
        assert messages[0] == {"role": "system", "content": "sys prompt"}
        assert messages[1] == {"role": "user", "content": "user msg"}

    @pytest.mark.asyncio
    async def test_plain_text_mode(self):
        fake = FakeAsyncOpenAIClient()
        await OpenAILLMClient(client=fake, json_mode=False).complete("s", "u")
        assert "response_format" not in fake.last_call

    @pytest.mark.asyncio
    async def test_timeout_becomes_transient(self):
        fake = FakeAsyncOpenAIClient(error=openai.APITimeoutError(request=_REQUEST))
        with pytest.raises(TransientServiceError):
            await OpenAILLMClient(client=fake).complete("s", "u")


class TestOllamaLLMClient:
    @pytest.mark.asyncio
    async def test_complete_with_injected_client(self):
        fake = FakeAsyncOpenAIClient()
        client = OllamaLLMClient(client=fake)
        result = await client.complete("s", "u")
        assert result == "fake openai response"
        assert fake.last_call["model"] == "qwen2.5-coder:7b-instruct"
        assert "response_format" not in fake.last_call

    @pytest.mark.asyncio
    async def test_complete_logs_nothing_at_info(self, caplog):
        client = OllamaLLMClient(client=FakeAsyncOpenAIClient())
        with caplog.at_level(logging.INFO, logger="explainer.llm_client"):
            await client.complete("s", "u")
        assert not [r for r in caplog.records if r.name == "explainer.llm_client"]


class TestGetLLMClient:
    def test_claude_default(self):
        client = get_llm_client(provider="claude", client=FakeAsyncAnthropicClient())
        assert isinstance(client, ClaudeLLMClient)

    def test_openai_default(self):
        client = get_llm_client(provider="openai", client=FakeAsyncOpenAIClient())
        assert isinstance(client, OpenAILLMClient)

    def test_ollama(self):
        client = get_llm_client(provider="ollama", client=FakeAsyncOpenAIClient())
        assert isinstance(client, OllamaLLMClient)

    @pytest.mark.asyncio
    async def test_claude_with_model(self):
        fake = FakeAsyncAnthropicClient()
        client = get_llm_client(provider="claude", model="custom-model", client=fake)
        await client.complete("s", "u")
        assert fake.last_call["model"] == "custom-model"

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            get_llm_client(provider="gemini")
