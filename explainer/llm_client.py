"""Shared LLM client infrastructure — used by the step reasoner and the chat assistant."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from . import constants
from .errors import TransientServiceError

logger = logging.getLogger(__name__)


class LLMClient(ABC):
    """Abstract base for async LLM API clients."""

    @abstractmethod
    async def complete(
        self, system_prompt: str, user_message: str, max_tokens: int = 4096
    ) -> str:
        """Send a prompt to the LLM and return the raw text response.

        Raises TransientServiceError for connection, timeout and
        non-success status failures.
        """
        ...


def _as_transient(exc: Exception) -> TransientServiceError:
    status_code = getattr(exc, "status_code", None)
    return TransientServiceError(str(exc), status_code=status_code)


class ClaudeLLMClient(LLMClient):
    """Wraps anthropic.AsyncAnthropic() with lazy import and DI."""

    _LAZY_IMPORT = object()

    def __init__(
        self, model: str = constants.DEFAULT_CLAUDE_MODEL, client: Any = _LAZY_IMPORT
    ):
        import anthropic

        if client is ClaudeLLMClient._LAZY_IMPORT:
            self._client = anthropic.AsyncAnthropic()
        else:
            self._client = client
        self._api_error = anthropic.APIError
        self._model = model

    async def complete(
        self, system_prompt: str, user_message: str, max_tokens: int = 4096
    ) -> str:
        logger.debug(
            "ClaudeLLMClient.complete: model=%s, max_tokens=%d", self._model, max_tokens
        )
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
            )
        except self._api_error as exc:
            raise _as_transient(exc) from exc
        return response.content[0].text


class OpenAILLMClient(LLMClient):
    """Wraps openai.AsyncOpenAI() with lazy import and DI."""

    _LAZY_IMPORT = object()

    def __init__(
        self,
        model: str = constants.DEFAULT_OPENAI_MODEL,
        client: Any = _LAZY_IMPORT,
        json_mode: bool = True,
    ):
        import openai

        if client is OpenAILLMClient._LAZY_IMPORT:
            self._client = openai.AsyncOpenAI()
        else:
            self._client = client
        self._api_error = openai.APIError
        self._model = model
        self._json_mode = json_mode

    async def complete(
        self, system_prompt: str, user_message: str, max_tokens: int = 4096
    ) -> str:
        logger.debug(
            "OpenAILLMClient.complete: model=%s, max_tokens=%d", self._model, max_tokens
        )
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "max_tokens": max_tokens,
        }
        if self._json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except self._api_error as exc:
            raise _as_transient(exc) from exc
        return response.choices[0].message.content or ""


class OllamaLLMClient(LLMClient):
    """Wraps Ollama's OpenAI-compatible API at localhost:11434."""

    _LAZY_IMPORT = object()

    def __init__(
        self,
        model: str = constants.DEFAULT_OLLAMA_MODEL,
        client: Any = _LAZY_IMPORT,
        base_url: str = constants.DEFAULT_OLLAMA_BASE_URL,
    ):
        import openai

        if client is OllamaLLMClient._LAZY_IMPORT:
            self._client = openai.AsyncOpenAI(base_url=base_url, api_key="ollama")
        else:
            self._client = client
        self._api_error = openai.APIError
        self._model = model

    async def complete(
        self, system_prompt: str, user_message: str, max_tokens: int = 4096
    ) -> str:
        logger.debug(
            "OllamaLLMClient.complete: model=%s, max_tokens=%d",
            self._model,
            max_tokens,
        )
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=max_tokens,
            )
        except self._api_error as exc:
            raise _as_transient(exc) from exc
        return response.choices[0].message.content or ""


def get_llm_client(
    provider: str = constants.PROVIDER_CLAUDE,
    model: str = "",
    client: Any = None,
    base_url: str = "",
) -> LLMClient:
    """Factory for LLM clients.

    Args:
        provider: "claude", "openai", or "ollama"
        model: Model name override (empty string = use default)
        client: Pre-built async API client for DI/testing
        base_url: Endpoint override for Ollama
    """
    kwargs: dict[str, Any] = {}
    if model:
        kwargs["model"] = model
    if client is not None:
        kwargs["client"] = client

    if provider == constants.PROVIDER_CLAUDE:
        return ClaudeLLMClient(**kwargs)

    if provider == constants.PROVIDER_OPENAI:
        return OpenAILLMClient(**kwargs)

    if provider == constants.PROVIDER_OLLAMA:
        if base_url:
            kwargs["base_url"] = base_url
        return OllamaLLMClient(**kwargs)

    raise ValueError(f"Unknown LLM provider: {provider}")
