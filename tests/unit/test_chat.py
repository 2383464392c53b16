"""Tests for explainer.chat."""

from __future__ import annotations

import pytest

from explainer import constants
from explainer.backoff import BackoffRequestClient, RetryPolicy
from explainer.chat import ChatAssistant, ConversationLog
from explainer.errors import TransientServiceError
from explainer.step_types import SourceSnapshot

from tests.unit.conftest import ScriptedLLMClient


async def _no_sleep(delay: float) -> None:
    return None


def _assistant(llm: ScriptedLLMClient) -> ChatAssistant:
    return ChatAssistant(
        llm, BackoffRequestClient(RetryPolicy(max_attempts=2), sleep=_no_sleep)
    )


class TestConversationLog:
    def test_append_and_render(self):
        log = ConversationLog()
        log.append("user", "What does x do?")
        log.append("assistant", "It holds 5.")
        assert len(log) == 2
        assert log.render() == "USER: What does x do?\n\nASSISTANT: It holds 5."

    def test_clear(self):
        log = ConversationLog()
        log.append("user", "hi")
        log.clear()
        assert list(log) == []


class TestChatAssistant:
    @pytest.mark.asyncio
    async def test_reply_is_logged(self):
        llm = ScriptedLLMClient(["  It prints 1.  "])
        assistant = _assistant(llm)
        reply = await assistant.ask(
            "What happens?", SourceSnapshot(code="print(1)", language="python")
        )

        assert reply.role == "assistant"
        assert reply.content == "It prints 1."
        assert [m.role for m in assistant.log] == ["user", "assistant"]
        assert "print(1)" in llm.calls[0]["user_message"]
        assert "USER: What happens?" in llm.calls[0]["user_message"]

    @pytest.mark.asyncio
    async def test_retries_share_backoff_behaviour(self):
        llm = ScriptedLLMClient([TransientServiceError("HTTP 503"), "Sure."])
        reply = await _assistant(llm).ask("hello")
        assert reply.content == "Sure."
        assert len(llm.calls) == 2

    @pytest.mark.asyncio
    async def test_exhausted_appends_fallback(self):
        llm = ScriptedLLMClient([TransientServiceError("HTTP 503")])
        assistant = _assistant(llm)
        reply = await assistant.ask("hello")
        assert reply.content == constants.CHAT_UNAVAILABLE_MESSAGE
        assert len(assistant.log) == 2

    @pytest.mark.asyncio
    async def test_history_is_sent_on_follow_up(self):
        llm = ScriptedLLMClient(["first", "second"])
        assistant = _assistant(llm)
        await assistant.ask("one")
        await assistant.ask("two")
        assert "ASSISTANT: first" in llm.calls[1]["user_message"]
