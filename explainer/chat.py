"""Conversational assistant sharing the retrying request client."""

from __future__ import annotations

import logging
from typing import Iterator, Literal

from pydantic import BaseModel, ConfigDict

from . import constants
from .backoff import BackoffRequestClient
from .llm_client import LLMClient
from .step_types import SourceSnapshot

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class ConversationLog:
    """Ordered transcript owned by one session."""

    def __init__(self):
        self._messages: list[ChatMessage] = []

    def append(self, role: Literal["user", "assistant"], content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        return message

    def clear(self) -> None:
        self._messages.clear()

    def render(self) -> str:
        return "\n\n".join(f"{m.role.upper()}: {m.content}" for m in self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self._messages)


class ChatAssistant:
    SYSTEM_PROMPT = """\
You are a patient programming tutor embedded in a code editor. Answer the \
learner's latest message in the conversation below. When the learner's \
current code is included, ground your answer in it. Keep answers short and \
use plain text.
"""

    def __init__(
        self,
        llm_client: LLMClient,
        backoff: BackoffRequestClient | None = None,
        log: ConversationLog | None = None,
        max_tokens: int = constants.CHAT_MAX_TOKENS,
    ):
        self._llm_client = llm_client
        self._backoff = backoff or BackoffRequestClient()
        self.log = log if log is not None else ConversationLog()
        self._max_tokens = max_tokens

    def _user_message(self, snapshot: SourceSnapshot | None) -> str:
        parts = []
        if snapshot is not None and not snapshot.is_empty:
            parts.append(f"Current {snapshot.language} code:\n{snapshot.code}")
        parts.append(f"Conversation:\n{self.log.render()}")
        return "\n\n".join(parts)

    async def ask(
        self, text: str, snapshot: SourceSnapshot | None = None
    ) -> ChatMessage:
        """Append the question and the reply (or a fallback) to the log."""
        self.log.append("user", text)
        user_message = self._user_message(snapshot)

        async def _attempt() -> str:
            return await self._llm_client.complete(
                system_prompt=self.SYSTEM_PROMPT,
                user_message=user_message,
                max_tokens=self._max_tokens,
            )

        result = await self._backoff.execute(_attempt)
        if not result.ok:
            logger.error("Chat reply unavailable after %d attempts", result.attempts)
            return self.log.append("assistant", constants.CHAT_UNAVAILABLE_MESSAGE)
        return self.log.append("assistant", (result.value or "").strip())
