"""Shared fakes and helpers for the explainer unit tests."""

from __future__ import annotations

import asyncio
import json

from explainer.llm_client import LLMClient
from explainer.step_types import Step


def make_steps(n: int) -> list[Step]:
    return [
        Step(explanation=f"step {i}", line_highlight=i + 1, variables=())
        for i in range(n)
    ]


def steps_json(n: int) -> str:
    return json.dumps(
        {
            "steps": [
                {
                    "explanation": f"step {i}",
                    "lineHighlight": i + 1,
                    "variables": [{"name": "i", "value": str(i)}],
                }
                for i in range(n)
            ]
        }
    )


class ScriptedLLMClient(LLMClient):
    """Replays a script of responses; exceptions in the script are raised."""

    def __init__(self, script: list):
        self.script = list(script)
        self.calls: list[dict] = []

    async def complete(
        self, system_prompt: str, user_message: str, max_tokens: int = 4096
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_message": user_message,
                "max_tokens": max_tokens,
            }
        )
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item


async def settle(rounds: int = 5) -> None:
    """Let freshly created tasks run up to their first real suspension."""
    for _ in range(rounds):
        await asyncio.sleep(0)
