"""Step reasoner — asks an LLM to narrate a program's execution as Steps."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from . import constants
from .backoff import BackoffRequestClient
from .errors import FailureReason, UnparseableResponse
from .llm_client import LLMClient
from .step_parser import parse_steps
from .step_types import SourceSnapshot, Step

logger = logging.getLogger(__name__)


class StepReasonerPrompts:
    """Prompt templates for execution narration."""

    SYSTEM_PROMPT = """\
You explain how a program executes, one step at a time, for a learner \
watching the code in an editor.

Break the program's execution into an ordered list of steps. For each step \
return a JSON object with these fields:
- "explanation": one or two plain sentences describing what happens (string)
- "lineHighlight": the 1-based source line being executed (integer), or null
- "variables": the variables in scope after the step, as a list of \
{"name": "<name>", "value": "<value rendered as text>"} objects

Follow the real control flow: loop bodies appear once per iteration (at most \
10 iterations, then summarise), function calls step into the callee. If the \
input is not a runnable program, or there is nothing to visualize, return an \
empty array.

## Output format

Return a JSON object of the form {"steps": [ ... ]}. Example:
{"steps": [
  {"explanation": "x is assigned 5.", "lineHighlight": 1, "variables": [{"name": "x", "value": "5"}]},
  {"explanation": "The value of x is printed.", "lineHighlight": 2, "variables": [{"name": "x", "value": "5"}]}
]}

Return ONLY the JSON. No markdown fences. No explanation text outside the JSON.
"""

    USER_PROMPT_TEMPLATE = (
        "Explain the execution of the following {language} program:\n\n{source}"
    )


def number_lines(source: str) -> str:
    """Prefix each line with its 1-based number so the model can cite lines."""
    lines = source.splitlines()
    width = len(str(len(lines)))
    return "\n".join(f"{i:>{width}} | {line}" for i, line in enumerate(lines, 1))


@dataclass(frozen=True)
class AnalysisOutcome:
    """What one analysis produced.

    ``failure`` is EXHAUSTED when the service could not be reached and
    UNPARSEABLE when it answered with something other than a step array
    (``steps`` is then empty and the outcome still counts as a success).
    """

    steps: tuple[Step, ...] = field(default_factory=tuple)
    failure: FailureReason | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.failure != FailureReason.EXHAUSTED


class StepReasoner:
    """Turns a SourceSnapshot into an AnalysisOutcome via one retried LLM call."""

    def __init__(
        self,
        llm_client: LLMClient,
        backoff: BackoffRequestClient | None = None,
        request_timeout: float = constants.DEFAULT_REQUEST_TIMEOUT_SECONDS,
        max_tokens: int = constants.STEP_MAX_TOKENS,
    ):
        self._llm_client = llm_client
        self._backoff = backoff or BackoffRequestClient()
        self._request_timeout = request_timeout
        self._max_tokens = max_tokens

    def _user_message(self, snapshot: SourceSnapshot) -> str:
        return StepReasonerPrompts.USER_PROMPT_TEMPLATE.format(
            language=snapshot.language,
            source=number_lines(snapshot.code),
        )

    async def analyze(
        self,
        snapshot: SourceSnapshot,
        on_attempt: Callable[[int], None] | None = None,
    ) -> AnalysisOutcome:
        logger.info(
            "StepReasoner: analyzing %d chars of %s source",
            len(snapshot.code),
            snapshot.language,
        )
        user_message = self._user_message(snapshot)

        async def _attempt() -> str:
            return await asyncio.wait_for(
                self._llm_client.complete(
                    system_prompt=StepReasonerPrompts.SYSTEM_PROMPT,
                    user_message=user_message,
                    max_tokens=self._max_tokens,
                ),
                timeout=self._request_timeout,
            )

        result = await self._backoff.execute(_attempt, on_attempt=on_attempt)
        if not result.ok:
            return AnalysisOutcome(failure=result.failure, attempts=result.attempts)

        try:
            steps = parse_steps(result.value or "")
        except UnparseableResponse as exc:
            logger.warning("Treating unparseable response as empty: %s", exc)
            return AnalysisOutcome(
                failure=FailureReason.UNPARSEABLE, attempts=result.attempts
            )

        logger.info("StepReasoner: produced %d steps", len(steps))
        return AnalysisOutcome(steps=tuple(steps), attempts=result.attempts)
