"""Composable entry points for building sessions and one-shot explanations.

Each function corresponds to a CLI workflow but is callable
programmatically without argparse.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from . import constants
from .animator import FrameListener
from .backoff import BackoffRequestClient, RetryPolicy
from .clock import Clock
from .execution import ExecutionStatusGate
from .llm_client import LLMClient, get_llm_client
from .reasoning import AnalysisOutcome, StepReasoner
from .session import ExplanationSession
from .session_types import ExplainerConfig
from .step_types import SourceSnapshot, Step

logger = logging.getLogger(__name__)


def build_reasoner(
    config: ExplainerConfig | None = None,
    llm_client: LLMClient | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    client: Any = None,
) -> StepReasoner:
    """Create a StepReasoner from a config.

    Args:
        config: Timing and provider settings (defaults if omitted).
        llm_client: Ready-made LLMClient; overrides config.provider.
        sleep: Coroutine used for backoff delays.
        client: Pre-built SDK client passed to get_llm_client for DI.
    """
    config = config or ExplainerConfig()
    if llm_client is None:
        llm_client = get_llm_client(
            provider=config.provider, model=config.model, client=client
        )
    backoff = BackoffRequestClient(
        RetryPolicy(max_attempts=config.max_attempts, base_delay=config.base_delay),
        sleep=sleep,
    )
    return StepReasoner(llm_client, backoff, request_timeout=config.request_timeout)


def build_session(
    config: ExplainerConfig | None = None,
    llm_client: LLMClient | None = None,
    clock: Clock | None = None,
    gate: ExecutionStatusGate | None = None,
    listener: FrameListener | None = None,
    language: str = constants.DEFAULT_LANGUAGE,
) -> ExplanationSession:
    """Create a fully wired ExplanationSession.

    Backoff delays go through *clock* when one is given so a ManualClock
    drives the whole pipeline.
    """
    config = config or ExplainerConfig()
    sleep = clock.sleep if clock is not None else asyncio.sleep
    reasoner = build_reasoner(config, llm_client=llm_client, sleep=sleep)
    logger.info(
        "Building session (provider=%s, quiescence=%.2fs, tick=%.2fs)",
        config.provider,
        config.quiescence,
        config.tick_interval,
    )
    return ExplanationSession(
        reasoner,
        config=config,
        clock=clock,
        gate=gate,
        listener=listener,
        language=language,
    )


async def explain_source(
    source: str,
    language: str = constants.DEFAULT_LANGUAGE,
    config: ExplainerConfig | None = None,
    llm_client: LLMClient | None = None,
) -> AnalysisOutcome:
    """Run one analysis of *source* without debouncing or animation."""
    reasoner = build_reasoner(config, llm_client=llm_client)
    return await reasoner.analyze(SourceSnapshot(code=source, language=language))


def format_steps(steps: Iterable[Step]) -> str:
    """Return a numbered, human-readable rendering of *steps*."""
    return "\n".join(f"  {i:>3}. {step}" for i, step in enumerate(steps, 1))
