"""Explanation session — wires edits, analysis, supersession and animation.

Everything runs on one event loop: edits, timer callbacks and analysis
completions never interleave inside a mutation, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging

from . import constants
from .animator import FrameListener, StepAnimator
from .clock import AsyncioClock, Clock
from .debounce import DebounceTrigger
from .errors import FailureReason
from .execution import ExecutionStatusGate
from .reasoning import AnalysisOutcome, StepReasoner
from .session_types import ExplainerConfig, Frame, SessionStatus
from .step_store import StepSequenceStore
from .step_types import AnalysisRequest, SourceSnapshot, StepSequence
from .supersession import SupersessionGuard

logger = logging.getLogger(__name__)


class ExplanationSession:
    """Owns all analysis state for one editor buffer.

    Superseded analyses are not cancelled; their results are dropped by
    the supersession guard when they complete.
    """

    def __init__(
        self,
        reasoner: StepReasoner,
        config: ExplainerConfig | None = None,
        clock: Clock | None = None,
        gate: ExecutionStatusGate | None = None,
        listener: FrameListener | None = None,
        language: str = constants.DEFAULT_LANGUAGE,
    ):
        self._reasoner = reasoner
        self._config = config or ExplainerConfig()
        self._clock = clock or AsyncioClock()
        self.gate = gate or ExecutionStatusGate()
        self.guard = SupersessionGuard()
        self.store = StepSequenceStore(self.guard, self.gate)
        self.animator = StepAnimator(
            self.store,
            self.guard,
            self.gate,
            self._clock,
            self._config.tick_interval,
            listener,
        )
        self.debounce = DebounceTrigger(
            self._clock,
            self._config.quiescence,
            self.guard,
            on_analyze=self._on_analyze,
            on_clear=self._on_clear,
        )
        self._language = language
        self._last_code = ""
        self._tasks: dict[int, asyncio.Task] = {}
        self.issued: list[AnalysisRequest] = []

    @property
    def language(self) -> str:
        return self._language

    @property
    def status(self) -> SessionStatus:
        if self.guard.in_flight:
            return SessionStatus.ANALYZING
        if self.store.unavailable:
            return SessionStatus.UNAVAILABLE
        if not self.store.current().is_empty:
            return SessionStatus.READY
        return SessionStatus.IDLE

    @property
    def fallback_message(self) -> str:
        if self.store.unavailable:
            return constants.ANALYSIS_UNAVAILABLE_MESSAGE
        return ""

    def current(self) -> StepSequence:
        return self.store.current()

    def frame(self) -> Frame:
        return self.animator.current_frame()

    def start(self) -> None:
        self.animator.start()

    async def close(self) -> None:
        self.debounce.cancel()
        self.animator.stop()
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Session closed (%d analyses abandoned)", len(tasks))

    def on_edit(self, code: str, language: str | None = None) -> None:
        if language:
            self._language = language
        self._last_code = code
        self.debounce.on_edit(SourceSnapshot(code=code, language=self._language))

    def set_language(self, language: str) -> None:
        """Changing the language tag re-analyzes the current buffer."""
        if language == self._language:
            return
        self.on_edit(self._last_code, language)

    async def drain(self) -> None:
        """Wait until every analysis issued so far has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()))

    async def wait_for(self, generation: int) -> None:
        task = self._tasks.get(generation)
        if task is not None:
            await task

    def _on_analyze(self, request: AnalysisRequest) -> None:
        self.issued.append(request)
        task = asyncio.get_running_loop().create_task(self._analyze(request))
        self._tasks[request.generation] = task
        task.add_done_callback(lambda _t: self._tasks.pop(request.generation, None))
        self.animator.refresh()

    def _on_clear(self) -> None:
        self.guard.invalidate()
        self.store.clear()
        self.animator.refresh()

    async def _analyze(self, request: AnalysisRequest) -> None:
        def _record_attempt(attempt: int) -> None:
            request.attempt = attempt

        try:
            outcome = await self._reasoner.analyze(
                request.snapshot, on_attempt=_record_attempt
            )
        except Exception:
            logger.exception("Analysis of generation %d failed", request.generation)
            outcome = AnalysisOutcome(failure=FailureReason.EXHAUSTED)
        self._complete(request, outcome)

    def _complete(self, request: AnalysisRequest, outcome: AnalysisOutcome) -> None:
        if outcome.ok:
            applied = self.store.replace(request.generation, outcome.steps)
        else:
            applied = self.store.record_failure(request.generation)
        if not applied:
            logger.info(
                "Discarding superseded result for generation %d", request.generation
            )
        self.animator.refresh()
