"""Holder of the active step sequence and the animation pointer into it."""

from __future__ import annotations

import logging
from typing import Iterable

from .execution import ExecutionStatusGate
from .session_types import AnimationState
from .step_types import Step, StepSequence
from .supersession import SupersessionGuard

logger = logging.getLogger(__name__)


class StepSequenceStore:
    """Single-writer store; every mutation goes through the guard first."""

    def __init__(self, guard: SupersessionGuard, gate: ExecutionStatusGate):
        self._guard = guard
        self._gate = gate
        self._active = StepSequence()
        self._unavailable = False
        self.animation = AnimationState()

    def current(self) -> StepSequence:
        return self._active

    @property
    def unavailable(self) -> bool:
        """True when the last accepted analysis failed and nothing is displayed."""
        return self._unavailable

    def replace(self, generation: int, steps: Iterable[Step]) -> bool:
        if not self._guard.accept(generation):
            return False
        self._active = StepSequence(generation=generation, steps=tuple(steps))
        self.animation = AnimationState(index=0, paused=self._gate.running)
        self._unavailable = False
        logger.info(
            "Generation %d accepted with %d steps", generation, len(self._active)
        )
        return True

    def record_failure(self, generation: int) -> bool:
        """Mark *generation* as completed without steps.

        The previous sequence, if any, stays displayed.
        """
        if not self._guard.accept(generation):
            return False
        if self._active.is_empty:
            self._unavailable = True
        logger.info(
            "Generation %d failed; keeping generation %d on display",
            generation,
            self._active.generation,
        )
        return True

    def clear(self) -> None:
        self._active = StepSequence(generation=self._guard.latest_completed)
        self.animation = AnimationState(paused=self._gate.running)
        self._unavailable = False
        logger.info("Step sequence cleared")
