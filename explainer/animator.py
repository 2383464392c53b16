"""Cyclic scheduler that walks the active step sequence for display.

The animator is the only writer of ``AnimationState.index`` between
replacements. It pauses while code is executing or while a newer analysis
is in flight, and it polls both conditions on every tick instead of being
notified.
"""

from __future__ import annotations

import logging
from typing import Callable

from .clock import Clock, TimerHandle
from .execution import ExecutionStatusGate
from .session_types import AnimatorState, Frame
from .step_store import StepSequenceStore
from .supersession import SupersessionGuard

logger = logging.getLogger(__name__)

FrameListener = Callable[[Frame], None]


class StepAnimator:
    def __init__(
        self,
        store: StepSequenceStore,
        guard: SupersessionGuard,
        gate: ExecutionStatusGate,
        clock: Clock,
        tick_interval: float,
        listener: FrameListener | None = None,
    ):
        self._store = store
        self._guard = guard
        self._gate = gate
        self._clock = clock
        self._tick_interval = tick_interval
        self._listener = listener
        self._state = AnimatorState.IDLE
        self._handle: TimerHandle | None = None
        self._last_published: tuple[int, int, AnimatorState] | None = None

    @property
    def state(self) -> AnimatorState:
        return self._state

    @property
    def index(self) -> int:
        return self._store.animation.index

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is None:
            self._handle = self._clock.call_later(self._tick_interval, self._on_timer)
            logger.debug("Animator started (every %.2fs)", self._tick_interval)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            logger.debug("Animator stopped")

    def tick(self) -> None:
        """Advance one step unless idle or paused."""
        if not self._sync_state():
            return
        sequence = self._store.current()
        animation = self._store.animation
        animation.index = (animation.index + 1) % len(sequence)
        logger.debug("Tick: step %d/%d", animation.index + 1, len(sequence))
        self._publish()

    def refresh(self) -> None:
        """Re-evaluate the state after the store or the guard changed."""
        self._sync_state()
        self._publish()

    def current_frame(self) -> Frame:
        sequence = self._store.current()
        index = self._store.animation.index
        step = None if sequence.is_empty else sequence.steps[index]
        return Frame(
            step=step,
            index=index,
            total=len(sequence),
            generation=sequence.generation,
            state=self._state,
        )

    def _on_timer(self) -> None:
        self._handle = self._clock.call_later(self._tick_interval, self._on_timer)
        self.tick()

    def _sync_state(self) -> bool:
        """Poll the gating conditions; True if the animator may advance."""
        animation = self._store.animation
        if self._store.current().is_empty:
            self._transition(AnimatorState.IDLE)
            return False
        animation.paused = self._gate.running or self._guard.in_flight
        if animation.paused:
            self._transition(AnimatorState.PAUSED)
            return False
        self._transition(AnimatorState.ANIMATING)
        return True

    def _transition(self, new_state: AnimatorState) -> None:
        if new_state != self._state:
            logger.info("Animator %s -> %s", self._state.value, new_state.value)
            self._state = new_state

    def _publish(self) -> None:
        frame = self.current_frame()
        key = (frame.generation, frame.index, frame.state)
        if key == self._last_published:
            return
        self._last_published = key
        if self._listener:
            self._listener(frame)
