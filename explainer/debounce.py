"""Quiescence-window trigger that turns edit bursts into single analyses."""

from __future__ import annotations

import logging
from typing import Callable

from .clock import Clock, TimerHandle
from .step_types import AnalysisRequest, SourceSnapshot
from .supersession import SupersessionGuard

logger = logging.getLogger(__name__)


class DebounceTrigger:
    """Emits one ``on_analyze`` per quiescence window, carrying the last edit.

    An empty snapshot short-circuits: the pending timer is dropped and
    ``on_clear`` runs straight away.
    """

    def __init__(
        self,
        clock: Clock,
        quiescence: float,
        guard: SupersessionGuard,
        on_analyze: Callable[[AnalysisRequest], None],
        on_clear: Callable[[], None],
    ):
        self._clock = clock
        self._quiescence = quiescence
        self._guard = guard
        self._on_analyze = on_analyze
        self._on_clear = on_clear
        self._pending: SourceSnapshot | None = None
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> SourceSnapshot | None:
        return self._pending

    def on_edit(self, snapshot: SourceSnapshot) -> None:
        self.cancel()
        if snapshot.is_empty:
            logger.info("Buffer empty, clearing steps")
            self._on_clear()
            return
        self._pending = snapshot
        self._handle = self._clock.call_later(self._quiescence, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    def _fire(self) -> None:
        snapshot = self._pending
        self._handle = None
        self._pending = None
        if snapshot is None:
            return
        generation = self._guard.issue()
        logger.info(
            "Quiescent for %.2fs, issuing analysis generation %d",
            self._quiescence,
            generation,
        )
        self._on_analyze(AnalysisRequest(generation=generation, snapshot=snapshot))
