"""Session data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from . import constants
from .step_types import Step


@dataclass(frozen=True)
class ExplainerConfig:
    """Groups the timing and provider configuration of a session."""

    quiescence: float = constants.DEFAULT_QUIESCENCE_SECONDS
    tick_interval: float = constants.DEFAULT_TICK_SECONDS
    max_attempts: int = constants.DEFAULT_MAX_ATTEMPTS
    base_delay: float = constants.DEFAULT_BASE_DELAY_SECONDS
    request_timeout: float = constants.DEFAULT_REQUEST_TIMEOUT_SECONDS
    provider: str = constants.PROVIDER_CLAUDE
    model: str = ""

    def __post_init__(self):
        if self.quiescence < 0:
            raise ValueError(f"quiescence must be >= 0, got {self.quiescence}")
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be > 0, got {self.tick_interval}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")


class AnimatorState(str, Enum):
    IDLE = "idle"
    ANIMATING = "animating"
    PAUSED = "paused"


class SessionStatus(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass
class AnimationState:
    """Pointer into the active sequence.

    ``index`` is meaningful only while the active sequence is non-empty.
    """

    index: int = 0
    paused: bool = False


@dataclass(frozen=True)
class Frame:
    """What the display listener is handed on every visible change."""

    step: Step | None
    index: int
    total: int
    generation: int
    state: AnimatorState
