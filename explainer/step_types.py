"""Analysis data types (pure data, no business logic)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class SourceSnapshot:
    """The buffer contents captured at one edit."""

    code: str
    language: str

    @property
    def is_empty(self) -> bool:
        return not self.code.strip()


@dataclass
class AnalysisRequest:
    """One analysis attempt, tagged with the generation that issued it."""

    generation: int
    snapshot: SourceSnapshot
    attempt: int = 0


class Variable(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _render_value(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value
        return json.dumps(value)


class Step(BaseModel):
    """One hypothesised point in the program's execution."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    explanation: str
    line_highlight: int | None = Field(default=None, alias="lineHighlight")
    variables: tuple[Variable, ...] = ()

    @field_validator("variables", mode="before")
    @classmethod
    def _normalize_variables(cls, value: Any) -> Any:
        # Models sometimes answer with {"x": 1} instead of [{"name": "x", ...}]
        if value is None:
            return ()
        if isinstance(value, dict):
            return [{"name": str(k), "value": v} for k, v in value.items()]
        return value

    def __str__(self) -> str:
        line = f"L{self.line_highlight}" if self.line_highlight is not None else "--"
        base = f"[{line}] {self.explanation}"
        if self.variables:
            bindings = ", ".join(f"{v.name}={v.value}" for v in self.variables)
            return f"{base}  ({bindings})"
        return base


@dataclass(frozen=True)
class StepSequence:
    """The ordered steps produced by one accepted analysis."""

    generation: int = 0
    steps: tuple[Step, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def is_empty(self) -> bool:
        return not self.steps


EMPTY_SEQUENCE = StepSequence()
