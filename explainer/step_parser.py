"""Parsing of reasoning-service responses into Step lists."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from .errors import UnparseableResponse
from .step_types import Step

logger = logging.getLogger(__name__)

_STEP_LIST_KEYS = ("steps", "execution", "trace")


def strip_markdown_fences(text: str) -> str:
    """Remove markdown code fences from LLM response text."""
    text = text.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        text = text[first_newline + 1 :] if first_newline != -1 else text[3:]
    if text.endswith("```"):
        text = text[: text.rfind("```")]
    return text.strip()


def repair_json(text: str) -> str:
    """Attempt to repair common JSON issues from smaller LLMs.

    Handles both a bare step array and the ``{"steps": [...]}`` envelope:
    strips ``//`` line comments and trailing commas, drops prose around the
    outermost value, and closes a truncated payload after its last complete
    object.
    """
    text = re.sub(r"(?m)^\s*//[^\n]*", "", text)
    text = re.sub(r",\s*([}\]])", r"\1", text)
    starts = [i for i in (text.find("["), text.find("{")) if i >= 0]
    if not starts:
        return text
    text = text[min(starts) :]

    depth = 0
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
            if depth == 0:
                return text[: i + 1]

    logger.warning("JSON appears truncated, finding last complete element")
    closer = "\n]" if text.startswith("[") else "\n]}"
    last_brace = text.rfind("}")
    if last_brace > 0:
        return re.sub(r",\s*$", "", text[: last_brace + 1]) + closer
    return text


def _load_json(raw_text: str) -> Any:
    cleaned = strip_markdown_fences(raw_text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("Initial JSON parse failed, attempting repair")
    try:
        return json.loads(repair_json(cleaned))
    except json.JSONDecodeError as exc:
        logger.error("JSON repair also failed. Raw response:\n%s", raw_text[:2000])
        raise UnparseableResponse(
            f"Failed to parse response as JSON: {exc}"
        ) from exc


def _unwrap_step_list(data: Any) -> list[Any]:
    """JSON-mode providers must answer with an object, so accept {"steps": [...]}."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in _STEP_LIST_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    raise UnparseableResponse(f"Expected JSON array of steps, got {type(data).__name__}")


def parse_steps(raw_text: str) -> list[Step]:
    """Parse the raw response into Steps. An empty array is a valid answer."""
    items = _unwrap_step_list(_load_json(raw_text))
    try:
        return [Step.model_validate(item) for item in items]
    except ValidationError as exc:
        raise UnparseableResponse(f"Malformed step record: {exc}") from exc
