"""Named constants — eliminates magic numbers and strings across the codebase."""

from __future__ import annotations

# Timing defaults (seconds)
DEFAULT_QUIESCENCE_SECONDS = 1.5
DEFAULT_TICK_SECONDS = 2.5
DEFAULT_BASE_DELAY_SECONDS = 1.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

DEFAULT_MAX_ATTEMPTS = 3

DEFAULT_LANGUAGE = "javascript"

PROVIDER_CLAUDE = "claude"
PROVIDER_OPENAI = "openai"
PROVIDER_OLLAMA = "ollama"

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_OLLAMA_MODEL = "qwen2.5-coder:7b-instruct"
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434/v1"

STEP_MAX_TOKENS = 4096
CHAT_MAX_TOKENS = 1024

ANALYSIS_UNAVAILABLE_MESSAGE = (
    "Analysis unavailable: the reasoning service could not be reached. "
    "The explanation will refresh on your next edit."
)
CHAT_UNAVAILABLE_MESSAGE = (
    "Sorry, the assistant is unavailable right now. Please try again shortly."
)

RUN_ENDPOINT = "/run"
