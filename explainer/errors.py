"""Failure taxonomy for calls to external services."""

from __future__ import annotations

import asyncio
from enum import Enum

import httpx


class TransientServiceError(Exception):
    """A retryable failure: timeout, connection error or non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnparseableResponse(Exception):
    """The service answered, but not with a well-formed step array."""

    pass


class FailureReason(str, Enum):
    EXHAUSTED = "exhausted"
    UNPARSEABLE = "unparseable"


TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    TransientServiceError,
    TimeoutError,
    asyncio.TimeoutError,
    ConnectionError,
    httpx.TransportError,
)


def is_transient(exc: BaseException) -> bool:
    """True if *exc* should trigger another attempt."""
    return isinstance(exc, TRANSIENT_ERRORS)
