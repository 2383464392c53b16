"""Bounded retry with exponential backoff for a single logical call."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from . import constants
from .errors import FailureReason, is_transient

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = constants.DEFAULT_MAX_ATTEMPTS
    base_delay: float = constants.DEFAULT_BASE_DELAY_SECONDS

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")


def calculate_delay(attempt: int, policy: RetryPolicy) -> float:
    """Delay before issuing *attempt* (1-based). The first attempt is immediate."""
    if attempt <= 1:
        return 0.0
    return policy.base_delay * (2**attempt)


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Terminal outcome of one logical call.

    ``value`` is set on success; ``failure`` is set once all attempts
    are spent. ``attempts`` counts every attempt actually issued.
    """

    value: T | None = None
    failure: FailureReason | None = None
    attempts: int = 0
    last_error: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None


class BackoffRequestClient:
    """Runs an async operation, retrying transient failures.

    The client holds no state between calls: every ``execute`` starts
    again at attempt 1. Exceptions that are not transient propagate.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        on_attempt: Callable[[int], None] | None = None,
    ) -> CallResult[T]:
        last_error = ""
        for attempt in range(1, self._policy.max_attempts + 1):
            delay = calculate_delay(attempt, self._policy)
            if delay:
                logger.debug(
                    "Waiting %.2fs before attempt %d/%d",
                    delay,
                    attempt,
                    self._policy.max_attempts,
                )
                await self._sleep(delay)
            if on_attempt:
                on_attempt(attempt)
            try:
                value = await operation()
            except Exception as exc:
                if not is_transient(exc):
                    raise
                last_error = str(exc) or type(exc).__name__
                if attempt < self._policy.max_attempts:
                    logger.warning(
                        "Attempt %d/%d failed, retrying: %s",
                        attempt,
                        self._policy.max_attempts,
                        last_error,
                    )
                continue
            return CallResult(value=value, attempts=attempt)

        logger.error(
            "All %d attempts failed: %s", self._policy.max_attempts, last_error
        )
        return CallResult(
            failure=FailureReason.EXHAUSTED,
            attempts=self._policy.max_attempts,
            last_error=last_error,
        )
