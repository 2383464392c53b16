"""Execution status gate and the one-shot run-code proxy that drives it."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import httpx

from . import constants
from .step_types import SourceSnapshot

logger = logging.getLogger(__name__)


class ExecutionStatusGate:
    """Shared "code is executing" flag.

    Written only by the run-code flow; everything else reads ``running``.
    """

    def __init__(self):
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def begin(self) -> None:
        self._running = True
        logger.info("Execution started")

    def end(self) -> None:
        self._running = False
        logger.info("Execution finished")

    @contextmanager
    def executing(self) -> Iterator[None]:
        self.begin()
        try:
            yield
        finally:
            self.end()


@dataclass(frozen=True)
class RunResult:
    output: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


def normalize_line_endings(code: str) -> str:
    return code.replace("\r\n", "\n").replace("\r", "\n")


class ExecutionProxyClient:
    """Posts ``{language, code}`` to ``<base_url>/run`` and reports the output.

    The gate is held for the whole request, whatever the outcome.
    """

    def __init__(
        self,
        base_url: str,
        gate: ExecutionStatusGate,
        client: httpx.AsyncClient | None = None,
        timeout: float = constants.DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ):
        self._url = base_url.rstrip("/") + constants.RUN_ENDPOINT
        self._gate = gate
        self._client = client
        self._timeout = timeout

    async def run(self, snapshot: SourceSnapshot) -> RunResult:
        payload = {
            "language": snapshot.language,
            "code": normalize_line_endings(snapshot.code),
        }
        logger.info("Running %d chars of %s", len(payload["code"]), snapshot.language)
        with self._gate.executing():
            if self._client is not None:
                return await self._post(self._client, payload)
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await self._post(client, payload)

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> RunResult:
        try:
            response = await client.post(self._url, json=payload)
        except httpx.TransportError as exc:
            logger.warning("Run request failed: %s", exc)
            return RunResult(
                error=(
                    f"Failed to connect to backend: {exc}. "
                    "Please check if the server is running."
                )
            )
        if not response.is_success:
            logger.warning("Run request returned HTTP %d", response.status_code)
            return RunResult(error=f"HTTP error! Status: {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            return RunResult(error=f"Invalid response from backend: {exc}")
        if not isinstance(data, dict):
            return RunResult(error="Invalid response from backend: expected an object")
        if data.get("error"):
            return RunResult(error=f"Error: {data['error']}")
        return RunResult(output=str(data.get("output", "")))
