"""Command-line front end: explain a file once, or watch it live."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from . import constants
from .api import build_session, explain_source, format_steps
from .errors import FailureReason
from .execution import ExecutionProxyClient, ExecutionStatusGate
from .languages import get_language, language_for_path
from .session_types import AnimatorState, ExplainerConfig, Frame
from .step_types import SourceSnapshot

logger = logging.getLogger(__name__)

DEMO_SOURCE = """\
def factorial(n):
    if n <= 1:
        return 1
    return n * factorial(n - 1)

result = factorial(4)
print(result)
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Live step-by-step code explainer")
    parser.add_argument("file", nargs="?", help="Source file to explain")
    parser.add_argument(
        "--language", "-l", default="", help="Source language (default: from extension)"
    )
    parser.add_argument(
        "--provider",
        "-p",
        default=constants.PROVIDER_CLAUDE,
        choices=[
            constants.PROVIDER_CLAUDE,
            constants.PROVIDER_OPENAI,
            constants.PROVIDER_OLLAMA,
        ],
        help="LLM provider (default: claude)",
    )
    parser.add_argument("--model", "-m", default="", help="Model name override")
    parser.add_argument(
        "--watch",
        "-w",
        action="store_true",
        help="Re-explain on every save and animate through the steps",
    )
    parser.add_argument(
        "--poll",
        type=float,
        default=0.5,
        help="File polling interval in seconds for --watch (default: 0.5)",
    )
    parser.add_argument(
        "--quiescence",
        type=float,
        default=constants.DEFAULT_QUIESCENCE_SECONDS,
        help="Idle time after the last change before analyzing",
    )
    parser.add_argument(
        "--tick",
        type=float,
        default=constants.DEFAULT_TICK_SECONDS,
        help="Seconds per animated step",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=constants.DEFAULT_MAX_ATTEMPTS,
        help="Attempts per analysis before giving up",
    )
    parser.add_argument(
        "--base-delay",
        type=float,
        default=constants.DEFAULT_BASE_DELAY_SECONDS,
        help="Backoff unit in seconds",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=constants.DEFAULT_REQUEST_TIMEOUT_SECONDS,
        help="Per-attempt request timeout in seconds",
    )
    parser.add_argument(
        "--run-url",
        default="",
        help="Execution proxy base URL; when set the file is run first",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress")
    return parser


def _config_from_args(args: argparse.Namespace) -> ExplainerConfig:
    return ExplainerConfig(
        quiescence=args.quiescence,
        tick_interval=args.tick,
        max_attempts=args.max_attempts,
        base_delay=args.base_delay,
        request_timeout=args.timeout,
        provider=args.provider,
        model=args.model,
    )


def _resolve_language(args: argparse.Namespace) -> str:
    if args.language:
        return get_language(args.language).id
    if args.file:
        guessed = language_for_path(args.file)
        if guessed:
            return guessed.id
    return "python" if not args.file else constants.DEFAULT_LANGUAGE


def _read(path: str) -> str:
    with open(path) as f:
        return f.read()


def _print_frame(frame: Frame) -> None:
    if frame.state == AnimatorState.IDLE or frame.step is None:
        print("── (no steps) ──")
        return
    marker = " (paused)" if frame.state == AnimatorState.PAUSED else ""
    print(f"── step {frame.index + 1}/{frame.total}{marker} ──")
    print(f"  {frame.step}")


async def _run_program(url: str, snapshot: SourceSnapshot, gate: ExecutionStatusGate):
    result = await ExecutionProxyClient(url, gate).run(snapshot)
    print("═══ Output ═══")
    print(result.error if result.error else result.output)


async def _explain_once(args: argparse.Namespace, source: str, language: str) -> int:
    if args.run_url:
        await _run_program(
            args.run_url, SourceSnapshot(source, language), ExecutionStatusGate()
        )
    outcome = await explain_source(source, language, config=_config_from_args(args))
    if outcome.failure == FailureReason.EXHAUSTED:
        print(constants.ANALYSIS_UNAVAILABLE_MESSAGE, file=sys.stderr)
        return 1
    print(f"═══ Steps ({len(outcome.steps)}) ═══")
    print(format_steps(outcome.steps) if outcome.steps else "  (nothing to visualize)")
    return 0


def _poll_file(path: str, last_mtime: float | None) -> tuple[float | None, str | None]:
    """Return the new mtime and contents if *path* changed since *last_mtime*.

    Editors that save atomically briefly remove the file; such polls report
    no change.
    """
    try:
        mtime = os.stat(path).st_mtime
        if mtime == last_mtime:
            return last_mtime, None
        return mtime, _read(path)
    except FileNotFoundError:
        logger.debug("%s missing, skipping poll", path)
        return last_mtime, None


async def _watch(args: argparse.Namespace, language: str) -> int:
    session = build_session(
        _config_from_args(args), listener=_print_frame, language=language
    )
    session.start()
    last_mtime = None
    try:
        while True:
            last_mtime, code = _poll_file(args.file, last_mtime)
            if code is not None:
                logger.info("%s changed (%d chars)", args.file, len(code))
                session.on_edit(code)
                if args.run_url:
                    await _run_program(
                        args.run_url, SourceSnapshot(code, language), session.gate
                    )
            await asyncio.sleep(args.poll)
    finally:
        await session.close()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    language = _resolve_language(args)

    if args.watch:
        if not args.file:
            print("--watch needs a file", file=sys.stderr)
            return 2
        try:
            return asyncio.run(_watch(args, language))
        except KeyboardInterrupt:
            return 0

    if not args.file:
        source = DEMO_SOURCE
        print("No file provided. Using built-in demo:\n")
        print(source)
    else:
        source = _read(args.file)
    return asyncio.run(_explain_once(args, source, language))


if __name__ == "__main__":
    sys.exit(main())
