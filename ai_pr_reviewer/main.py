"""Command-line entry point for the review action."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import Mapping, Sequence

import httpx
from dotenv import load_dotenv

from ai_pr_reviewer.config import ConfigurationError, load_settings
from ai_pr_reviewer.http_client import TransportError
from ai_pr_reviewer.logger import configure_logger, get_logger, log_failure
from ai_pr_reviewer.orchestrator import ReviewRunner, RunResult, RunState

logger = get_logger()

SUCCESS_STATES = {RunState.DONE, RunState.NOT_APPLICABLE}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-pr-reviewer",
        description="Post an AI code review as a single, updated pull request comment",
    )
    parser.add_argument("--event-path", default=None, help="Path to GitHub event JSON (overrides GITHUB_EVENT_PATH)")
    parser.add_argument("--log-level", default=None, help="Log level (overrides APP_LOG_LEVEL)")
    return parser


def run(
    environ: Mapping[str, str],
    *,
    event_path: str | None = None,
    log_level: str | None = None,
    github_transport: httpx.AsyncBaseTransport | None = None,
    llm_transport: httpx.AsyncBaseTransport | None = None,
) -> RunResult:
    """Execute one review run and report its terminal state."""

    try:
        settings = load_settings(environ, event_path=event_path)
    except ConfigurationError as exc:
        log_failure(logger, "Invalid configuration", exc)
        return RunResult(state=RunState.CONFIG_INVALID)

    configure_logger(level=(log_level or settings.log_level).upper(), log_dir=settings.log_dir)

    runner = ReviewRunner(settings, github_transport=github_transport, llm_transport=llm_transport)
    try:
        return asyncio.run(runner())
    except ConfigurationError as exc:
        log_failure(logger, "Invalid configuration", exc)
        return RunResult(state=RunState.CONFIG_INVALID)
    except TransportError as exc:
        log_failure(logger, f"Action failed (status={exc.status_code})", exc)
        return RunResult(state=RunState.FAILED)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()

    try:
        result = run(os.environ, event_path=args.event_path, log_level=args.log_level)
    except Exception as exc:
        logger.exception(f"Action failed: {exc}")
        return 1
    return 0 if result.state in SUCCESS_STATES else 1


if __name__ == "__main__":
    sys.exit(main())
