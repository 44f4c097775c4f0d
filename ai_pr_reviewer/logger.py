from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger as _logger

_CONFIGURED = False
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logger(*, level: str = "INFO", log_dir: str | Path | None = None) -> None:
    """Configure the Loguru logger exactly once per process."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    _logger.remove()
    _logger.add(
        sys.stdout,
        level=level,
        format=LOG_FORMAT,
        colorize=sys.stdout.isatty(),
    )
    if log_dir is not None:
        target_dir = Path(log_dir).expanduser().resolve()
        target_dir.mkdir(parents=True, exist_ok=True)
        _logger.add(
            target_dir / "{time:YYYY-MM-DD}.log",
            rotation="50 MB",
            retention="10 days",
            level="DEBUG",
            format=LOG_FORMAT,
            backtrace=True,
            diagnose=False,
        )

    _CONFIGURED = True


def get_logger():
    """Return the shared logger; sinks are installed by ``configure_logger``."""

    return _logger


def log_with_context(logger_instance, **context: str | int | None) -> Any:
    """Add context fields to log messages.

    Usage:
        logger = log_with_context(get_logger(), repository="owner/repo", pull_number=7)
        logger.info("Fetching diff")
    """
    return logger_instance.bind(**{k: v for k, v in context.items() if v is not None})


def log_timing(logger_instance, operation: str, **context: str | int | None):
    """Context manager to log operation timing.

    Usage:
        with log_timing(logger, "fetch_diff", repository="owner/repo"):
            # operation code
    """
    @contextmanager
    def _timing():
        start_time = time.time()
        ctx_logger = log_with_context(logger_instance, **context)
        ctx_logger.debug(f"Starting {operation}")
        try:
            yield ctx_logger
            duration = time.time() - start_time
            ctx_logger.debug(f"Completed {operation} in {duration:.3f}s")
        except Exception as exc:
            duration = time.time() - start_time
            ctx_logger.error(f"Failed {operation} after {duration:.3f}s: {exc}")
            raise
    return _timing()


def log_success(logger_instance, message: str, **context: str | int | None) -> None:
    """Log a success message with context."""
    log_with_context(logger_instance, **context).info(f"=== SUCCESS: {message} ===")


def log_failure(logger_instance, message: str, error: Exception | None = None, **context: str | int | None) -> None:
    """Log a failure message with context and optional error."""
    ctx_logger = log_with_context(logger_instance, **context)
    if error:
        ctx_logger.error(f"=== FAILURE: {message} | Error: {error} ===")
    else:
        ctx_logger.error(f"=== FAILURE: {message} ===")
