"""Loguru helpers for the jsoncall CLI."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from jsoncall.config.loader import get_log_dir

_SINK_IDS: dict[str, int] = {}

STDERR_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <level>{message}</level>"


def configure_logging(console_level: str | None, file_level: str | None = None, name: str = "call") -> None:
    """
    Route jsoncall logs for one CLI invocation.

    With neither level set, library logging stays disabled so stdout and stderr
    carry only the call result.
    """
    if console_level is None and file_level is None:
        logger.disable("jsoncall")
        return
    logger.remove()
    _SINK_IDS.clear()
    if console_level is not None:
        logger.add(sys.stderr, level=console_level, format=STDERR_FORMAT)
    if file_level is not None:
        ensure_rotating_log_file(name, level=file_level)
    logger.enable("jsoncall")


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_dir = get_log_dir()
    log_path = log_dir / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_dir.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path
