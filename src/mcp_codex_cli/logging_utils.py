"""Runtime logging helpers."""

from __future__ import annotations

import os
import sys

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
_CONFIGURED_LEVEL: str | None = None


def _stderr_sink(message: str) -> None:
    sys.stderr.write(message)


def configure_logging(level: str | None = None) -> None:
    """Configure process-level logging once.

    Logs always go to stderr: stdout carries the MCP JSON-RPC stream.
    """
    global _CONFIGURED_LEVEL

    resolved = (level or os.getenv("MCP_CODEX_LOG_LEVEL", "INFO")).upper()
    if resolved == _CONFIGURED_LEVEL:
        return

    logger.remove()
    logger.add(
        _stderr_sink,
        level=resolved,
        format=_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    _CONFIGURED_LEVEL = resolved
