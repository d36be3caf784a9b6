"""
modelgraph: structured logging setup.

Purpose
- Route the engines' structlog events through stdlib ``logging`` under the
  ``modelgraph`` logger, rendered as sorted JSON lines or console text.

Nothing here runs at import time; applications opt in by calling
``configure_logging``.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import TYPE_CHECKING, Final, TextIO

import structlog

from modelgraph.constants import LOGGER_NAME

if TYPE_CHECKING:
    from modelgraph.config.schema import ModelgraphSettings

_HANDLER_LOCK: Final[threading.Lock] = threading.Lock()
_ACTIVE_HANDLER: logging.Handler | None = None


def configure_logging(
    level: int | str = "INFO",
    *,
    json_lines: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure structlog on top of stdlib logging and return the package logger.

    Calling again replaces the handler installed by the previous call.
    """

    global _ACTIVE_HANDLER

    parsed_level = _parse_log_level(level)
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_lines:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        # The console renderer formats exceptions itself.
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    with _HANDLER_LOCK:
        if _ACTIVE_HANDLER is not None:
            logger.removeHandler(_ACTIVE_HANDLER)
        logger.addHandler(handler)
        _ACTIVE_HANDLER = handler
    logger.setLevel(parsed_level)
    logger.propagate = False
    return logger


def configure_from_settings(
    settings: ModelgraphSettings,
    *,
    json_lines: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    return configure_logging(settings.log_level, json_lines=json_lines, stream=stream)


def reset_logging() -> None:
    """Undo ``configure_logging``: drop the handler and restore structlog defaults."""

    global _ACTIVE_HANDLER

    logger = logging.getLogger(LOGGER_NAME)
    with _HANDLER_LOCK:
        if _ACTIVE_HANDLER is not None:
            logger.removeHandler(_ACTIVE_HANDLER)
            _ACTIVE_HANDLER = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    structlog.reset_defaults()


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


__all__ = ["configure_from_settings", "configure_logging", "reset_logging"]
