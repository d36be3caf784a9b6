"""Stable constants shared across the model engines."""

from __future__ import annotations

from typing import Final

# Association traversal depth used when callers do not pass one.
DEFAULT_DEPTH: Final[int] = 1

# Validation issue kinds.
REQUIRED_ERROR_KIND: Final[str] = "attribute.required"
REQUIRED_ERROR_MESSAGE: Final[str] = "Value is required"
TYPE_ERROR_KIND: Final[str] = "attribute.type"
UNKNOWN_ERROR_KIND: Final[str] = "unknown"
VALIDATION_ERROR_MESSAGE: Final[str] = "Validation error"

# Settings discovery.
DEFAULT_CONFIG_FILE: Final[str] = "modelgraph.toml"
CONFIG_TABLE: Final[str] = "modelgraph"
ENV_PREFIX: Final[str] = "MODELGRAPH_"

# Root logger name for library log records.
LOGGER_NAME: Final[str] = "modelgraph"

__all__ = [
    "CONFIG_TABLE",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_DEPTH",
    "ENV_PREFIX",
    "LOGGER_NAME",
    "REQUIRED_ERROR_KIND",
    "REQUIRED_ERROR_MESSAGE",
    "TYPE_ERROR_KIND",
    "UNKNOWN_ERROR_KIND",
    "VALIDATION_ERROR_MESSAGE",
]
