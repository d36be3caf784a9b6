"""Logging setup for applications embedding the model engines."""

from modelgraph.observability.logging import (
    configure_from_settings,
    configure_logging,
    reset_logging,
)

__all__ = ["configure_from_settings", "configure_logging", "reset_logging"]
