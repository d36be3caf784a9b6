"""Settings loading and validation."""

from modelgraph.config.loader import ConfigLoadError, env_name_for, load_settings
from modelgraph.config.schema import (
    SETTING_KINDS,
    ConfigValidationError,
    ConfigValidationIssue,
    ModelgraphSettings,
    default_settings,
    validate_settings,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ModelgraphSettings",
    "SETTING_KINDS",
    "default_settings",
    "env_name_for",
    "load_settings",
    "validate_settings",
]
