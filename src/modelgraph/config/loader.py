"""
modelgraph: settings loader.

Purpose
- Load effective engine defaults from built-in values, a TOML file, env vars,
  and caller overrides.

Precedence
- overrides > env (``MODELGRAPH_``) > ``[modelgraph]`` table of the TOML file
  > defaults.
- An explicitly named file must exist; the implicit ``modelgraph.toml`` in
  the working directory is optional.

The loaded ``ModelgraphSettings`` only takes effect through the option records
it builds; see ``modelgraph.config.schema``.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from modelgraph.config.schema import (
    SETTING_KINDS,
    ModelgraphSettings,
    ValueKind,
    default_settings,
    validate_settings,
)
from modelgraph.constants import CONFIG_TABLE, DEFAULT_CONFIG_FILE, ENV_PREFIX
from modelgraph.errors import ConfigLoadError

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


def load_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> ModelgraphSettings:
    """Load effective settings with precedence: overrides > env > file > defaults."""

    resolved_path = _resolve_config_path(path)
    env_map = dict(os.environ if environ is None else environ)

    settings = default_settings()
    file_payload = _load_toml_file(resolved_path, required=path is not None)
    settings = validate_settings(_settings_table(file_payload, resolved_path), base=settings)
    settings = validate_settings(_collect_env_overrides(env_map), base=settings)
    return validate_settings(dict(overrides or {}), base=settings)


def env_name_for(key: str) -> str:
    return ENV_PREFIX + key.upper()


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc

    return parsed


def _settings_table(payload: Mapping[str, Any], path: Path) -> Mapping[str, object]:
    table = payload.get(CONFIG_TABLE, {})
    if not isinstance(table, Mapping):
        raise ConfigLoadError(f"[{CONFIG_TABLE}] in {path} must be a table")
    return table


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for key in sorted(SETTING_KINDS):
        env_name = env_name_for(key)
        raw = environ.get(env_name)
        if raw is None:
            continue
        overrides[key] = _coerce_env(raw, SETTING_KINDS[key], env_name, key)

    # Prefixed names that match no setting are rejected.
    known = {env_name_for(key) for key in SETTING_KINDS}
    unknown = sorted(name for name in environ if name.startswith(ENV_PREFIX) and name not in known)
    if unknown:
        raise ConfigLoadError(f"unknown settings environment variables: {', '.join(unknown)}")

    return overrides


def _coerce_env(raw: str, value_type: ValueKind, env_name: str, key: str) -> object:
    value = raw.strip()
    if value_type == "level":
        return value
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{env_name} -> {key} must be an integer") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ConfigLoadError(f"{env_name} -> {key} must be a boolean (true/false/1/0/yes/no/on/off)")


__all__ = ["ConfigLoadError", "env_name_for", "load_settings"]
