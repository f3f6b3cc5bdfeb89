"""
shapekit — settings loader.

File: src/shapekit/config/loader.py
Last updated: 2026-10-18

Purpose
- Load effective settings from defaults, ``[tool.shapekit]`` in a
  ``pyproject.toml``, ``SHAPEKIT_*`` environment variables and explicit
  overrides.

Functional requirements
- Precedence: overrides > env > file > defaults.
- An explicitly given pyproject path must exist; the implicit one may not.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from shapekit.config.schema import SETTING_NAMES, SettingsError, ShapekitSettings, validate_settings
from shapekit.constants import ENV_PREFIX, PYPROJECT_TABLE
from shapekit.observability.logging import get_logger

DEFAULT_PYPROJECT: Final[str] = "pyproject.toml"

_LOGGER = get_logger(__name__)


def load_settings(
    pyproject: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> ShapekitSettings:
    """Load effective settings with precedence overrides > env > file > defaults."""

    resolved_path = _resolve_pyproject_path(pyproject)
    env_map = os.environ if environ is None else environ

    document: dict[str, Any] = {}
    document.update(_load_tool_table(resolved_path, required=pyproject is not None))
    document.update(_collect_env_overrides(env_map))
    document.update({key: value for key, value in (overrides or {}).items() if value is not None})

    settings = validate_settings(document)
    _LOGGER.debug(
        "settings loaded",
        extra={"source": resolved_path.as_posix(), "keys": sorted(document)},
    )
    return settings


def env_name_for(setting: str) -> str:
    return ENV_PREFIX + setting.upper()


def _resolve_pyproject_path(pyproject: str | Path | None) -> Path:
    if pyproject is None:
        return (Path.cwd() / DEFAULT_PYPROJECT).resolve()
    return Path(pyproject).expanduser().resolve()


def _load_tool_table(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise SettingsError.single(str(path), "pyproject file not found", "FILE_NOT_FOUND")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError.single(str(path), f"invalid TOML: {exc}", "INVALID_TOML") from exc
    except OSError as exc:
        raise SettingsError.single(str(path), f"unable to read file: {exc}", "READ_ERROR") from exc

    table: object = parsed
    for part in PYPROJECT_TABLE:
        if not isinstance(table, Mapping):
            return {}
        table = table.get(part, {})
    if not isinstance(table, Mapping):
        raise SettingsError.single(".".join(PYPROJECT_TABLE), "must be a table", "NOT_OBJECT")
    return dict(table)


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    collected: dict[str, str] = {}
    for setting in SETTING_NAMES:
        raw = environ.get(env_name_for(setting))
        if raw is not None:
            collected[setting] = raw
    return collected


__all__ = ["DEFAULT_PYPROJECT", "env_name_for", "load_settings"]
