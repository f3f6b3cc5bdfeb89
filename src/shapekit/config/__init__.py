"""Settings schema and loader."""

from shapekit.config.loader import DEFAULT_PYPROJECT, env_name_for, load_settings
from shapekit.config.schema import (
    LOG_FORMATS,
    LOG_LEVELS,
    SETTINGS_SHAPE,
    SettingsError,
    SettingsIssue,
    ShapekitSettings,
    default_settings,
    validate_settings,
)

__all__ = [
    "DEFAULT_PYPROJECT",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "SETTINGS_SHAPE",
    "SettingsError",
    "SettingsIssue",
    "ShapekitSettings",
    "default_settings",
    "env_name_for",
    "load_settings",
    "validate_settings",
]
