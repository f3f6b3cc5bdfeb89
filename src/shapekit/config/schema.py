"""
shapekit — settings schema.

File: src/shapekit/config/schema.py
Last updated: 2026-10-18

Purpose
- Define the library/CLI settings, their defaults and the shape that
  validates a raw settings document.

What should be included in this file
- ``ShapekitSettings`` typed view of effective settings.
- ``SETTINGS_SHAPE`` built from shapekit's own shapes; coercing members accept
  the string values environment variables carry.
- ``SettingsError`` rendering ``path: message`` lines.

Functional requirements
- Unknown keys are rejected rather than stripped.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal

from shapekit.errors import ShapeError
from shapekit.shapes.array import ArrayShape
from shapekit.shapes.boolean import BooleanShape
from shapekit.shapes.number import NumberShape
from shapekit.shapes.object import ObjectShape
from shapekit.shapes.string import StringShape
from shapekit.shapes.union import UnionShape

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

_FLAG_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FLAG_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

LogFormat = Literal["json", "text"]


@dataclass(frozen=True, slots=True)
class SettingsIssue:
    path: str
    message: str
    code: str


class SettingsError(ValueError):
    """Raised when a settings document fails validation or cannot be loaded."""

    def __init__(self, issues: Sequence[SettingsIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path or '<root>'}: {item.message}" for item in self.issues)
        super().__init__(f"invalid settings:\n{rendered}")

    @classmethod
    def from_shape_error(cls, error: ShapeError) -> SettingsError:
        return cls(
            [
                SettingsIssue(path=leaf.path_text, message=leaf.message, code=leaf.code)
                for leaf in error.flatten()
            ]
        )

    @classmethod
    def single(cls, path: str, message: str, code: str = "INVALID_SETTINGS") -> SettingsError:
        return cls([SettingsIssue(path=path, message=message, code=code)])


@dataclass(frozen=True, slots=True)
class ShapekitSettings:
    log_level: str = "WARNING"
    log_format: LogFormat = "text"
    redact_values: bool = True
    sensitive_keys: tuple[str, ...] = ()
    max_union_details: int = 10

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> ShapekitSettings:
        return cls(
            log_level=document["log_level"],
            log_format=document["log_format"],
            redact_values=document["redact_values"],
            sensitive_keys=tuple(document["sensitive_keys"]),
            max_union_details=int(document["max_union_details"]),
        )


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _flag_shape() -> UnionShape:
    words = StringShape().transform(lambda raw: raw.strip().lower())
    words = words.one_of(sorted(_FLAG_TRUE | _FLAG_FALSE), code="INVALID_FLAG")
    return UnionShape((BooleanShape(), words.transform(lambda word: word in _FLAG_TRUE)))


SETTINGS_SHAPE: Final[ObjectShape] = ObjectShape(
    {
        "log_level": StringShape()
        .coerce()
        .transform(lambda raw: raw.strip().upper())
        .one_of(LOG_LEVELS, code="INVALID_LOG_LEVEL")
        .default("WARNING"),
        "log_format": StringShape()
        .coerce()
        .transform(lambda raw: raw.strip().lower())
        .one_of(LOG_FORMATS, code="INVALID_LOG_FORMAT")
        .default("text"),
        "redact_values": _flag_shape().default(True),
        "sensitive_keys": UnionShape(
            (
                ArrayShape(StringShape().not_empty()),
                StringShape().transform(_split_csv),
            )
        ).default([]),
        "max_union_details": NumberShape().coerce().int().min(1).default(10),
    }
).commit("shapekit settings ([tool.shapekit] / SHAPEKIT_* environment)")

SETTING_NAMES: Final[tuple[str, ...]] = SETTINGS_SHAPE.keys()


def validate_settings(document: Mapping[str, object]) -> ShapekitSettings:
    """Validate a raw settings document and return the typed settings."""

    unknown = sorted(str(key) for key in document if key not in SETTING_NAMES)
    if unknown:
        raise SettingsError(
            [
                SettingsIssue(path=key, message="unknown setting", code="UNKNOWN_SETTING")
                for key in unknown
            ]
        )
    outcome = SETTINGS_SHAPE.safe_parse(document)
    if outcome.error is not None:
        raise SettingsError.from_shape_error(outcome.error)
    return ShapekitSettings.from_document(outcome.data)


def default_settings() -> ShapekitSettings:
    return validate_settings({})


__all__ = [
    "LOG_FORMATS",
    "LOG_LEVELS",
    "SETTINGS_SHAPE",
    "SETTING_NAMES",
    "SettingsError",
    "SettingsIssue",
    "ShapekitSettings",
    "default_settings",
    "validate_settings",
]
