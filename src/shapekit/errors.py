"""
shapekit — structured validation errors.

File: src/shapekit/errors.py
Last updated: 2026-10-18

Purpose
- Define the single failure type raised or returned by every shape.

What should be included in this file
- Stable built-in error codes.
- ``ShapeError`` with path, offending value, originating shape, nested details.
- Aggregation rule shared by composite shapes (one error raised directly,
  several wrapped).
- Deterministic JSON-safe serialization with value redaction.

Non-functional requirements
- Errors are plain values: no shape keeps a reference to an error it produced.
"""

from __future__ import annotations

import math
import re
from collections.abc import Hashable, Iterator, Mapping, Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from shapekit.constants import MISSING

if TYPE_CHECKING:
    from shapekit.shapes.base import Shape

PathSegment = Hashable
Path = tuple[PathSegment, ...]

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

REDACTED_VALUE: Final[str] = "***REDACTED***"

SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "passwd",
    "passphrase",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "cookie",
    "private_key",
    "client_secret",
)

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class ErrorCode(StrEnum):
    # presence
    REQUIRED = "REQUIRED"
    NOT_NULLABLE = "NOT_NULLABLE"
    # type
    NOT_STRING = "NOT_STRING"
    NOT_NUMBER = "NOT_NUMBER"
    NOT_BOOLEAN = "NOT_BOOLEAN"
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
    NOT_OBJECT = "NOT_OBJECT"
    NOT_ARRAY = "NOT_ARRAY"
    INVALID_LITERAL = "INVALID_LITERAL"
    # structural
    MULTIPLE_ERRORS = "MULTIPLE_ERRORS"
    NO_MATCHING_UNION_MEMBER = "NO_MATCHING_UNION_MEMBER"
    # operation chain
    VALIDATION_ERROR = "VALIDATION_ERROR"
    ASYNC_VALIDATION_ERROR = "ASYNC_VALIDATION_ERROR"
    TRANSFORM_ERROR = "TRANSFORM_ERROR"
    ASYNC_TRANSFORM_ERROR = "ASYNC_TRANSFORM_ERROR"
    # contract violations
    SYNC_ASYNC_MISMATCH = "SYNC_ASYNC_MISMATCH"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ShapeError(Exception):
    """Validation failure located at ``path`` inside the parsed value."""

    def __init__(
        self,
        *,
        code: str,
        message: str,
        value: object = None,
        shape: Shape | None = None,
        path: Sequence[PathSegment] = (),
        details: Sequence[ShapeError] = (),
        extra: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = str(code)
        self.message = message
        self.value = value
        self.shape = shape
        self.path: Path = tuple(path)
        self.details: tuple[ShapeError, ...] = tuple(details)
        self.extra: dict[str, object] = dict(extra or {})

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ShapeError(code={self.code!r}, path={self.path_text!r}, message={self.message!r})"

    @property
    def kind(self) -> str | None:
        """Kind of the shape that produced the error, if known."""

        return None if self.shape is None else self.shape.kind

    @property
    def path_text(self) -> str:
        return format_path(self.path)

    @property
    def is_aggregate(self) -> bool:
        return bool(self.details)

    def flatten(self) -> Iterator[ShapeError]:
        """Yield leaf errors depth-first, in declaration order."""

        if not self.details:
            yield self
            return
        for detail in self.details:
            yield from detail.flatten()

    def with_prefix(self, prefix: Sequence[PathSegment]) -> ShapeError:
        """Return a copy re-rooted under ``prefix``; details are re-rooted too."""

        if not prefix:
            return self
        rooted = ShapeError(
            code=self.code,
            message=self.message,
            value=self.value,
            shape=self.shape,
            path=(*prefix, *self.path),
            details=tuple(detail.with_prefix(prefix) for detail in self.details),
            extra=self.extra,
        )
        rooted.__cause__ = self.__cause__
        return rooted

    def to_dict(
        self,
        *,
        redact: bool = True,
        sensitive_keys: Sequence[str] = (),
    ) -> dict[str, JSONValue]:
        """Return a deterministic JSON-safe record of the error tree."""

        redact_value = redact and _path_is_sensitive(self.path, sensitive_keys)
        record: dict[str, JSONValue] = {
            "code": self.code,
            "message": self.message,
            "path": list(self.path),
            "kind": self.kind,
            "value": REDACTED_VALUE if redact_value else _to_json_value(self.value),
            "extra": _to_json_mapping(self.extra),
        }
        if self.details:
            record["details"] = [
                detail.to_dict(redact=redact, sensitive_keys=sensitive_keys)
                for detail in self.details
            ]
        return record


def aggregate_errors(
    errors: Sequence[ShapeError],
    *,
    value: object,
    shape: Shape | None,
    path: Sequence[PathSegment],
    code: str = ErrorCode.MULTIPLE_ERRORS,
    message: str = "Multiple validation errors",
) -> ShapeError:
    """Apply the one-or-many rule: a single error passes through unchanged."""

    if not errors:
        raise ValueError("aggregate_errors requires at least one error")
    if len(errors) == 1:
        return errors[0]
    return ShapeError(
        code=code,
        message=message,
        value=value,
        shape=shape,
        path=path,
        details=errors,
        extra={"count": len(errors)},
    )


def format_path(path: Sequence[PathSegment]) -> str:
    """Render ``("users", 0, "age")`` as ``users[0].age``."""

    rendered = ""
    for segment in path:
        if isinstance(segment, int) and not isinstance(segment, bool):
            rendered += f"[{segment}]"
        elif not rendered:
            rendered = str(segment)
        else:
            rendered += f".{segment}"
    return rendered


def is_sensitive_key(key: str, extra_terms: Sequence[str] = ()) -> bool:
    normalized = _normalize_key(key)
    if not normalized:
        return False
    terms = (*SENSITIVE_KEY_TERMS, *(term.lower() for term in extra_terms))
    return any(term in normalized for term in terms)


def _path_is_sensitive(path: Sequence[PathSegment], extra_terms: Sequence[str]) -> bool:
    return any(
        isinstance(segment, str) and is_sensitive_key(segment, extra_terms) for segment in path
    )


def _normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


def json_safe(value: object) -> JSONValue:
    """Render ``value`` (shapes and errors included) as JSON-compatible data."""

    return _to_json_value(value)


def _to_json_mapping(value: Mapping[str, object]) -> dict[str, JSONValue]:
    return {str(key): _to_json_value(item) for key, item in sorted(value.items())}


def _to_json_value(value: object) -> JSONValue:
    if value is None or value is MISSING:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, ShapeError):
        return value.to_dict()
    if isinstance(value, BaseException):
        return repr(value)
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, Mapping):
        return {str(key): _to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_to_json_value(item) for item in value), key=repr)
    describe = getattr(value, "describe", None)
    if callable(describe):
        return _to_json_value(describe())
    return repr(value)


__all__ = [
    "REDACTED_VALUE",
    "SENSITIVE_KEY_TERMS",
    "ErrorCode",
    "JSONValue",
    "Path",
    "PathSegment",
    "ShapeError",
    "aggregate_errors",
    "format_path",
    "is_sensitive_key",
    "json_safe",
]
