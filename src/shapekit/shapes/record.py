"""
shapekit — record shape.

File: src/shapekit/shapes/record.py
Last updated: 2026-10-18

Purpose
- Validate mappings with arbitrary keys: one shape for every key, one member
  for every value.

Functional requirements
- Key and value are validated independently; both failures are collected.
- Property refinements run on the validated result.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Self, Unpack

from shapekit.constants import MISSING
from shapekit.errors import ErrorCode, Path, ShapeError, aggregate_errors
from shapekit.shapes.base import (
    Member,
    ParseResult,
    Shape,
    ensure_member,
    member_default,
    run_member,
    run_member_async,
)
from shapekit.shapes.operations import ErrorOverrides


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class RecordShape(Shape):
    kind: ClassVar[str] = "record"

    key_shape: Shape = field(kw_only=False)
    value_shape: Member = field(kw_only=False)

    def __post_init__(self) -> None:
        if not isinstance(self.key_shape, Shape):
            raise TypeError(f"record key must be a Shape, got {type(self.key_shape).__name__}")
        ensure_member(self.value_shape, where="record value")

    def _check(self, value: object, path: Path) -> ParseResult:
        if not isinstance(value, Mapping):
            return ParseResult.fail(self._not_object(value, path))
        result: dict[Any, object] = {}
        errors: list[ShapeError] = []
        for key, item in value.items():
            entry_path = (*path, key)
            key_outcome = self.key_shape._run(key, entry_path)
            value_outcome = run_member(self.value_shape, item, entry_path, self)
            self._collect(key_outcome, value_outcome, result, errors)
        return self._finish(result, errors, value, path)

    async def _check_async(self, value: object, path: Path) -> ParseResult:
        if not isinstance(value, Mapping):
            return ParseResult.fail(self._not_object(value, path))
        result: dict[Any, object] = {}
        errors: list[ShapeError] = []
        for key, item in value.items():
            entry_path = (*path, key)
            key_outcome = await self.key_shape._run_async(key, entry_path)
            value_outcome = await run_member_async(self.value_shape, item, entry_path, self)
            self._collect(key_outcome, value_outcome, result, errors)
        return self._finish(result, errors, value, path)

    @staticmethod
    def _collect(
        key_outcome: ParseResult,
        value_outcome: ParseResult,
        result: dict[Any, object],
        errors: list[ShapeError],
    ) -> None:
        if not key_outcome.success:
            errors.append(key_outcome.error)
        if not value_outcome.success:
            errors.append(value_outcome.error)
        if key_outcome.success and value_outcome.success and value_outcome.data is not MISSING:
            result[key_outcome.data] = value_outcome.data

    def _finish(
        self, result: dict[Any, object], errors: list[ShapeError], value: object, path: Path
    ) -> ParseResult:
        if errors:
            return ParseResult.fail(aggregate_errors(errors, value=value, shape=self, path=path))
        return ParseResult.ok(result)

    def _not_object(self, value: object, path: Path) -> ShapeError:
        return self._error(ErrorCode.NOT_OBJECT, "Expected an object", value, path)

    def _describe_fields(self) -> dict[str, object]:
        return {"key": self.key_shape.describe(), "value": self.value_shape.describe()}

    def defaults(self) -> dict[Any, object]:
        """Own default, else one entry built from the key and value defaults."""

        if isinstance(self.default_value, Mapping):
            return copy.deepcopy(dict(self.default_value))
        key_default = self.key_shape.default_value
        value_default = member_default(self.value_shape)
        if key_default is MISSING or value_default is MISSING:
            return {}
        return copy.deepcopy({key_default: value_default})

    def default_snapshot(self) -> object:
        if self.default_value is not MISSING:
            return self.default_value
        if self.is_optional:
            return MISSING
        return self.defaults() or MISSING

    # ------------------------------------------------------------------
    # Refinements over the validated result
    # ------------------------------------------------------------------

    def min_properties(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: len(result) >= count,
            overrides,
            code="TOO_FEW_PROPERTIES",
            message=f"Record must have at least {count} properties",
            extra={"min": count},
        )

    def max_properties(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: len(result) <= count,
            overrides,
            code="TOO_MANY_PROPERTIES",
            message=f"Record must have at most {count} properties",
            extra={"max": count},
        )

    def exact_properties(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: len(result) == count,
            overrides,
            code="INVALID_PROPERTY_COUNT",
            message=f"Record must have exactly {count} properties",
            extra={"count": count},
        )

    def non_empty(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.min_properties(1, **overrides)

    def has_property(self, key: object, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: key in result,
            overrides,
            code="MISSING_PROPERTY",
            message=f'Record must have property "{key}"',
            extra={"property": key},
        )

    def forbidden_property(self, key: object, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: key not in result,
            overrides,
            code="FORBIDDEN_PROPERTY",
            message=f'Record must not have property "{key}"',
            extra={"property": key},
        )

    def property_value(
        self,
        key: object,
        predicate: Callable[[Any], object],
        **overrides: Unpack[ErrorOverrides],
    ) -> Self:
        return self._constraint(
            lambda result: key in result and bool(predicate(result[key])),
            overrides,
            code="INVALID_PROPERTY_VALUE",
            message=f'Property "{key}" is invalid',
            extra={"property": key},
        )

    def property_shape(
        self, key: str | int, shape: Shape, **overrides: Unpack[ErrorOverrides]
    ) -> Self:
        """Require ``key`` and validate its value with ``shape``.

        A failure of ``shape`` itself is reported as-is, re-rooted under ``key``.
        """

        def matches(result: Mapping[Any, object]) -> bool:
            if key not in result:
                return False
            outcome = shape.safe_parse(result[key])
            if outcome.error is not None:
                raise outcome.error.with_prefix((key,))
            return True

        return self._constraint(
            matches,
            overrides,
            code="INVALID_PROPERTY_SHAPE",
            message=f'Property "{key}" has invalid shape',
            extra={"property": key},
        )

    def property_names(
        self, predicate: Callable[[Any], object], **overrides: Unpack[ErrorOverrides]
    ) -> Self:
        return self._constraint(
            lambda result: all(predicate(key) for key in result),
            overrides,
            code="INVALID_PROPERTY_NAMES",
            message="Some property names are invalid",
        )

    def property_values(
        self, predicate: Callable[[Any], object], **overrides: Unpack[ErrorOverrides]
    ) -> Self:
        return self._constraint(
            lambda result: all(predicate(item) for item in result.values()),
            overrides,
            code="INVALID_PROPERTY_VALUES",
            message="Some property values are invalid",
        )

    def exact_properties_shape(
        self, shapes: Mapping[Any, Shape], **overrides: Unpack[ErrorOverrides]
    ) -> Self:
        required = dict(shapes)

        def matches(result: Mapping[Any, object]) -> bool:
            if set(result) != set(required):
                return False
            return all(required[key].safe_parse(item).success for key, item in result.items())

        return self._constraint(
            matches,
            overrides,
            code="INVALID_RECORD_SHAPE",
            message="Record shape does not match required structure",
            extra={"required_keys": sorted(map(str, required))},
        )


__all__ = ["RecordShape"]
