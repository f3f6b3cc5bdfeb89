"""
shapekit — array shape.

File: src/shapekit/shapes/array.py
Last updated: 2026-10-18

Purpose
- Validate list/tuple input element by element under index path segments.

Functional requirements
- Every element is validated even after one fails; element errors are
  aggregated with the one-or-many rule.
- Count and membership constraints run on the validated list.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar, Self, Unpack

from shapekit.errors import ErrorCode, Path, ShapeError, aggregate_errors
from shapekit.shapes.base import (
    Member,
    ParseResult,
    Shape,
    contains_strict,
    ensure_member,
    run_member,
    run_member_async,
)
from shapekit.shapes.operations import ErrorOverrides


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class ArrayShape(Shape):
    kind: ClassVar[str] = "array"

    element: Member = field(kw_only=False)

    def __post_init__(self) -> None:
        ensure_member(self.element, where="array element")

    def _check(self, value: object, path: Path) -> ParseResult:
        if not _is_array(value):
            return ParseResult.fail(self._not_array(value, path))
        items: list[object] = []
        errors: list[ShapeError] = []
        for index, item in enumerate(value):
            outcome = run_member(self.element, item, (*path, index), self)
            if outcome.success:
                items.append(outcome.data)
            else:
                errors.append(outcome.error)
        return self._finish(items, errors, value, path)

    async def _check_async(self, value: object, path: Path) -> ParseResult:
        if not _is_array(value):
            return ParseResult.fail(self._not_array(value, path))
        items: list[object] = []
        errors: list[ShapeError] = []
        for index, item in enumerate(value):
            outcome = await run_member_async(self.element, item, (*path, index), self)
            if outcome.success:
                items.append(outcome.data)
            else:
                errors.append(outcome.error)
        return self._finish(items, errors, value, path)

    def _finish(
        self, items: list[object], errors: list[ShapeError], value: object, path: Path
    ) -> ParseResult:
        if errors:
            return ParseResult.fail(aggregate_errors(errors, value=value, shape=self, path=path))
        return ParseResult.ok(items)

    def _not_array(self, value: object, path: Path) -> ShapeError:
        return self._error(ErrorCode.NOT_ARRAY, "Expected an array", value, path)

    def _describe_fields(self) -> dict[str, object]:
        return {"element": self.element.describe()}

    def min(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda items: len(items) >= count,
            overrides,
            code="ARRAY_TOO_SHORT",
            message=f"Array must contain at least {count} elements",
            extra={"min": count},
        )

    def max(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda items: len(items) <= count,
            overrides,
            code="ARRAY_TOO_LONG",
            message=f"Array must contain at most {count} elements",
            extra={"max": count},
        )

    def length(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda items: len(items) == count,
            overrides,
            code="INVALID_ARRAY_LENGTH",
            message=f"Array must contain exactly {count} elements",
            extra={"length": count},
        )

    def non_empty(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda items: len(items) > 0,
            overrides,
            code="EMPTY_ARRAY",
            message="Array must not be empty",
        )

    def unique(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda items: not has_duplicates(items),
            overrides,
            code="DUPLICATE_ITEMS",
            message="Array must contain unique elements",
        )

    def includes(self, element: object, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda items: contains_strict(items, element),
            overrides,
            code="MISSING_ELEMENT",
            message=f"Array must include {_render(element)}",
            extra={"element": element},
        )

    def excludes(self, element: object, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda items: not contains_strict(items, element),
            overrides,
            code="FORBIDDEN_ELEMENT",
            message=f"Array must not include {_render(element)}",
            extra={"element": element},
        )


def has_duplicates(items: Sequence[object]) -> bool:
    """Duplicate test that keeps ``True`` and ``1`` apart and tolerates unhashable items."""

    hashed: set[tuple[bool, object]] = set()
    unhashable: list[object] = []
    for item in items:
        key = (isinstance(item, bool), item)
        try:
            if key in hashed:
                return True
            hashed.add(key)
        except TypeError:
            if contains_strict(unhashable, item):
                return True
            unhashable.append(item)
    return False


def _is_array(value: object) -> bool:
    return isinstance(value, (list, tuple))


def _render(element: object) -> str:
    try:
        return json.dumps(element)
    except (TypeError, ValueError):
        return repr(element)


__all__ = ["ArrayShape", "has_duplicates"]
