"""
shapekit — object shape.

File: src/shapekit/shapes/object.py
Last updated: 2026-10-18

Purpose
- Validate mappings against a fixed set of named members.

What should be included in this file
- Default snapshot merging (child defaults, own default, input).
- Partial mode, unknown-key stripping.
- Object algebra: pick, omit, merge, extend, partial, deep_partial.
- Property refinements over the validated result.

Functional requirements
- Input wins over the object's own default, which wins over child defaults.
- Every property is validated even after one fails.
- Algebra operations keep flags, default, note and operation chain.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, ClassVar, Self, Unpack

from shapekit.constants import MISSING
from shapekit.errors import ErrorCode, Path, ShapeError, aggregate_errors
from shapekit.shapes.base import (
    LiteralValue,
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
class ObjectShape(Shape):
    kind: ClassVar[str] = "object"

    properties: Mapping[str, Member] = field(kw_only=False)
    partial_mode: bool = False

    def __post_init__(self) -> None:
        checked = {
            str(key): ensure_member(member, where=f"property {key!r}")
            for key, member in self.properties.items()
        }
        object.__setattr__(self, "properties", MappingProxyType(checked))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check(self, value: object, path: Path) -> ParseResult:
        if not isinstance(value, Mapping):
            return ParseResult.fail(self._not_object(value, path))
        merged = self._merge_input(value)
        result: dict[str, object] = {}
        errors: list[ShapeError] = []
        for key, member in self.properties.items():
            if self.partial_mode and key not in merged:
                continue
            outcome = run_member(member, merged.get(key, MISSING), (*path, key), self)
            self._collect(key, outcome, result, errors)
        return self._finish(result, errors, value, path)

    async def _check_async(self, value: object, path: Path) -> ParseResult:
        if not isinstance(value, Mapping):
            return ParseResult.fail(self._not_object(value, path))
        merged = self._merge_input(value)
        result: dict[str, object] = {}
        errors: list[ShapeError] = []
        for key, member in self.properties.items():
            if self.partial_mode and key not in merged:
                continue
            outcome = await run_member_async(
                member, merged.get(key, MISSING), (*path, key), self
            )
            self._collect(key, outcome, result, errors)
        return self._finish(result, errors, value, path)

    def _merge_input(self, value: Mapping[Any, object]) -> dict[Any, object]:
        return {**self.defaults(), **value}

    @staticmethod
    def _collect(
        key: str, outcome: ParseResult, result: dict[str, object], errors: list[ShapeError]
    ) -> None:
        if not outcome.success:
            errors.append(outcome.error)
        elif outcome.data is not MISSING:
            result[key] = outcome.data

    def _finish(
        self, result: dict[str, object], errors: list[ShapeError], value: object, path: Path
    ) -> ParseResult:
        if errors:
            return ParseResult.fail(aggregate_errors(errors, value=value, shape=self, path=path))
        return ParseResult.ok(result)

    def _not_object(self, value: object, path: Path) -> ShapeError:
        return self._error(ErrorCode.NOT_OBJECT, "Expected object", value, path)

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    def defaults(self) -> dict[str, object]:
        """Child defaults merged with this object's own default (own wins)."""

        snapshot: dict[str, object] = {}
        for key, member in self.properties.items():
            contributed = member_default(member)
            if contributed is not MISSING:
                snapshot[key] = contributed
        if isinstance(self.default_value, Mapping):
            snapshot.update(self.default_value)
        return copy.deepcopy(snapshot)

    def default_snapshot(self) -> object:
        if self.default_value is not MISSING and not isinstance(self.default_value, Mapping):
            return self.default_value
        if self.default_value is MISSING and self.is_optional:
            return MISSING
        snapshot = self.defaults()
        if snapshot or self.default_value is not MISSING:
            return snapshot
        return MISSING

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def keys(self) -> tuple[str, ...]:
        return tuple(self.properties)

    def partial(self) -> Self:
        return replace(
            self,
            properties={key: _optional(member) for key, member in self.properties.items()},
            partial_mode=True,
        )

    def deep_partial(self) -> Self:
        loosened: dict[str, Member] = {}
        for key, member in self.properties.items():
            if isinstance(member, ObjectShape):
                loosened[key] = member.deep_partial().optional()
            else:
                loosened[key] = _optional(member)
        return replace(self, properties=loosened, partial_mode=True)

    def pick(self, keys: Iterable[str]) -> Self:
        selected = tuple(keys)
        self._require_known(selected, operation="pick")
        return replace(self, properties={key: self.properties[key] for key in selected})

    def omit(self, keys: Iterable[str]) -> Self:
        dropped = frozenset(keys)
        self._require_known(dropped, operation="omit")
        return replace(
            self,
            properties={
                key: member for key, member in self.properties.items() if key not in dropped
            },
        )

    def merge(self, other: ObjectShape) -> Self:
        return replace(self, properties={**self.properties, **other.properties})

    def extend(self, properties: Mapping[str, Member]) -> Self:
        return replace(self, properties={**self.properties, **properties})

    def _require_known(self, keys: Iterable[str], *, operation: str) -> None:
        unknown = sorted(key for key in keys if key not in self.properties)
        if unknown:
            raise ValueError(f"{operation}() got unknown properties: {', '.join(unknown)}")

    def _describe_fields(self) -> dict[str, object]:
        return {
            "properties": {key: member.describe() for key, member in self.properties.items()},
            "partial": self.partial_mode,
        }

    # ------------------------------------------------------------------
    # Refinements over the validated result
    # ------------------------------------------------------------------

    def has_property(self, key: str, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: key in result,
            overrides,
            code="MISSING_PROPERTY",
            message=f'Object must have property "{key}"',
            extra={"property": key},
        )

    def forbidden_property(self, key: str, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: key not in result,
            overrides,
            code="FORBIDDEN_PROPERTY",
            message=f'Object must not have property "{key}"',
            extra={"property": key},
        )

    def exact_properties(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: len(result) == count,
            overrides,
            code="INVALID_PROPERTY_COUNT",
            message=f"Object must have exactly {count} properties",
            extra={"count": count},
        )

    def min_properties(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: len(result) >= count,
            overrides,
            code="TOO_FEW_PROPERTIES",
            message=f"Object must have at least {count} properties",
            extra={"min": count},
        )

    def max_properties(self, count: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda result: len(result) <= count,
            overrides,
            code="TOO_MANY_PROPERTIES",
            message=f"Object must have at most {count} properties",
            extra={"max": count},
        )

    def non_empty(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.min_properties(1, **overrides)

    def property_value(
        self,
        key: str,
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


def _optional(member: Member) -> Member:
    match member:
        case Shape():
            return member.optional()
        case LiteralValue():
            return member
    raise TypeError(f"unsupported member type: {type(member).__name__}")


__all__ = ["ObjectShape"]
