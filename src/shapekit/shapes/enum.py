"""Enum shape: membership in a fixed set of scalar values."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar, Self, Unpack

from shapekit.errors import ErrorCode, Path
from shapekit.shapes.base import ParseResult, Shape, contains_strict, strict_equal
from shapekit.shapes.operations import ErrorOverrides

EnumValue = str | int | float | bool


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class EnumShape(Shape):
    """Accepts one of ``values``.

    When built from an ``enum.Enum`` class, members and their raw values are
    both accepted and the member is returned.
    """

    kind: ClassVar[str] = "enum"

    values: tuple[EnumValue, ...] = field(kw_only=False)
    enum_class: type[enum.Enum] | None = None

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("enum shape requires at least one value")
        object.__setattr__(self, "values", tuple(self.values))

    @classmethod
    def from_enum(cls, enum_class: type[enum.Enum]) -> EnumShape:
        return cls(tuple(member.value for member in enum_class), enum_class=enum_class)

    def _check(self, value: object, path: Path) -> ParseResult:
        if self.enum_class is not None and isinstance(value, self.enum_class):
            return ParseResult.ok(value)
        if contains_strict(self.values, value):
            if self.enum_class is not None:
                return ParseResult.ok(self.enum_class(value))
            return ParseResult.ok(value)
        return ParseResult.fail(
            self._error(
                ErrorCode.INVALID_ENUM_VALUE,
                f"Value must be one of: {_render(self.values)}",
                value,
                path,
                {"valid_values": list(self.values)},
            )
        )

    def _describe_fields(self) -> dict[str, object]:
        described: dict[str, object] = {"values": list(self.values)}
        if self.enum_class is not None:
            described["enum"] = self.enum_class.__qualname__
        return described

    def has_value(self, expected: EnumValue, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: strict_equal(_raw(value), expected),
            overrides,
            code="HAS_ENUM_VALUE",
            message=f"Value must be {expected}",
            extra={"expected": expected},
        )

    def not_value(self, forbidden: EnumValue, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: not strict_equal(_raw(value), forbidden),
            overrides,
            code="NOT_HAS_ENUM_VALUE",
            message=f"Value must not be {forbidden}",
            extra={"forbidden": forbidden},
        )

    def one_of(self, values: Sequence[EnumValue], **overrides: Unpack[ErrorOverrides]) -> Self:
        allowed = tuple(values)
        return self._constraint(
            lambda value: contains_strict(allowed, _raw(value)),
            overrides,
            code=ErrorCode.INVALID_ENUM_VALUE,
            message=f"Value must be one of: {_render(allowed)}",
            extra={"options": list(allowed)},
        )

    def not_one_of(self, values: Sequence[EnumValue], **overrides: Unpack[ErrorOverrides]) -> Self:
        forbidden = tuple(values)
        return self._constraint(
            lambda value: not contains_strict(forbidden, _raw(value)),
            overrides,
            code="NOT_ONE_ENUM_VALUE",
            message=f"Value must not be one of: {_render(forbidden)}",
            extra={"forbidden": list(forbidden)},
        )


def _raw(value: object) -> object:
    return value.value if isinstance(value, enum.Enum) else value


def _render(values: Sequence[EnumValue]) -> str:
    return ", ".join(str(value) for value in values)


__all__ = ["EnumShape", "EnumValue"]
