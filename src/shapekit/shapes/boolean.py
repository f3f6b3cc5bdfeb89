"""Boolean shape with lenient coercion from text and numbers."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import ClassVar, Final, Self, Unpack

from shapekit.errors import ErrorCode, Path
from shapekit.shapes.base import ParseResult, Shape
from shapekit.shapes.number import parse_numeric_text
from shapekit.shapes.operations import ErrorOverrides

TRUE_STRINGS: Final[frozenset[str]] = frozenset({"yes", "y", "1", "true"})
FALSE_STRINGS: Final[frozenset[str]] = frozenset({"no", "n", "0", "false"})


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class BooleanShape(Shape):
    kind: ClassVar[str] = "boolean"

    coercing: bool = False

    def coerce(self) -> Self:
        return replace(self, coercing=True)

    @property
    def _coerces_null(self) -> bool:
        return self.coercing

    def _coerce(self, value: object, path: Path) -> ParseResult:
        if not self.coercing:
            return ParseResult.ok(value)
        return ParseResult.ok(coerce_to_boolean(value))

    def _check(self, value: object, path: Path) -> ParseResult:
        if isinstance(value, bool):
            return ParseResult.ok(value)
        return ParseResult.fail(
            self._error(ErrorCode.NOT_BOOLEAN, "Expected a boolean", value, path)
        )

    def _describe_fields(self) -> dict[str, object]:
        return {"coerce": self.coercing}

    def is_true(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value is True, overrides, code="NOT_TRUE", message="Value must be true"
        )

    def is_false(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value is False,
            overrides,
            code="NOT_FALSE",
            message="Value must be false",
        )

    def truthy(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            bool, overrides, code="NOT_TRUTHY", message="Value must be truthy"
        )

    def falsy(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: not value, overrides, code="NOT_FALSY", message="Value must be falsy"
        )


def coerce_to_boolean(value: object) -> bool:
    # text: keyword sets first, then numeric reading, then non-empty
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_STRINGS:
            return True
        if normalized in FALSE_STRINGS:
            return False
        number = parse_numeric_text(normalized)
        if number is not None:
            return not math.isnan(number) and number != 0
        return bool(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return not math.isnan(value) and value != 0
    if value is None:
        return False
    # containers and other objects are true even when empty
    return True


__all__ = ["FALSE_STRINGS", "TRUE_STRINGS", "BooleanShape", "coerce_to_boolean"]
