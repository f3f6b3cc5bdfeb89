"""
shapekit — number shape.

File: src/shapekit/shapes/number.py
Last updated: 2026-10-18

Purpose
- Type test for ``int``/``float`` (``bool`` excluded), coercion from text,
  booleans and null, and the numeric constraint builders.

Functional requirements
- Non-numeric text is a coercion failure (``NOT_NUMBER``); boolean coercion
  is lenient by contrast and the asymmetry is intentional.
- Decimal and precision checks count digits on the canonical printed form.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import ClassVar, Final, Self, Unpack

from shapekit.constants import MAX_SAFE_INTEGER
from shapekit.errors import ErrorCode, Path
from shapekit.shapes.base import ParseResult, Shape
from shapekit.shapes.operations import ErrorOverrides
from shapekit.shapes.string import number_to_text

Number = int | float

NUMERIC_TEXT_PATTERN: Final = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INFINITY_TEXT: Final[dict[str, float]] = {
    "Infinity": math.inf,
    "+Infinity": math.inf,
    "-Infinity": -math.inf,
}
_SIGNIFICANT_PREFIX = re.compile(r"^0\.?0*|\.")


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class NumberShape(Shape):
    """Accepts ``int`` and ``float``; ``coerce()`` parses text first."""

    kind: ClassVar[str] = "number"

    coercing: bool = False

    def coerce(self) -> Self:
        return replace(self, coercing=True)

    @property
    def _coerces_null(self) -> bool:
        return self.coercing

    def _coerce(self, value: object, path: Path) -> ParseResult:
        if not self.coercing:
            return ParseResult.ok(value)
        coerced = coerce_to_number(value)
        if coerced is None:
            return ParseResult.fail(self._not_number(value, path))
        return ParseResult.ok(coerced)

    def _check(self, value: object, path: Path) -> ParseResult:
        if is_number(value):
            return ParseResult.ok(value)
        return ParseResult.fail(self._not_number(value, path))

    def _not_number(self, value: object, path: Path):
        return self._error(ErrorCode.NOT_NUMBER, "Expected a number", value, path)

    def _describe_fields(self) -> dict[str, object]:
        return {"coerce": self.coercing}

    # -- bounds -------------------------------------------------------------

    def min(self, bound: Number, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value >= bound,
            overrides,
            code="NUMBER_TOO_SMALL",
            message=f"Number must be at least {bound}",
            extra={"min": bound},
        )

    def max(self, bound: Number, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value <= bound,
            overrides,
            code="NUMBER_TOO_LARGE",
            message=f"Number must be at most {bound}",
            extra={"max": bound},
        )

    def range(self, low: Number, high: Number, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: low <= value <= high,
            overrides,
            code="NOT_IN_RANGE",
            message=f"Number must be between {low} and {high}",
            extra={"min": low, "max": high},
        )

    # -- sign ---------------------------------------------------------------

    def positive(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value > 0,
            overrides,
            code="NOT_POSITIVE",
            message="Number must be positive",
        )

    def non_negative(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.min(0, **overrides)

    def negative(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value < 0,
            overrides,
            code="NOT_NEGATIVE",
            message="Number must be negative",
        )

    def non_positive(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.max(0, **overrides)

    # -- kind of number -----------------------------------------------------

    def int(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            is_integral, overrides, code="NOT_INTEGER", message="Number must be an integer"
        )

    def finite(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            math.isfinite, overrides, code="NOT_FINITE", message="Number must be finite"
        )

    def safe(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: is_integral(value) and abs(value) <= MAX_SAFE_INTEGER,
            overrides,
            code="NOT_SAFE_INTEGER",
            message="Number must be a safe integer",
        )

    def multiple_of(self, step: Number, **overrides: Unpack[ErrorOverrides]) -> Self:
        if step == 0:
            raise ValueError("multiple_of() step must be non-zero")
        return self._constraint(
            lambda value: value % step == 0,
            overrides,
            code="NOT_MULTIPLE_OF",
            message=f"Number must be a multiple of {step}",
            extra={"multiple": step},
        )

    # -- printed-form digit checks --------------------------------------------

    def decimal(self, places: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: decimal_places(value) <= places,
            overrides,
            code="TOO_MANY_DECIMALS",
            message=f"Number must have at most {places} decimal places",
            extra={"max_decimal_places": places},
        )

    def precision(self, digits: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: significant_digits(value) <= digits,
            overrides,
            code="TOO_MANY_DIGITS",
            message=f"Number must have at most {digits} significant digits",
            extra={"max_precision": digits},
        )

    def exact_decimal(self, places: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: "." in number_to_text(value) and decimal_places(value) == places,
            overrides,
            code="INVALID_DECIMAL_PLACES",
            message=f"Number must have exactly {places} decimal places",
            extra={"required_decimal_places": places},
        )

    # -- value sets ---------------------------------------------------------

    def equals(self, expected: Number, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value == expected,
            overrides,
            code="NOT_EQUAL",
            message=f"Number must be equal to {expected}",
            extra={"expected": expected},
        )

    def not_equals(self, forbidden: Number, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value != forbidden,
            overrides,
            code="EQUALS_FORBIDDEN_VALUE",
            message=f"Number must not be equal to {forbidden}",
            extra={"forbidden": forbidden},
        )

    def one_of(self, values: Sequence[Number], **overrides: Unpack[ErrorOverrides]) -> Self:
        allowed = tuple(values)
        rendered = ", ".join(str(item) for item in allowed)
        return self._constraint(
            lambda value: value in allowed,
            overrides,
            code="NOT_IN_VALUES",
            message=f"Number must be one of: {rendered}",
            extra={"options": list(allowed)},
        )

    def not_one_of(self, values: Sequence[Number], **overrides: Unpack[ErrorOverrides]) -> Self:
        forbidden = tuple(values)
        rendered = ", ".join(str(item) for item in forbidden)
        return self._constraint(
            lambda value: value not in forbidden,
            overrides,
            code="IN_FORBIDDEN_VALUES",
            message=f"Number must not be one of: {rendered}",
            extra={"forbidden": list(forbidden)},
        )

    # -- presets --------------------------------------------------------------

    def port(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.int(**overrides).min(1, **overrides).max(65535, **overrides)

    def latitude(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.min(-90, **overrides).max(90, **overrides)

    def longitude(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.min(-180, **overrides).max(180, **overrides)

    def percentage(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.min(0, **overrides).max(100, **overrides)

    def probability(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.min(0, **overrides).max(1, **overrides)

    def byte(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.int(**overrides).min(0, **overrides).max(255, **overrides)

    def natural(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.int(**overrides).min(0, **overrides)

    def whole(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.int(**overrides).min(1, **overrides)


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integral(value: Number) -> bool:
    if isinstance(value, int):
        return True
    return math.isfinite(value) and value.is_integer()


def coerce_to_number(value: object) -> Number | None:
    """Return the coerced number, or ``None`` when ``value`` has no numeric reading."""

    if value is None:
        return 0
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return parse_numeric_text(value)
    if isinstance(value, (Mapping, list, tuple)):
        return parse_numeric_text(json.dumps(value))
    return None


def parse_numeric_text(text: str) -> Number | None:
    stripped = text.strip()
    if not stripped:
        return 0
    if stripped in _INFINITY_TEXT:
        return _INFINITY_TEXT[stripped]
    if NUMERIC_TEXT_PATTERN.match(stripped) is None:
        return None
    if any(marker in stripped for marker in ".eE"):
        return float(stripped)
    return int(stripped)


def decimal_places(value: Number) -> int:
    printed = number_to_text(value)
    if "." not in printed:
        return 0
    return len(printed) - printed.index(".") - 1


def significant_digits(value: Number) -> int:
    return len(_SIGNIFICANT_PREFIX.sub("", number_to_text(abs(value)), count=1))


__all__ = [
    "NumberShape",
    "coerce_to_number",
    "decimal_places",
    "is_integral",
    "is_number",
    "parse_numeric_text",
    "significant_digits",
]
