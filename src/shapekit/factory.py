"""
shapekit — convenience constructors and combinators.

File: src/shapekit/factory.py
Last updated: 2026-10-18

Purpose
- The public construction surface: one constructor per kind, object algebra,
  preset shapes, combinators and random value helpers.

Functional requirements
- Plain (non-shape) values given where a member is expected become literal
  members.
- ``validate``/``is_valid`` never raise for invalid input.
"""

from __future__ import annotations

import enum
import math
import random
import re
import string as _charsets
import uuid as _uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from types import SimpleNamespace
from typing import Any, Final, TypeVar

from shapekit.errors import ErrorCode
from shapekit.shapes.any import AnyShape
from shapekit.shapes.array import ArrayShape
from shapekit.shapes.base import LiteralValue, Member, ParseResult, Shape
from shapekit.shapes.boolean import BooleanShape
from shapekit.shapes.enum import EnumShape, EnumValue
from shapekit.shapes.number import NumberShape
from shapekit.shapes.object import ObjectShape
from shapekit.shapes.record import RecordShape
from shapekit.shapes.string import StringShape
from shapekit.shapes.union import UnionShape

RANDOM_ALPHABET: Final[str] = _charsets.ascii_uppercase + _charsets.ascii_lowercase + _charsets.digits
RANDOM_EXTENDED_ALPHABET: Final[str] = RANDOM_ALPHABET + "!@#$%^&*()_+-={}[]|:;<>,.?/~`"

_RANDOM = random.SystemRandom()

S = TypeVar("S", bound=Shape)


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------


def string() -> StringShape:
    return StringShape()


def number() -> NumberShape:
    return NumberShape()


def boolean() -> BooleanShape:
    return BooleanShape()


def any_() -> AnyShape:
    return AnyShape()


def enum_of(values: Sequence[EnumValue] | type[enum.Enum]) -> EnumShape:
    """Enum shape from a sequence of scalars or an ``enum.Enum`` class."""

    if isinstance(values, type) and issubclass(values, enum.Enum):
        return EnumShape.from_enum(values)
    return EnumShape(tuple(values))


def literal(value: object) -> LiteralValue:
    return LiteralValue(value)


def object_(properties: Mapping[str, object]) -> ObjectShape:
    return ObjectShape(_members(properties))


def array(element: object) -> ArrayShape:
    return ArrayShape(_member(element))


def record(key_shape: Shape, value_shape: object) -> RecordShape:
    return RecordShape(key_shape, _member(value_shape))


def union(candidates: Iterable[object]) -> UnionShape:
    return UnionShape(tuple(_member(candidate) for candidate in candidates))


def union_of(*candidates: object) -> UnionShape:
    return union(candidates)


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------


def optional(shape: S) -> S:
    return shape.optional()


def nullable(shape: S) -> S:
    return shape.nullable()


def required(shape: S) -> S:
    return shape.required()


def partial(shape: ObjectShape) -> ObjectShape:
    return shape.partial()


def refine(
    shape: S,
    predicate: Callable[[Any], object],
    message: str = "Validation failed",
    code: str = ErrorCode.VALIDATION_ERROR,
) -> S:
    return shape.refine(predicate, message, code)


coerce = SimpleNamespace(
    string=lambda: StringShape().coerce(),
    number=lambda: NumberShape().coerce(),
    boolean=lambda: BooleanShape().coerce(),
)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def validate(value: object, shape: Shape) -> ParseResult:
    return shape.safe_parse(value)


def is_valid(value: object, shape: Shape) -> bool:
    return shape.safe_parse(value).success


# ---------------------------------------------------------------------------
# Object algebra
# ---------------------------------------------------------------------------


def pick(shape: ObjectShape, keys: Iterable[str]) -> ObjectShape:
    return shape.pick(keys)


def omit(shape: ObjectShape, keys: Iterable[str]) -> ObjectShape:
    return shape.omit(keys)


def merge(first: ObjectShape, second: ObjectShape) -> ObjectShape:
    return first.merge(second)


def extend(shape: ObjectShape, properties: Mapping[str, object]) -> ObjectShape:
    return shape.extend(_members(properties))


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


def non_empty_array(element: object) -> ArrayShape:
    return array(element).non_empty()


def unique_array(element: object) -> ArrayShape:
    return array(element).unique()


def min_length(element: object, count: int) -> ArrayShape:
    return array(element).min(count)


def max_length(element: object, count: int) -> ArrayShape:
    return array(element).max(count)


def email() -> StringShape:
    return StringShape().email()


def uuid() -> StringShape:
    return StringShape().uuid()


def url() -> StringShape:
    return StringShape().url()


def ip() -> StringShape:
    return StringShape().ip()


def date_string() -> StringShape:
    return StringShape().iso_date()


def hex_color() -> StringShape:
    return StringShape().hex_color()


def credit_card() -> StringShape:
    return StringShape().credit_card()


def regex(pattern: str | re.Pattern[str]) -> StringShape:
    return StringShape().regex(pattern)


def int_() -> NumberShape:
    return NumberShape().int()


def float_() -> NumberShape:
    return NumberShape()


def positive() -> NumberShape:
    return NumberShape().positive()


def negative() -> NumberShape:
    return NumberShape().negative()


def port() -> NumberShape:
    return NumberShape().port()


def latitude() -> NumberShape:
    return NumberShape().latitude()


def longitude() -> NumberShape:
    return NumberShape().longitude()


def percentage() -> NumberShape:
    return NumberShape().percentage()


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def and_(first: Shape, second: Shape) -> AnyShape:
    """Accept values both shapes accept; the input is returned unchanged."""

    return AnyShape().refine(
        lambda value: first.safe_parse(value).success and second.safe_parse(value).success,
        "Must satisfy both schemas",
    )


def or_(first: object, second: object) -> UnionShape:
    return union((first, second))


def not_(shape: Shape) -> AnyShape:
    return AnyShape().refine(
        lambda value: not shape.safe_parse(value).success,
        "Must not match the schema",
    )


def custom(predicate: Callable[[Any], object], message: str = "Custom validation failed") -> AnyShape:
    return AnyShape().refine(predicate, message)


# ---------------------------------------------------------------------------
# Random values
# ---------------------------------------------------------------------------


def random_string(length: int = 64, extended: bool = False) -> str:
    if length < 0:
        raise ValueError("length must be non-negative")
    alphabet = RANDOM_EXTENDED_ALPHABET if extended else RANDOM_ALPHABET
    return "".join(_RANDOM.choice(alphabet) for _ in range(length))


def random_int(low: float = 1, high: float = 1000) -> int:
    """Random integer in ``[ceil(low), floor(high)]``."""

    return _RANDOM.randint(math.ceil(low), math.floor(high))


def random_uuid() -> str:
    return str(_uuid.uuid4())


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


def _member(candidate: object) -> Member:
    if isinstance(candidate, (Shape, LiteralValue)):
        return candidate
    return LiteralValue(candidate)


def _members(properties: Mapping[str, object]) -> dict[str, Member]:
    return {key: _member(candidate) for key, candidate in properties.items()}


__all__ = [
    "RANDOM_ALPHABET",
    "RANDOM_EXTENDED_ALPHABET",
    "and_",
    "any_",
    "array",
    "boolean",
    "coerce",
    "credit_card",
    "custom",
    "date_string",
    "email",
    "enum_of",
    "extend",
    "float_",
    "hex_color",
    "int_",
    "ip",
    "is_valid",
    "latitude",
    "literal",
    "longitude",
    "max_length",
    "merge",
    "min_length",
    "negative",
    "non_empty_array",
    "not_",
    "nullable",
    "number",
    "object_",
    "omit",
    "optional",
    "or_",
    "partial",
    "percentage",
    "pick",
    "port",
    "positive",
    "random_int",
    "random_string",
    "random_uuid",
    "record",
    "refine",
    "regex",
    "required",
    "string",
    "union",
    "union_of",
    "unique_array",
    "url",
    "uuid",
    "validate",
]
