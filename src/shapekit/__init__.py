"""
shapekit — runtime schema validation.

File: src/shapekit/__init__.py
Last updated: 2026-10-18

Purpose
- Package root. Re-exports the construction surface, the shape kinds and the
  error model.

Functional requirements
- Must not have side effects at import time beyond attaching a NullHandler to
  the ``shapekit`` logger (no config loading, no handler installation).
"""

from shapekit.constants import MISSING, Missing
from shapekit.errors import ErrorCode, ShapeError, aggregate_errors, format_path
from shapekit.factory import (
    and_,
    any_,
    array,
    boolean,
    coerce,
    credit_card,
    custom,
    date_string,
    email,
    enum_of,
    extend,
    float_,
    hex_color,
    int_,
    ip,
    is_valid,
    latitude,
    literal,
    longitude,
    max_length,
    merge,
    min_length,
    negative,
    non_empty_array,
    not_,
    nullable,
    number,
    object_,
    omit,
    optional,
    or_,
    partial,
    percentage,
    pick,
    port,
    positive,
    random_int,
    random_string,
    random_uuid,
    record,
    refine,
    regex,
    required,
    string,
    union,
    union_of,
    unique_array,
    url,
    uuid,
    validate,
)
from shapekit.shapes import (
    AnyShape,
    ArrayShape,
    BooleanShape,
    EnumShape,
    ErrorOverrides,
    LiteralValue,
    NumberShape,
    ObjectShape,
    ParseResult,
    RecordShape,
    Shape,
    StringShape,
    UnionShape,
)

__version__ = "0.1.0"

__all__ = [
    "MISSING",
    "AnyShape",
    "ArrayShape",
    "BooleanShape",
    "EnumShape",
    "ErrorCode",
    "ErrorOverrides",
    "LiteralValue",
    "Missing",
    "NumberShape",
    "ObjectShape",
    "ParseResult",
    "RecordShape",
    "Shape",
    "ShapeError",
    "StringShape",
    "UnionShape",
    "__version__",
    "aggregate_errors",
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
    "format_path",
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
