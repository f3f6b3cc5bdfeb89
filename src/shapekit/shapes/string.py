"""
shapekit — string shape.

File: src/shapekit/shapes/string.py
Last updated: 2026-10-18

Purpose
- Type test, optional coercion and the string constraint builders.

What should be included in this file
- Length, pattern, substring and case checks.
- Format checks: email, URL, UUID, credit card (Luhn), hex color, IP address,
  ISO-8601 UTC timestamp.
- Content checks for strings carrying numbers, integers, booleans or JSON.

Functional requirements
- Every builder is a refinement with a default ``(code, message)`` pair the
  caller may override per call.
"""

from __future__ import annotations

import ipaddress
import json
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Final, Self, Unpack
from urllib.parse import urlsplit

from shapekit.errors import ErrorCode, Path
from shapekit.shapes.base import ParseResult, Shape
from shapekit.shapes.operations import ErrorOverrides

EMAIL_PATTERN: Final = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$"
)
UUID_PATTERN: Final = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
HEX_COLOR_PATTERN: Final = re.compile(r"^#?([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
ISO_DATE_PATTERN: Final = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z$")
ALPHANUMERIC_PATTERN: Final = re.compile(r"^[a-zA-Z0-9]+$")
INTEGER_STRING_PATTERN: Final = re.compile(r"^-?\d+$")

_LEADING_NUMBER = re.compile(
    r"^\s*[+-]?(?:Infinity|\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)"
)
_NON_DIGITS = re.compile(r"\D")
_HOST_REQUIRED_SCHEMES: Final[frozenset[str]] = frozenset(
    {"http", "https", "ftp", "ws", "wss", "file"}
)
_BOOLEAN_STRINGS: Final[frozenset[str]] = frozenset({"true", "false", "1", "0"})


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class StringShape(Shape):
    """Accepts ``str`` values; ``coerce()`` converts anything to text first."""

    kind: ClassVar[str] = "string"

    coercing: bool = False

    def coerce(self) -> Self:
        return replace(self, coercing=True)

    @property
    def _coerces_null(self) -> bool:
        return self.coercing

    def _coerce(self, value: object, path: Path) -> ParseResult:
        if not self.coercing:
            return ParseResult.ok(value)
        return ParseResult.ok(coerce_to_string(value))

    def _check(self, value: object, path: Path) -> ParseResult:
        if isinstance(value, str):
            return ParseResult.ok(value)
        return ParseResult.fail(self._error(ErrorCode.NOT_STRING, "Expected a string", value, path))

    def _describe_fields(self) -> dict[str, object]:
        return {"coerce": self.coercing}

    # -- length ---------------------------------------------------------

    def min(self, length: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: len(value) >= length,
            overrides,
            code="STRING_TOO_SHORT",
            message=f"String must be at least {length} characters long",
            extra={"min": length},
        )

    def max(self, length: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: len(value) <= length,
            overrides,
            code="STRING_TOO_LONG",
            message=f"String must be at most {length} characters long",
            extra={"max": length},
        )

    def length(self, length: int, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: len(value) == length,
            overrides,
            code="STRING_LENGTH_MISMATCH",
            message=f"String must be exactly {length} characters long",
            extra={"length": length},
        )

    def not_empty(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: len(value) > 0,
            overrides,
            code="EMPTY_STRING",
            message="String must not be empty",
        )

    # -- pattern and content ----------------------------------------------

    def regex(self, pattern: str | re.Pattern[str], **overrides: Unpack[ErrorOverrides]) -> Self:
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self._constraint(
            lambda value: compiled.search(value) is not None,
            overrides,
            code="REGEX_MISMATCH",
            message=f"String must match pattern {compiled.pattern}",
            extra={"regex": compiled.pattern},
        )

    def pattern(self, pattern: str | re.Pattern[str], **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.regex(pattern, **overrides)

    def contains(self, substring: str, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: substring in value,
            overrides,
            code="MISSING_SUBSTRING",
            message=f'String must contain "{substring}"',
            extra={"substring": substring},
        )

    def includes(self, substring: str, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.contains(substring, **overrides)

    def starts_with(self, prefix: str, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value.startswith(prefix),
            overrides,
            code="MISSING_PREFIX",
            message=f'String must start with "{prefix}"',
            extra={"prefix": prefix},
        )

    def ends_with(self, suffix: str, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value.endswith(suffix),
            overrides,
            code="MISSING_SUFFIX",
            message=f'String must end with "{suffix}"',
            extra={"suffix": suffix},
        )

    def one_of(self, options: Sequence[str], **overrides: Unpack[ErrorOverrides]) -> Self:
        allowed = tuple(options)
        return self._constraint(
            lambda value: value in allowed,
            overrides,
            code="VALUE_NOT_IN_OPTIONS",
            message=f"String must be one of: {', '.join(allowed)}",
            extra={"options": list(allowed)},
        )

    # -- case and charset ---------------------------------------------------

    def trimmed(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value == value.strip(),
            overrides,
            code="STRING_NOT_TRIMMED",
            message="String is not trimmed",
        )

    def lowercase(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value == value.lower(),
            overrides,
            code="STRING_NOT_LOWERCASE",
            message="String is not fully lowercase",
        )

    def uppercase(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value == value.upper(),
            overrides,
            code="STRING_NOT_UPPERCASE",
            message="String is not fully uppercase",
        )

    def alphanumeric(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: ALPHANUMERIC_PATTERN.match(value) is not None,
            overrides,
            code="INVALID_ALPHANUMERIC",
            message="String must contain only alphanumeric characters",
        )

    # -- formats ------------------------------------------------------------

    def email(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: EMAIL_PATTERN.match(value) is not None,
            overrides,
            code="INVALID_EMAIL",
            message="Email is invalid",
        )

    def url(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            is_url, overrides, code="INVALID_URL", message="URL is invalid"
        )

    def uuid(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: UUID_PATTERN.match(value) is not None,
            overrides,
            code="INVALID_UUID",
            message="UUID is invalid",
        )

    def credit_card(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            passes_luhn,
            overrides,
            code="INVALID_CREDIT_CARD",
            message="Credit card number is invalid",
        )

    def hex_color(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: HEX_COLOR_PATTERN.match(value) is not None,
            overrides,
            code="INVALID_HEX_COLOR",
            message="Hex color is invalid",
        )

    def ip(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            is_ip_address, overrides, code="INVALID_IP_ADDRESS", message="IP address is invalid"
        )

    def ip_address(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self.ip(**overrides)

    def iso_date(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            is_iso_utc_timestamp,
            overrides,
            code="INVALID_ISO_DATE",
            message="Date must be a valid ISO 8601 string (UTC time required)",
        )

    # -- string-encoded values ------------------------------------------------

    def as_number(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: _LEADING_NUMBER.match(value) is not None,
            overrides,
            code="INVALID_NUMBER_STRING",
            message="String must represent a valid number",
        )

    def as_integer(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: INTEGER_STRING_PATTERN.match(value) is not None,
            overrides,
            code="INVALID_INTEGER_STRING",
            message="String must represent a valid integer",
        )

    def as_boolean(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            lambda value: value.lower() in _BOOLEAN_STRINGS,
            overrides,
            code="INVALID_BOOLEAN_STRING",
            message="String must represent a boolean (true/false/1/0)",
        )

    def as_json(self, **overrides: Unpack[ErrorOverrides]) -> Self:
        return self._constraint(
            is_json_text, overrides, code="INVALID_JSON", message="String must be valid JSON"
        )


def coerce_to_string(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return number_to_text(value)
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def number_to_text(value: int | float) -> str:
    """Canonical textual form of a number.

    Floats print the shortest round-tripping digits. The layout is positional
    for magnitudes in ``[1e-6, 1e21)`` and ``d[.ddd]e±N`` outside it, with no
    zero padding on the exponent: ``2.0`` prints ``2``, ``0.00001`` prints
    ``0.00001``, ``1e-7`` prints ``1e-7`` and ``1e21`` prints ``1e+21``.
    """

    if not isinstance(value, float):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    shortest = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(digit) for digit in shortest.digits)
    count = len(digits)
    point = shortest.exponent + count
    if count <= point <= 21:
        return sign + digits + "0" * (point - count)
    if 0 < point <= 21:
        return f"{sign}{digits[:point]}.{digits[point:]}"
    if -6 < point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    exponent = point - 1
    mantissa = digits if count == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{sign}{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"


def is_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme:
        return False
    if parts.scheme.lower() in _HOST_REQUIRED_SCHEMES:
        return bool(parts.netloc) or (parts.scheme.lower() == "file" and bool(parts.path))
    return bool(parts.netloc or parts.path)


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_iso_utc_timestamp(value: str) -> bool:
    if ISO_DATE_PATTERN.match(value) is None:
        return False
    try:
        datetime.strptime(value[:19], "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return False
    return True


def is_json_text(value: str) -> bool:
    try:
        json.loads(value)
    except ValueError:
        return False
    return True


def passes_luhn(value: str) -> bool:
    digits = _NON_DIGITS.sub("", value)
    if not 13 <= len(digits) <= 19:
        return False
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


__all__ = [
    "StringShape",
    "coerce_to_string",
    "is_ip_address",
    "is_iso_utc_timestamp",
    "is_url",
    "number_to_text",
    "passes_luhn",
]
