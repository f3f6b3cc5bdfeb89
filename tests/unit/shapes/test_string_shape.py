"""
shapekit — unit tests for the string shape

File: tests/unit/shapes/test_string_shape.py
Last updated: 2026-10-18

Purpose
- Validate the string type test, coercion rules and every string
  constraint builder.

Functional requirements
- Offline and deterministic.
"""

from __future__ import annotations

import pytest

from shapekit import ErrorCode, coerce, string
from shapekit.shapes.string import number_to_text, passes_luhn

pytestmark = pytest.mark.unit


def _code(shape, value: object) -> str | None:
    result = shape.safe_parse(value)
    return None if result.success else result.error.code


def test_type_test_rejects_non_strings() -> None:
    error = string().safe_parse(12).error

    assert error.code == ErrorCode.NOT_STRING
    assert error.message == "Expected a string"
    assert error.kind == "string"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, "true"),
        (False, "false"),
        (12, "12"),
        (1.5, "1.5"),
        (2.0, "2"),
        (float("inf"), "Infinity"),
        ({"a": 1}, '{"a":1}'),
        ([1, 2], "[1,2]"),
        ("already", "already"),
    ],
)
def test_coercion_renders_canonical_text(value: object, expected: str) -> None:
    assert coerce.string().parse(value) == expected


def test_number_to_text_matches_coercion() -> None:
    assert number_to_text(10.0) == "10"
    assert number_to_text(-0.25) == "-0.25"
    assert number_to_text(float("nan")) == "NaN"
    assert number_to_text(float("-inf")) == "-Infinity"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.00001, "0.00001"),
        (0.000001, "0.000001"),
        (1e-7, "1e-7"),
        (-2.5e-8, "-2.5e-8"),
        (1e20, "100000000000000000000"),
        (1e21, "1e+21"),
        (1.5e300, "1.5e+300"),
        (123.456, "123.456"),
        (-0.0, "0"),
    ],
)
def test_number_to_text_switches_to_exponent_outside_positional_range(
    value: float, expected: str
) -> None:
    assert number_to_text(value) == expected
    assert coerce.string().parse(value) == expected


def test_length_constraints_report_bounds() -> None:
    short = string().min(3).safe_parse("ab").error
    long = string().max(2).safe_parse("abc").error
    exact = string().length(2).safe_parse("abc").error

    assert (short.code, short.extra) == ("STRING_TOO_SHORT", {"min": 3})
    assert short.message == "String must be at least 3 characters long"
    assert (long.code, long.extra) == ("STRING_TOO_LONG", {"max": 2})
    assert (exact.code, exact.extra) == ("STRING_LENGTH_MISMATCH", {"length": 2})
    assert string().min(2).max(4).parse("abc") == "abc"


def test_not_empty() -> None:
    assert _code(string().not_empty(), "") == "EMPTY_STRING"
    assert _code(string().not_empty(), " ") is None


def test_regex_and_pattern_alias() -> None:
    digits = string().regex(r"^\d+$")

    assert digits.parse("123") == "123"
    error = digits.safe_parse("12a").error
    assert error.code == "REGEX_MISMATCH"
    assert error.extra == {"regex": r"^\d+$"}
    assert _code(string().pattern("b"), "abc") is None


@pytest.mark.parametrize(
    ("shape_factory", "good", "bad", "code"),
    [
        (lambda: string().contains("@"), "a@b", "ab", "MISSING_SUBSTRING"),
        (lambda: string().includes("x"), "axb", "ab", "MISSING_SUBSTRING"),
        (lambda: string().starts_with("pre"), "prefix", "suffix", "MISSING_PREFIX"),
        (lambda: string().ends_with(".py"), "main.py", "main.rs", "MISSING_SUFFIX"),
        (lambda: string().one_of(["red", "blue"]), "red", "green", "VALUE_NOT_IN_OPTIONS"),
        (lambda: string().trimmed(), "abc", " abc", "STRING_NOT_TRIMMED"),
        (lambda: string().lowercase(), "abc", "aBc", "STRING_NOT_LOWERCASE"),
        (lambda: string().uppercase(), "ABC", "AbC", "STRING_NOT_UPPERCASE"),
        (lambda: string().alphanumeric(), "abc123", "abc-123", "INVALID_ALPHANUMERIC"),
    ],
)
def test_content_constraints(shape_factory, good: str, bad: str, code: str) -> None:
    shape = shape_factory()

    assert shape.parse(good) == good
    assert _code(shape, bad) == code


@pytest.mark.parametrize(
    ("shape_factory", "valid", "invalid", "code"),
    [
        (
            lambda: string().email(),
            ["user@example.com", "first.last+tag@sub.example.org"],
            ["user@", "@example.com", "user@example", "user example@x.com"],
            "INVALID_EMAIL",
        ),
        (
            lambda: string().url(),
            ["https://example.com/x", "http://localhost:8080", "mailto:user@example.com"],
            ["not a url", "http://", "example.com"],
            "INVALID_URL",
        ),
        (
            lambda: string().uuid(),
            ["123e4567-e89b-12d3-a456-426614174000", "550E8400-E29B-41D4-A716-446655440000"],
            ["123e4567e89b12d3a456426614174000", "123e4567-e89b-62d3-a456-426614174000"],
            "INVALID_UUID",
        ),
        (
            lambda: string().credit_card(),
            ["4111 1111 1111 1111", "4111-1111-1111-1111"],
            ["4111111111111112", "1234"],
            "INVALID_CREDIT_CARD",
        ),
        (
            lambda: string().hex_color(),
            ["#fff", "#A1B2C3", "abcdef"],
            ["#ggg", "#abcd", "fff0"],
            "INVALID_HEX_COLOR",
        ),
        (
            lambda: string().ip(),
            ["192.168.0.1", "::1", "2001:db8::8a2e:370:7334"],
            ["999.1.1.1", "1.2.3", "localhost"],
            "INVALID_IP_ADDRESS",
        ),
        (
            lambda: string().ip_address(),
            ["10.0.0.1"],
            ["10.0.0.256"],
            "INVALID_IP_ADDRESS",
        ),
        (
            lambda: string().iso_date(),
            ["2024-01-31T12:00:00Z", "2024-01-31T12:00:00.123Z"],
            ["2024-02-30T00:00:00Z", "2024-01-31", "2024-01-31T12:00:00+02:00"],
            "INVALID_ISO_DATE",
        ),
    ],
)
def test_format_constraints(shape_factory, valid: list[str], invalid: list[str], code: str) -> None:
    shape = shape_factory()

    for candidate in valid:
        assert _code(shape, candidate) is None, candidate
    for candidate in invalid:
        assert _code(shape, candidate) == code, candidate


@pytest.mark.parametrize(
    ("shape_factory", "valid", "invalid", "code"),
    [
        (lambda: string().as_number(), ["12.5", "-3", " 7", "12px"], ["abc", ""], "INVALID_NUMBER_STRING"),
        (lambda: string().as_integer(), ["-12", "0", "42"], ["1.5", "1e3", " 1"], "INVALID_INTEGER_STRING"),
        (lambda: string().as_boolean(), ["true", "FALSE", "1", "0"], ["yes", "2"], "INVALID_BOOLEAN_STRING"),
        (lambda: string().as_json(), ['{"a": 1}', "[1, 2]", "3"], ["{bad", ""], "INVALID_JSON"),
    ],
)
def test_string_encoded_value_constraints(
    shape_factory, valid: list[str], invalid: list[str], code: str
) -> None:
    shape = shape_factory()

    for candidate in valid:
        assert _code(shape, candidate) is None, candidate
    for candidate in invalid:
        assert _code(shape, candidate) == code, candidate


def test_constraints_run_after_coercion() -> None:
    shape = coerce.string().min(2)

    assert shape.parse(42) == "42"
    assert _code(shape, 7) == "STRING_TOO_SHORT"


def test_luhn_requires_plausible_length() -> None:
    assert passes_luhn("4242424242424242")
    assert not passes_luhn("0")
    assert not passes_luhn("")


def test_describe_reports_coercion() -> None:
    assert coerce.string().describe()["coerce"] is True
