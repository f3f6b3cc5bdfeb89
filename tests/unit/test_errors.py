"""
shapekit — unit tests for the error model

File: tests/unit/test_errors.py
Last updated: 2026-10-18

Purpose
- Validate path rendering, aggregation, flattening, re-rooting and
  serialization of ``ShapeError``.

Functional requirements
- Offline and deterministic.
"""

from __future__ import annotations

import pytest

from shapekit import MISSING, ErrorCode, ShapeError, StringShape, aggregate_errors, format_path
from shapekit.errors import REDACTED_VALUE, is_sensitive_key, json_safe

pytestmark = pytest.mark.unit


def _leaf(code: str, *path: str | int, value: object = None) -> ShapeError:
    return ShapeError(code=code, message=f"{code} message", value=value, path=path)


def test_format_path_renders_keys_and_indexes() -> None:
    assert format_path(("users", 0, "age")) == "users[0].age"
    assert format_path(()) == ""
    assert format_path((0, "name")) == "[0].name"
    assert format_path(("matrix", 1, 2)) == "matrix[1][2]"


def test_format_path_renders_arbitrary_mapping_keys() -> None:
    assert format_path((1.5, "tags", 0)) == "1.5.tags[0]"
    assert format_path((None,)) == "None"
    assert format_path(("flags", True)) == "flags.True"
    assert ShapeError(code="X", message="m", path=(2.5, "n")).path_text == "2.5.n"


def test_aggregate_errors_passes_single_error_through() -> None:
    only = _leaf("NOT_STRING", "name")

    assert aggregate_errors([only], value={}, shape=None, path=()) is only


def test_aggregate_errors_wraps_many_with_count() -> None:
    first = _leaf("NOT_STRING", "name")
    second = _leaf("NOT_NUMBER", "age")

    aggregate = aggregate_errors([first, second], value={"x": 1}, shape=None, path=("root",))

    assert aggregate.code == ErrorCode.MULTIPLE_ERRORS
    assert aggregate.message == "Multiple validation errors"
    assert aggregate.details == (first, second)
    assert aggregate.path == ("root",)
    assert aggregate.extra == {"count": 2}
    assert aggregate.is_aggregate


def test_aggregate_errors_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        aggregate_errors([], value=None, shape=None, path=())


def test_flatten_yields_leaves_depth_first_in_order() -> None:
    inner = ShapeError(
        code=ErrorCode.MULTIPLE_ERRORS,
        message="inner",
        details=(_leaf("A", "x"), _leaf("B", "y")),
    )
    outer = ShapeError(
        code=ErrorCode.MULTIPLE_ERRORS,
        message="outer",
        details=(inner, _leaf("C", "z")),
    )

    assert [leaf.code for leaf in outer.flatten()] == ["A", "B", "C"]
    assert list(_leaf("ONLY").flatten())[0].code == "ONLY"


def test_with_prefix_reroots_error_and_details() -> None:
    cause = RuntimeError("boom")
    error = ShapeError(
        code=ErrorCode.MULTIPLE_ERRORS,
        message="many",
        path=("child",),
        details=(_leaf("A", "child", 0),),
    )
    error.__cause__ = cause

    rooted = error.with_prefix(("parent", 3))

    assert rooted.path == ("parent", 3, "child")
    assert rooted.details[0].path == ("parent", 3, "child", 0)
    assert rooted.__cause__ is cause
    assert error.path == ("child",)
    assert error.with_prefix(()) is error


def test_kind_comes_from_originating_shape() -> None:
    error = ShapeError(code="X", message="m", shape=StringShape())

    assert error.kind == "string"
    assert _leaf("X").kind is None


def test_to_dict_is_json_safe_and_redacts_sensitive_paths() -> None:
    original = ValueError("bad input")
    error = ShapeError(
        code=ErrorCode.UNEXPECTED_ERROR,
        message="check: bad input",
        value="hunter2",
        path=("credentials", "password"),
        extra={"original_error": original, "operation_code": "VALIDATION_ERROR"},
    )

    redacted = error.to_dict()
    assert redacted == {
        "code": "UNEXPECTED_ERROR",
        "message": "check: bad input",
        "path": ["credentials", "password"],
        "kind": None,
        "value": REDACTED_VALUE,
        "extra": {
            "operation_code": "VALIDATION_ERROR",
            "original_error": "ValueError('bad input')",
        },
    }
    assert error.to_dict(redact=False)["value"] == "hunter2"


def test_to_dict_redacts_configured_extra_terms_and_nests_details() -> None:
    detail = _leaf("NOT_STRING", "ssn", value=123456789)
    error = ShapeError(code=ErrorCode.MULTIPLE_ERRORS, message="many", details=(detail,))

    plain = error.to_dict()
    custom = error.to_dict(sensitive_keys=("ssn",))

    assert plain["details"][0]["value"] == 123456789
    assert custom["details"][0]["value"] == REDACTED_VALUE


def test_missing_serializes_as_null() -> None:
    assert _leaf("REQUIRED", "name", value=MISSING).to_dict()["value"] is None


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("password", True),
        ("apiKey", True),
        ("client-secret", True),
        ("AUTHORIZATION", True),
        ("name", False),
        ("", False),
    ],
)
def test_is_sensitive_key(key: str, expected: bool) -> None:
    assert is_sensitive_key(key) is expected


def test_json_safe_renders_shapes_through_describe() -> None:
    rendered = json_safe(StringShape().min(2).optional())

    assert isinstance(rendered, dict)
    assert rendered["kind"] == "string"
    assert rendered["optional"] is True
    assert rendered["constraints"][0]["code"] == "STRING_TOO_SHORT"


def test_str_is_message_and_repr_names_code() -> None:
    error = _leaf("NOT_STRING", "users", 0)

    assert str(error) == "NOT_STRING message"
    assert "NOT_STRING" in repr(error)
    assert "users[0]" in repr(error)
