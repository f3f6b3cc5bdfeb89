"""
shapekit — unit tests for the shared validation pipeline

File: tests/unit/shapes/test_pipeline.py
Last updated: 2026-10-18

Purpose
- Validate presence resolution, immutability of modifiers and the ordering
  and failure handling of the operation chain on the synchronous path.

What this test file should cover
- Missing / optional / default / null handling at the root and inside objects.
- Refine and transform ordering, short-circuiting on type failure.
- Exceptions raised by user callables becoming ``UNEXPECTED_ERROR``.
- Async operations reached from the synchronous pipeline.

Functional requirements
- Offline and deterministic.
"""

from __future__ import annotations

import pytest

from shapekit import (
    MISSING,
    ErrorCode,
    ShapeError,
    array,
    boolean,
    coerce,
    number,
    object_,
    string,
)
from shapekit.shapes.operations import EMPTY_CHAIN, OperationKind

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def test_missing_value_is_required_by_default() -> None:
    result = string().safe_parse()

    assert not result.success
    assert result.error is not None
    assert result.error.code == ErrorCode.REQUIRED
    assert result.error.message == "Missing required value for string"
    assert result.error.path == ()


def test_optional_missing_value_yields_missing_sentinel() -> None:
    assert string().optional().parse() is MISSING
    assert not MISSING
    assert repr(MISSING) == "MISSING"


def test_default_is_substituted_and_runs_through_the_chain() -> None:
    shape = string().default("abc").transform(str.upper)

    assert shape.parse() == "ABC"
    assert shape.parse("xy") == "XY"


def test_default_value_is_copied_per_parse() -> None:
    shape = array(number()).default([1])

    first = shape.parse()
    first.append(2)

    assert shape.parse() == [1]


def test_null_rejected_unless_nullable() -> None:
    error = number().safe_parse(None).error

    assert error is not None
    assert error.code == ErrorCode.NOT_NULLABLE
    assert error.message == "Value cannot be null"
    assert number().nullable().parse(None) is None


def test_null_inside_object_names_the_property() -> None:
    error = object_({"name": string()}).safe_parse({"name": None}).error

    assert error is not None
    assert error.code == ErrorCode.NOT_NULLABLE
    assert error.message == 'Property "name" is not nullable'
    assert error.path == ("name",)


def test_coercing_primitives_accept_null_as_input() -> None:
    assert coerce.string().parse(None) == ""
    assert coerce.number().parse(None) == 0
    assert coerce.boolean().parse(None) is False


def test_required_clears_optional_and_nullable() -> None:
    loose = string().optional().nullable()
    strict = loose.required()

    assert loose.parse() is MISSING
    assert strict.safe_parse().error.code == ErrorCode.REQUIRED
    assert strict.safe_parse(None).error.code == ErrorCode.NOT_NULLABLE


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------


def test_modifiers_return_new_shapes_and_share_chain_prefix() -> None:
    base = string()
    shorter = base.min(3)
    both = shorter.max(5)

    assert base.parse("a") == "a"
    assert not shorter.safe_parse("a").success
    assert base.operations is EMPTY_CHAIN
    assert len(shorter.operations) == 1
    assert len(both.operations) == 2
    assert both.operations.previous is shorter.operations
    assert [op.code for op in both.operations] == ["STRING_TOO_SHORT", "STRING_TOO_LONG"]


def test_flags_do_not_leak_between_derived_shapes() -> None:
    base = number()
    base.optional()
    base.nullable()

    assert not base.is_optional
    assert not base.is_nullable


# ---------------------------------------------------------------------------
# Operation chain
# ---------------------------------------------------------------------------


def test_operations_run_in_declaration_order() -> None:
    shape = number().transform(lambda value: value + 1).refine(lambda value: value > 1)

    assert shape.parse(1) == 2
    assert not shape.safe_parse(-5).success


def test_refine_failure_uses_defaults_and_overrides() -> None:
    default_error = string().refine(lambda value: False).safe_parse("x").error
    custom_error = (
        string()
        .refine(lambda value: value == "ok", "must be ok", "NOT_OK", {"hint": "ok"})
        .safe_parse("x")
        .error
    )

    assert default_error.code == ErrorCode.VALIDATION_ERROR
    assert default_error.message == "Validation failed"
    assert custom_error.code == "NOT_OK"
    assert custom_error.message == "must be ok"
    assert custom_error.extra == {"hint": "ok"}
    assert custom_error.value == "x"


def test_builder_overrides_replace_code_and_message_and_merge_extra() -> None:
    error = (
        string()
        .min(3, message="too short", code="NAME_SHORT", extra={"field": "name"})
        .safe_parse("ab")
        .error
    )

    assert error.code == "NAME_SHORT"
    assert error.message == "too short"
    assert error.extra == {"field": "name", "min": 3}


def test_type_failure_short_circuits_operations() -> None:
    calls: list[object] = []
    shape = string().refine(lambda value: calls.append(value) or True)

    assert shape.safe_parse(5).error.code == ErrorCode.NOT_STRING
    assert calls == []


def test_first_failing_operation_stops_the_chain() -> None:
    calls: list[object] = []
    shape = string().min(5).refine(lambda value: calls.append(value) or True)

    assert shape.safe_parse("ab").error.code == "STRING_TOO_SHORT"
    assert calls == []


def test_callable_exception_becomes_unexpected_error() -> None:
    failure = ValueError("bad")

    def explode(value: object) -> bool:
        raise failure

    error = string().refine(explode, "Name check").safe_parse("x").error

    assert error.code == ErrorCode.UNEXPECTED_ERROR
    assert error.message == "Name check: bad"
    assert error.extra["original_error"] is failure
    assert error.extra["operation_code"] == ErrorCode.VALIDATION_ERROR
    assert error.__cause__ is failure


def test_transform_exception_keeps_transform_message() -> None:
    error = number().transform(lambda value: value / 0).safe_parse(1).error

    assert error.code == ErrorCode.UNEXPECTED_ERROR
    assert error.message.startswith("Invalid transform: ")
    assert error.extra["operation_code"] == ErrorCode.TRANSFORM_ERROR


def test_shape_error_raised_inside_operation_is_rerooted() -> None:
    def reject(value: object) -> object:
        raise ShapeError(code="DEEP", message="deep failure", path=("deep",))

    shape = object_({"inner": string().transform(reject)})
    error = shape.safe_parse({"inner": "a"}).error

    assert error.code == "DEEP"
    assert error.path == ("inner", "deep")


def test_async_operation_in_sync_parse_is_a_mismatch() -> None:
    async def check(value: object) -> bool:
        return True

    error = string().refine_async(check).safe_parse("a").error

    assert error.code == ErrorCode.SYNC_ASYNC_MISMATCH
    assert error.extra["operation"] == OperationKind.REFINE_ASYNC


def test_sync_operation_returning_awaitable_is_a_mismatch() -> None:
    async def check(value: object) -> bool:
        return True

    error = string().refine(check).safe_parse("a").error

    assert error.code == ErrorCode.SYNC_ASYNC_MISMATCH


def test_parse_raises_and_safe_parse_returns() -> None:
    shape = boolean()

    with pytest.raises(ShapeError) as excinfo:
        shape.parse("yes")
    assert excinfo.value.code == ErrorCode.NOT_BOOLEAN

    result = shape.safe_parse("yes")
    assert not result.success
    assert result.data is None


def test_parse_result_unwrap() -> None:
    ok = number().safe_parse(3)

    assert ok.success
    assert ok.error is None
    assert ok.unwrap() == 3


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------


def test_describe_reports_flags_note_and_constraints() -> None:
    snapshot = string().min(2).optional().default("ab").commit("display name").describe()

    assert snapshot["kind"] == "string"
    assert snapshot["optional"] is True
    assert snapshot["nullable"] is False
    assert snapshot["default"] == "ab"
    assert snapshot["note"] == "display name"
    assert snapshot["coerce"] is False
    assert snapshot["constraints"] == [
        {
            "kind": "refine",
            "code": "STRING_TOO_SHORT",
            "message": "String must be at least 2 characters long",
            "extra": {"min": 2},
        }
    ]


def test_has_async_operations() -> None:
    async def check(value: object) -> bool:
        return True

    assert not string().min(1).has_async_operations
    assert string().min(1).refine_async(check).has_async_operations
