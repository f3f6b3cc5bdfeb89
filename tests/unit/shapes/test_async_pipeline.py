"""
shapekit — unit tests for asynchronous parsing

File: tests/unit/shapes/test_async_pipeline.py
Last updated: 2026-10-18

Purpose
- Validate that the asynchronous entry points follow the same resolution
  order as the synchronous ones and await async operations in sequence.

What this test file should cover
- refine_async / transform_async ordering with sync operations.
- Async operations nested in object, array, record and union shapes.
- Exceptions from awaited callables becoming ``UNEXPECTED_ERROR``.

Functional requirements
- Offline and deterministic; no real I/O is awaited.
"""

from __future__ import annotations

import asyncio

import pytest

from shapekit import MISSING, ErrorCode, ShapeError, array, number, object_, record, string, union

pytestmark = pytest.mark.unit


async def _is_known(value: str) -> bool:
    await asyncio.sleep(0)
    return value in {"ada", "grace"}


async def _add_one(value: int) -> int:
    await asyncio.sleep(0)
    return value + 1


@pytest.mark.asyncio
async def test_refine_async_accepts_and_rejects() -> None:
    shape = string().refine_async(_is_known, "unknown user", "UNKNOWN_USER")

    assert await shape.parse_async("ada") == "ada"
    result = await shape.safe_parse_async("bob")
    assert not result.success
    assert result.error.code == "UNKNOWN_USER"
    assert result.error.message == "unknown user"


@pytest.mark.asyncio
async def test_async_default_codes() -> None:
    async def never(value: object) -> bool:
        return False

    error = (await string().refine_async(never).safe_parse_async("x")).error

    assert error.code == ErrorCode.ASYNC_VALIDATION_ERROR
    assert error.message == "Async validation failed"


@pytest.mark.asyncio
async def test_sync_and_async_operations_run_in_declaration_order() -> None:
    shape = number().transform(lambda value: value * 2).transform_async(_add_one)

    assert await shape.parse_async(2) == 5


@pytest.mark.asyncio
async def test_sync_operation_returning_awaitable_is_awaited() -> None:
    shape = number().transform(_add_one)

    assert await shape.parse_async(1) == 2


@pytest.mark.asyncio
async def test_async_pipeline_keeps_presence_and_type_rules() -> None:
    shape = string().refine_async(_is_known)

    missing = await shape.safe_parse_async()
    wrong_type = await shape.safe_parse_async(3)

    assert missing.error.code == ErrorCode.REQUIRED
    assert wrong_type.error.code == ErrorCode.NOT_STRING
    assert await shape.optional().parse_async() is MISSING


@pytest.mark.asyncio
async def test_nested_async_operations_in_object() -> None:
    shape = object_({"name": string().refine_async(_is_known), "age": number()})

    assert await shape.parse_async({"name": "grace", "age": 85}) == {"name": "grace", "age": 85}

    sync_error = shape.safe_parse({"name": "grace", "age": 85}).error
    assert sync_error.code == ErrorCode.SYNC_ASYNC_MISMATCH
    assert sync_error.path == ("name",)


@pytest.mark.asyncio
async def test_async_array_collects_every_failure_in_order() -> None:
    shape = array(string().refine_async(_is_known))

    error = (await shape.safe_parse_async(["ada", "bob", "eve"])).error

    assert error.code == ErrorCode.MULTIPLE_ERRORS
    assert [detail.path for detail in error.details] == [(1,), (2,)]


@pytest.mark.asyncio
async def test_async_record_and_union() -> None:
    users = record(string().refine_async(_is_known), number())
    either = union([number().transform_async(_add_one), string()])

    assert await users.parse_async({"ada": 1}) == {"ada": 1}
    assert (await users.safe_parse_async({"bob": 1})).error.path == ("bob",)
    assert await either.parse_async(1) == 2
    assert await either.parse_async("x") == "x"


@pytest.mark.asyncio
async def test_async_callable_exception_is_unexpected_error() -> None:
    failure = RuntimeError("lookup failed")

    async def explode(value: object) -> bool:
        raise failure

    error = (await string().refine_async(explode, "User lookup").safe_parse_async("x")).error

    assert error.code == ErrorCode.UNEXPECTED_ERROR
    assert error.message == "User lookup: lookup failed"
    assert error.extra["operation_code"] == ErrorCode.ASYNC_VALIDATION_ERROR
    assert error.__cause__ is failure


@pytest.mark.asyncio
async def test_parse_async_raises_shape_error() -> None:
    with pytest.raises(ShapeError) as excinfo:
        await number().parse_async("x")

    assert excinfo.value.code == ErrorCode.NOT_NUMBER
