"""
shapekit — abstract shape contract and the validation pipeline.

File: src/shapekit/shapes/base.py
Last updated: 2026-10-18

Purpose
- Define the capability interface every shape kind implements and the fixed
  resolution order of a parse call.

What should be included in this file
- ``Shape``: presence flags, default value, persistent operation chain,
  clone-on-modify modifiers, introspection.
- ``ParseResult``: the value the core routine returns; ``parse`` unwraps it.
- ``LiteralValue`` and the ``Member`` sum type used by composite shapes.
- Member dispatch helpers shared by composite shapes.

Functional requirements
- Resolution order: presence → coercion → type test → children → operations.
- Paths are threaded by value; no shape holds per-call state.
- Async operations reached through the sync pipeline fail with
  ``SYNC_ASYNC_MISMATCH``.

Non-functional requirements
- Shapes are immutable; every modifier returns a new shape sharing the
  unchanged operation-chain prefix.
"""

from __future__ import annotations

import copy
import inspect
import math
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Self

from shapekit.constants import MISSING
from shapekit.errors import ErrorCode, Path, ShapeError, format_path
from shapekit.observability.logging import get_logger
from shapekit.shapes.operations import (
    EMPTY_CHAIN,
    ErrorOverrides,
    Operation,
    OperationChain,
    OperationKind,
    resolve_overrides,
)

_LOGGER = get_logger(__name__)

_MISMATCH_MESSAGE = "Async operation cannot run in a synchronous parse; use parse_async()"


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Tagged outcome of a parse: ``data`` on success, ``error`` on failure."""

    success: bool
    data: Any = None
    error: ShapeError | None = None

    @classmethod
    def ok(cls, data: object) -> ParseResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ShapeError) -> ParseResult:
        return cls(success=False, error=error)

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.data


@dataclass(frozen=True, slots=True)
class LiteralValue:
    """Composite member that only accepts a value equal to ``value``."""

    value: object

    def describe(self) -> dict[str, object]:
        return {"kind": "literal", "value": self.value}


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class Shape:
    """Immutable validation node.

    Subclasses set ``kind`` and override ``_check`` (type test and, for
    composite kinds, recursion into children). Presence resolution, coercion
    ordering and the operation chain live here, shared by the sync and async
    entry points, so every kind follows the same resolution order.
    """

    kind: ClassVar[str] = "abstract"

    is_optional: bool = False
    is_nullable: bool = False
    default_value: Any = MISSING
    operations: OperationChain = EMPTY_CHAIN
    note: str | None = None

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def parse(self, value: object = MISSING) -> Any:
        """Validate ``value`` and return the normalized result or raise ``ShapeError``."""

        return self.safe_parse(value).unwrap()

    def safe_parse(self, value: object = MISSING) -> ParseResult:
        """Validate ``value`` and return a ``ParseResult``; never raises."""

        try:
            result = self._run(value, ())
        except Exception as exc:
            result = ParseResult.fail(self._unexpected_error(exc, value, (), context=None))
        _log_outcome(self, result)
        return result

    async def parse_async(self, value: object = MISSING) -> Any:
        return (await self.safe_parse_async(value)).unwrap()

    async def safe_parse_async(self, value: object = MISSING) -> ParseResult:
        try:
            result = await self._run_async(value, ())
        except Exception as exc:
            result = ParseResult.fail(self._unexpected_error(exc, value, (), context=None))
        _log_outcome(self, result)
        return result

    # ------------------------------------------------------------------
    # Modifiers (each returns a new shape)
    # ------------------------------------------------------------------

    def optional(self) -> Self:
        return replace(self, is_optional=True)

    def nullable(self) -> Self:
        return replace(self, is_nullable=True)

    def required(self) -> Self:
        return replace(self, is_optional=False, is_nullable=False)

    def default(self, value: object) -> Self:
        return replace(self, default_value=value)

    def commit(self, note: str) -> Self:
        """Attach a free-form description reported by ``describe()``."""

        return replace(self, note=note)

    def refine(
        self,
        predicate: Callable[[Any], object],
        message: str = "Validation failed",
        code: str = ErrorCode.VALIDATION_ERROR,
        extra: Mapping[str, object] | None = None,
    ) -> Self:
        return self._add_operation(
            Operation(OperationKind.REFINE, predicate, message, code, dict(extra or {}))
        )

    def refine_async(
        self,
        predicate: Callable[[Any], Awaitable[object]],
        message: str = "Async validation failed",
        code: str = ErrorCode.ASYNC_VALIDATION_ERROR,
        extra: Mapping[str, object] | None = None,
    ) -> Self:
        return self._add_operation(
            Operation(OperationKind.REFINE_ASYNC, predicate, message, code, dict(extra or {}))
        )

    def transform(
        self,
        fn: Callable[[Any], Any],
        *,
        message: str = "Invalid transform",
        code: str = ErrorCode.TRANSFORM_ERROR,
        extra: Mapping[str, object] | None = None,
    ) -> Self:
        return self._add_operation(
            Operation(OperationKind.TRANSFORM, fn, message, code, dict(extra or {}))
        )

    def transform_async(
        self,
        fn: Callable[[Any], Awaitable[Any]],
        *,
        message: str = "Invalid async transform",
        code: str = ErrorCode.ASYNC_TRANSFORM_ERROR,
        extra: Mapping[str, object] | None = None,
    ) -> Self:
        return self._add_operation(
            Operation(OperationKind.TRANSFORM_ASYNC, fn, message, code, dict(extra or {}))
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def describe(self) -> dict[str, object]:
        """Plain data snapshot of the effective configuration."""

        snapshot: dict[str, object] = {
            "kind": self.kind,
            "optional": self.is_optional,
            "nullable": self.is_nullable,
        }
        if self.default_value is not MISSING:
            snapshot["default"] = self.default_value
        if self.note is not None:
            snapshot["note"] = self.note
        snapshot.update(self._describe_fields())
        snapshot["constraints"] = [operation.describe() for operation in self.operations]
        return snapshot

    def default_snapshot(self) -> object:
        """Default contributed to an enclosing object shape, or ``MISSING``."""

        return self.default_value

    @property
    def has_async_operations(self) -> bool:
        return self.operations.has_async

    # ------------------------------------------------------------------
    # Hooks for subclasses
    # ------------------------------------------------------------------

    def _describe_fields(self) -> dict[str, object]:
        return {}

    def _check(self, value: object, path: Path) -> ParseResult:
        raise NotImplementedError(f"{type(self).__name__} must implement _check")

    async def _check_async(self, value: object, path: Path) -> ParseResult:
        return self._check(value, path)

    def _coerce(self, value: object, path: Path) -> ParseResult:
        return ParseResult.ok(value)

    @property
    def _coerces_null(self) -> bool:
        return False

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(self, value: object, path: Path) -> ParseResult:
        value, settled = self._resolve_presence(value, path)
        if settled is not None:
            return settled
        coerced = self._coerce_step(value, path)
        if not coerced.success:
            return coerced
        checked = self._check(coerced.data, path)
        if not checked.success:
            return checked
        return self._apply_operations(checked.data, path)

    async def _run_async(self, value: object, path: Path) -> ParseResult:
        value, settled = self._resolve_presence(value, path)
        if settled is not None:
            return settled
        coerced = self._coerce_step(value, path)
        if not coerced.success:
            return coerced
        checked = await self._check_async(coerced.data, path)
        if not checked.success:
            return checked
        return await self._apply_operations_async(checked.data, path)

    def _resolve_presence(self, value: object, path: Path) -> tuple[object, ParseResult | None]:
        if value is MISSING:
            if self.default_value is not MISSING:
                value = copy.deepcopy(self.default_value)
            elif self.is_optional:
                return value, ParseResult.ok(MISSING)
            else:
                return value, ParseResult.fail(
                    self._error(
                        ErrorCode.REQUIRED,
                        f"Missing required value for {_label(path, self.kind)}",
                        value,
                        path,
                    )
                )

        if value is None:
            if self.is_nullable:
                return value, ParseResult.ok(None)
            if not self._coerces_null:
                message = (
                    f'Property "{format_path(path)}" is not nullable'
                    if path
                    else "Value cannot be null"
                )
                return value, ParseResult.fail(
                    self._error(ErrorCode.NOT_NULLABLE, message, value, path)
                )

        return value, None

    def _coerce_step(self, value: object, path: Path) -> ParseResult:
        try:
            return self._coerce(value, path)
        except Exception as exc:
            return ParseResult.fail(self._unexpected_error(exc, value, path, context="coercion"))

    def _apply_operations(self, value: object, path: Path) -> ParseResult:
        current = value
        for operation in self.operations:
            if operation.kind.is_async:
                return ParseResult.fail(self._mismatch_error(operation, current, path))
            try:
                outcome = operation.fn(current)
            except ShapeError as exc:
                return ParseResult.fail(exc.with_prefix(path))
            except Exception as exc:
                return ParseResult.fail(
                    self._unexpected_error(exc, current, path, context=operation)
                )
            if inspect.isawaitable(outcome):
                _discard_awaitable(outcome)
                return ParseResult.fail(self._mismatch_error(operation, current, path))
            if operation.kind.is_refine:
                if not outcome:
                    return ParseResult.fail(self._operation_error(operation, current, path))
            else:
                current = outcome
        return ParseResult.ok(current)

    async def _apply_operations_async(self, value: object, path: Path) -> ParseResult:
        current = value
        for operation in self.operations:
            try:
                outcome = operation.fn(current)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except ShapeError as exc:
                return ParseResult.fail(exc.with_prefix(path))
            except Exception as exc:
                return ParseResult.fail(
                    self._unexpected_error(exc, current, path, context=operation)
                )
            if operation.kind.is_refine:
                if not outcome:
                    return ParseResult.fail(self._operation_error(operation, current, path))
            else:
                current = outcome
        return ParseResult.ok(current)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _add_operation(self, operation: Operation) -> Self:
        return replace(self, operations=self.operations.append(operation))

    def _constraint(
        self,
        predicate: Callable[[Any], object],
        overrides: ErrorOverrides,
        *,
        code: str,
        message: str,
        extra: Mapping[str, object] | None = None,
    ) -> Self:
        resolved_code, resolved_message, resolved_extra = resolve_overrides(
            overrides, code=code, message=message, extra=extra
        )
        return self.refine(predicate, resolved_message, resolved_code, resolved_extra)

    def _error(
        self,
        code: str,
        message: str,
        value: object,
        path: Path,
        extra: Mapping[str, object] | None = None,
    ) -> ShapeError:
        return ShapeError(
            code=code, message=message, value=value, shape=self, path=path, extra=extra
        )

    def _operation_error(self, operation: Operation, value: object, path: Path) -> ShapeError:
        return self._error(operation.code, operation.message, value, path, operation.extra)

    def _mismatch_error(self, operation: Operation, value: object, path: Path) -> ShapeError:
        return self._error(
            ErrorCode.SYNC_ASYNC_MISMATCH,
            _MISMATCH_MESSAGE,
            value,
            path,
            {"operation": str(operation.kind), "operation_code": operation.code},
        )

    def _unexpected_error(
        self,
        exc: Exception,
        value: object,
        path: Path,
        *,
        context: Operation | str | None,
    ) -> ShapeError:
        detail = str(exc) or type(exc).__name__
        extra: dict[str, object] = {"original_error": exc}
        if isinstance(context, Operation):
            message = f"{context.message}: {detail}"
            extra["operation_code"] = context.code
        elif context is not None:
            message = f"Unexpected error during {context}: {detail}"
        else:
            message = detail
        error = self._error(ErrorCode.UNEXPECTED_ERROR, message, value, path, extra)
        error.__cause__ = exc
        _LOGGER.warning(
            "user callable raised inside shape pipeline",
            extra={
                "kind": self.kind,
                "path": format_path(path),
                "exception_type": type(exc).__name__,
            },
        )
        return error


Member = Shape | LiteralValue


def run_member(member: Member, value: object, path: Path, owner: Shape) -> ParseResult:
    """Validate ``value`` against a composite member (shape or literal)."""

    match member:
        case Shape():
            return member._run(value, path)
        case LiteralValue(expected):
            return _check_literal(expected, value, path, owner)
    raise TypeError(f"unsupported member type: {type(member).__name__}")


async def run_member_async(
    member: Member, value: object, path: Path, owner: Shape
) -> ParseResult:
    match member:
        case Shape():
            return await member._run_async(value, path)
        case LiteralValue(expected):
            return _check_literal(expected, value, path, owner)
    raise TypeError(f"unsupported member type: {type(member).__name__}")


def describe_member(member: Member) -> dict[str, object]:
    return member.describe()


def member_default(member: Member) -> object:
    match member:
        case Shape():
            return member.default_snapshot()
        case LiteralValue(expected):
            return expected
    raise TypeError(f"unsupported member type: {type(member).__name__}")


def ensure_member(candidate: object, *, where: str) -> Member:
    if isinstance(candidate, (Shape, LiteralValue)):
        return candidate
    raise TypeError(
        f"{where} must be a Shape or LiteralValue, got {type(candidate).__name__}; "
        "wrap plain values with literal()"
    )


def strict_equal(left: object, right: object) -> bool:
    """Deep equality that never treats ``True`` as ``1``."""

    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if len(left) != len(right):
            return False
        return all(key in right and strict_equal(item, right[key]) for key, item in left.items())
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(strict_equal(a, b) for a, b in zip(left, right, strict=True))
    if isinstance(left, float) and isinstance(right, float) and math.isnan(left):
        return False
    try:
        return bool(left == right)
    except Exception:
        return False


def contains_strict(values: Sequence[object], candidate: object) -> bool:
    return any(strict_equal(item, candidate) for item in values)


def _check_literal(expected: object, value: object, path: Path, owner: Shape) -> ParseResult:
    if strict_equal(value, expected):
        return ParseResult.ok(value)
    return ParseResult.fail(
        owner._error(
            ErrorCode.INVALID_LITERAL,
            f"Expected literal value: {expected!r}",
            value,
            path,
            {"expected": expected},
        )
    )


def _label(path: Path, kind: str) -> str:
    if path:
        return f'"{format_path(path)}"'
    return kind


def _discard_awaitable(outcome: object) -> None:
    close = getattr(outcome, "close", None)
    if callable(close):
        close()


def _log_outcome(shape: Shape, result: ParseResult) -> None:
    if result.error is None:
        return
    _LOGGER.debug(
        "shape validation failed",
        extra={
            "kind": shape.kind,
            "code": result.error.code,
            "path": result.error.path_text,
            "detail_count": len(result.error.details),
        },
    )


__all__ = [
    "LiteralValue",
    "Member",
    "ParseResult",
    "Shape",
    "contains_strict",
    "describe_member",
    "ensure_member",
    "member_default",
    "run_member",
    "run_member_async",
    "strict_equal",
]
