"""Operation chain entries (refine/transform, sync and async) and their persistent list."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypedDict


class OperationKind(StrEnum):
    REFINE = "refine"
    TRANSFORM = "transform"
    REFINE_ASYNC = "refine_async"
    TRANSFORM_ASYNC = "transform_async"

    @property
    def is_async(self) -> bool:
        return self in (OperationKind.REFINE_ASYNC, OperationKind.TRANSFORM_ASYNC)

    @property
    def is_refine(self) -> bool:
        return self in (OperationKind.REFINE, OperationKind.REFINE_ASYNC)


class ErrorOverrides(TypedDict, total=False):
    """Per-call overrides accepted by every constraint builder."""

    message: str
    code: str
    extra: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class Operation:
    """One entry of a shape's operation chain."""

    kind: OperationKind
    fn: Callable[[Any], Any]
    message: str
    code: str
    extra: Mapping[str, object] = field(default_factory=dict)

    def describe(self) -> dict[str, object]:
        return {
            "kind": str(self.kind),
            "code": self.code,
            "message": self.message,
            "extra": dict(self.extra),
        }


@dataclass(frozen=True, slots=True)
class OperationChain:
    """Persistent snoc list: ``append`` shares every existing node.

    The empty chain is ``EMPTY_CHAIN``; a non-empty chain is its last
    operation plus the chain that precedes it.
    """

    last: Operation | None = None
    previous: OperationChain | None = None
    size: int = 0

    def append(self, operation: Operation) -> OperationChain:
        return OperationChain(last=operation, previous=self, size=self.size + 1)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Operation]:
        reversed_ops: list[Operation] = []
        node: OperationChain | None = self
        while node is not None and node.last is not None:
            reversed_ops.append(node.last)
            node = node.previous
        return reversed(reversed_ops)

    @property
    def has_async(self) -> bool:
        return any(operation.kind.is_async for operation in self)


EMPTY_CHAIN = OperationChain()


def resolve_overrides(
    overrides: ErrorOverrides,
    *,
    code: str,
    message: str,
    extra: Mapping[str, object] | None = None,
) -> tuple[str, str, dict[str, object]]:
    """Merge builder defaults with caller overrides; caller wins."""

    merged_extra: dict[str, object] = dict(overrides.get("extra") or {})
    merged_extra.update(extra or {})
    return (
        overrides.get("code", code),
        overrides.get("message", message),
        merged_extra,
    )


__all__ = [
    "EMPTY_CHAIN",
    "ErrorOverrides",
    "Operation",
    "OperationChain",
    "OperationKind",
    "resolve_overrides",
]
