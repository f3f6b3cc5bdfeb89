"""Union shape: first matching candidate wins, in declaration order."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from shapekit.errors import ErrorCode, Path, ShapeError
from shapekit.observability.logging import get_logger
from shapekit.shapes.base import Member, ParseResult, Shape, ensure_member, run_member, run_member_async

_LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class UnionShape(Shape):
    kind: ClassVar[str] = "union"

    candidates: tuple[Member, ...] = field(kw_only=False)

    def __post_init__(self) -> None:
        members = tuple(
            ensure_member(candidate, where=f"union candidate {index}")
            for index, candidate in enumerate(self.candidates)
        )
        if not members:
            raise ValueError("union shape requires at least one candidate")
        object.__setattr__(self, "candidates", members)

    def _check(self, value: object, path: Path) -> ParseResult:
        failures: list[ShapeError] = []
        for candidate in self.candidates:
            outcome = run_member(candidate, value, path, self)
            if outcome.success:
                return outcome
            failures.append(outcome.error)
        return ParseResult.fail(self._no_match(failures, value, path))

    async def _check_async(self, value: object, path: Path) -> ParseResult:
        failures: list[ShapeError] = []
        for candidate in self.candidates:
            outcome = await run_member_async(candidate, value, path, self)
            if outcome.success:
                return outcome
            failures.append(outcome.error)
        return ParseResult.fail(self._no_match(failures, value, path))

    def _no_match(self, failures: Sequence[ShapeError], value: object, path: Path) -> ShapeError:
        _LOGGER.debug("no union candidate matched", extra={"candidates": len(failures)})
        return ShapeError(
            code=ErrorCode.NO_MATCHING_UNION_MEMBER,
            message="Value did not match any union member",
            value=value,
            shape=self,
            path=path,
            details=failures,
            extra={"candidates": len(failures)},
        )

    def _describe_fields(self) -> dict[str, object]:
        return {"candidates": [candidate.describe() for candidate in self.candidates]}


__all__ = ["UnionShape"]
