"""Shape that accepts any present value; the base of the combinators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from shapekit.errors import Path
from shapekit.shapes.base import ParseResult, Shape


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class AnyShape(Shape):
    kind: ClassVar[str] = "any"

    def _check(self, value: object, path: Path) -> ParseResult:
        return ParseResult.ok(value)


__all__ = ["AnyShape"]
