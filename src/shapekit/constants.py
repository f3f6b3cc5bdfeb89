"""Stable constants shared across shapekit modules."""

from __future__ import annotations

import enum
from typing import Final, Literal


class _MissingType(enum.Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Absent value: a key not present in a mapping, or no argument at all.
# ``None`` is the null value and is resolved separately.
MISSING: Final = _MissingType.MISSING
Missing = Literal[_MissingType.MISSING]

LOGGER_NAME: Final[str] = "shapekit"
ENV_PREFIX: Final[str] = "SHAPEKIT_"
PYPROJECT_TABLE: Final[tuple[str, ...]] = ("tool", "shapekit")

SHAPE_KINDS: Final[tuple[str, ...]] = (
    "string",
    "number",
    "boolean",
    "enum",
    "any",
    "array",
    "object",
    "record",
    "union",
)

# largest integer a float represents exactly
MAX_SAFE_INTEGER: Final[int] = 2**53 - 1

__all__ = [
    "ENV_PREFIX",
    "LOGGER_NAME",
    "MAX_SAFE_INTEGER",
    "MISSING",
    "Missing",
    "PYPROJECT_TABLE",
    "SHAPE_KINDS",
]
