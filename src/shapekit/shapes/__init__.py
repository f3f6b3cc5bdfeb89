"""Shape kinds and the shared validation contract."""

from shapekit.shapes.any import AnyShape
from shapekit.shapes.array import ArrayShape
from shapekit.shapes.base import LiteralValue, Member, ParseResult, Shape
from shapekit.shapes.boolean import BooleanShape
from shapekit.shapes.enum import EnumShape
from shapekit.shapes.number import NumberShape
from shapekit.shapes.object import ObjectShape
from shapekit.shapes.operations import ErrorOverrides, Operation, OperationChain, OperationKind
from shapekit.shapes.record import RecordShape
from shapekit.shapes.string import StringShape
from shapekit.shapes.union import UnionShape

__all__ = [
    "AnyShape",
    "ArrayShape",
    "BooleanShape",
    "EnumShape",
    "ErrorOverrides",
    "LiteralValue",
    "Member",
    "NumberShape",
    "ObjectShape",
    "Operation",
    "OperationChain",
    "OperationKind",
    "ParseResult",
    "RecordShape",
    "Shape",
    "StringShape",
    "UnionShape",
]
