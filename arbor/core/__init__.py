"""Core data structures for generated branch structures."""

from .types import Point3D, ORIGIN
from .segments import Segment, SegmentSet, SEGMENT_STRIDE, NO_PARENT
from .grammar import (
    Symbol,
    OutputSymbol,
    ParametricRule,
    Grammar,
    RANGE_FIELDS,
    SCALAR_FIELDS,
    PUSH,
    POP,
)

__all__ = [
    "Point3D",
    "ORIGIN",
    "Segment",
    "SegmentSet",
    "SEGMENT_STRIDE",
    "NO_PARENT",
    "Symbol",
    "OutputSymbol",
    "ParametricRule",
    "Grammar",
    "RANGE_FIELDS",
    "SCALAR_FIELDS",
    "PUSH",
    "POP",
]
