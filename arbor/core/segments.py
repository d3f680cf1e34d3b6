"""
Segment arena: the flat, index-addressed output of a generation run.

Segments are appended to a single growable list and reference their parent
by integer index, never by object reference. A parent index always points at
an earlier segment (or is None for a root), so the collection is a forest by
construction and serializes directly to the renderer's flat layout.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple
import math
import logging

import numpy as np

from .types import Point3D

logger = logging.getLogger(__name__)

# Floats per segment in the renderer buffer:
# start xyz, radius, end xyz, depth, parent index
SEGMENT_STRIDE = 9

# Parent "none" in the renderer buffer (outside [0, N))
NO_PARENT = -1

# float32 holds every integer up to 2**24 exactly; parent and depth
# columns of larger buffers lose precision, use parent_indices() instead
FLOAT32_EXACT_INDEX = 2 ** 24


@dataclass
class Segment:
    """
    One straight cylindrical piece of a generated branch structure.

    Attributes
    ----------
    start, end : Point3D
        Axis endpoints
    radius : float
        Cylinder radius (non-negative)
    depth : int
        Generation depth: 0 for roots, parent depth + 1 otherwise
    parent : int or None
        Index of the parent segment in the owning SegmentSet
    """

    start: Point3D
    end: Point3D
    radius: float
    depth: int = 0
    parent: Optional[int] = None

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> np.ndarray:
        """Unit vector from start to end (zeros for a degenerate segment)."""
        d = self.end.to_array() - self.start.to_array()
        n = np.linalg.norm(d)
        if n < 1e-12:
            return np.zeros(3)
        return d / n

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Axis-aligned box of both endpoints inflated by radius on every axis."""
        s = self.start.to_array()
        e = self.end.to_array()
        return np.minimum(s, e) - self.radius, np.maximum(s, e) + self.radius

    def to_dict(self) -> dict:
        return {
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "radius": self.radius,
            "depth": self.depth,
            "parent": self.parent,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Segment":
        return cls(
            start=Point3D.from_dict(d["start"]),
            end=Point3D.from_dict(d["end"]),
            radius=float(d["radius"]),
            depth=int(d.get("depth", 0)),
            parent=d.get("parent"),
        )


class SegmentSet:
    """
    Ordered collection of segments forming a forest.

    The only in-place mutation after generation is radius reassignment
    (see arbor.ops.medial_axis).
    """

    def __init__(self, segments: Optional[List[Segment]] = None):
        self._segments: List[Segment] = []
        for seg in segments or []:
            self.append(seg)

    def append(self, segment: Segment) -> int:
        """
        Append a segment and return its index.

        Raises
        ------
        ValueError
            If the parent index does not refer to an already-stored segment
        """
        if segment.parent is not None:
            if not 0 <= segment.parent < len(self._segments):
                raise ValueError(
                    f"Parent index {segment.parent} out of range for segment "
                    f"{len(self._segments)}"
                )
        self._segments.append(segment)
        return len(self._segments) - 1

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def __bool__(self) -> bool:
        return bool(self._segments)

    @property
    def segments(self) -> List[Segment]:
        return list(self._segments)

    def roots(self) -> List[int]:
        return [i for i, seg in enumerate(self._segments) if seg.parent is None]

    def children_map(self) -> Dict[int, List[int]]:
        """Map segment index -> indices of its direct children, in order."""
        children: Dict[int, List[int]] = {i: [] for i in range(len(self._segments))}
        for i, seg in enumerate(self._segments):
            if seg.parent is not None:
                children[seg.parent].append(i)
        return children

    @property
    def max_depth(self) -> int:
        if not self._segments:
            return 0
        return max(seg.depth for seg in self._segments)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Union of all segment boxes; a zero-size box at the origin when empty."""
        if not self._segments:
            return np.zeros(3), np.zeros(3)
        lows, highs = zip(*(seg.bounds() for seg in self._segments))
        return np.min(lows, axis=0), np.max(highs, axis=0)

    def validate(self) -> List[str]:
        """
        Check the forest and depth invariants.

        Returns
        -------
        list of str
            Human-readable violations (empty when the collection is valid)
        """
        errors = []
        for i, seg in enumerate(self._segments):
            if seg.radius < 0 or math.isnan(seg.radius):
                errors.append(f"segment {i}: invalid radius {seg.radius}")
            if seg.parent is None:
                if seg.depth != 0:
                    errors.append(f"segment {i}: root with depth {seg.depth}")
                continue
            if not 0 <= seg.parent < i:
                errors.append(f"segment {i}: parent {seg.parent} is not an earlier segment")
                continue
            expected = self._segments[seg.parent].depth + 1
            if seg.depth != expected:
                errors.append(
                    f"segment {i}: depth {seg.depth} != parent depth + 1 ({expected})"
                )
        return errors

    def parent_indices(self) -> np.ndarray:
        """
        Parent index per segment as int32, with NO_PARENT for roots.

        Exact for any collection size, unlike column 8 of ``to_buffer()``.
        """
        return np.array(
            [NO_PARENT if seg.parent is None else seg.parent for seg in self._segments],
            dtype=np.int32,
        )

    def to_buffer(self) -> np.ndarray:
        """
        Pack into the renderer layout.

        Returns
        -------
        np.ndarray
            (N, 9) float32 array: start xyz, radius, end xyz, depth, parent
            (parent None encoded as -1). Indices above 2**24 are not exact
            in float32; see parent_indices().
        """
        if len(self._segments) > FLOAT32_EXACT_INDEX:
            logger.warning(
                f"{len(self._segments)} segments exceed the exact float32 index range; "
                f"buffer parent column is approximate"
            )
        buf = np.zeros((len(self._segments), SEGMENT_STRIDE), dtype=np.float32)
        for i, seg in enumerate(self._segments):
            buf[i, 0:3] = seg.start.to_tuple()
            buf[i, 3] = seg.radius
            buf[i, 4:7] = seg.end.to_tuple()
            buf[i, 7] = seg.depth
            buf[i, 8] = NO_PARENT if seg.parent is None else seg.parent
        return buf

    @classmethod
    def from_buffer(cls, buf: np.ndarray) -> "SegmentSet":
        """Rebuild a SegmentSet from a renderer buffer produced by to_buffer()."""
        arr = np.asarray(buf, dtype=float).reshape(-1, SEGMENT_STRIDE)
        out = cls()
        for row in arr:
            parent = int(row[8])
            out.append(Segment(
                start=Point3D.from_array(row[0:3]),
                end=Point3D.from_array(row[4:7]),
                radius=float(row[3]),
                depth=int(row[7]),
                parent=None if parent < 0 else parent,
            ))
        return out

    def to_dict(self) -> dict:
        return {
            "schema_version": "1.0",
            "segments": [seg.to_dict() for seg in self._segments],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SegmentSet":
        return cls([Segment.from_dict(s) for s in d.get("segments", [])])


__all__ = ["Segment", "SegmentSet", "SEGMENT_STRIDE", "NO_PARENT"]
