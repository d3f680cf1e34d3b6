"""
Binary bounding-volume hierarchy over segments.

BUILD
-----
Each segment's box is its two endpoints inflated by its radius on every
axis. A range of segments becomes a leaf when it holds at most
``leaf_size`` segments; otherwise it is split on the longest axis of its
union box at the median segment centroid (order within each half is
unspecified). Node slots are reserved before recursing, so the root is
node 0 and a left child always directly follows its parent.

ENCODING
--------
Nodes carry two 32-bit fields:
- internal: lo = left child index, hi = right child index
- leaf:     lo = start into leaf_indices, hi = count | 0x80000000

An empty segment collection yields a single zero-box leaf with no entries.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging

import numpy as np

from arbor_policies import SpatialIndexPolicy
from ..core.segments import SegmentSet

logger = logging.getLogger(__name__)

LEAF_FLAG = 0x80000000
COUNT_MASK = 0x7FFFFFFF

BVH_NODE_DTYPE = np.dtype([
    ("mn", np.float32, (3,)),
    ("mx", np.float32, (3,)),
    ("lo", np.uint32),
    ("hi", np.uint32),
])


@dataclass
class BVHNode:
    """One node: union box plus the two encoded fields."""
    mn: np.ndarray
    mx: np.ndarray
    lo: int = 0
    hi: int = LEAF_FLAG

    @property
    def is_leaf(self) -> bool:
        return bool(self.hi & LEAF_FLAG)

    @property
    def count(self) -> int:
        """Segments in a leaf (0 for internal nodes)."""
        return self.hi & COUNT_MASK if self.is_leaf else 0

    @property
    def children(self) -> Tuple[int, int]:
        return (self.lo, self.hi)


def segment_boxes(segments: SegmentSet) -> Tuple[np.ndarray, np.ndarray]:
    """
    Per-segment axis-aligned boxes.

    Returns
    -------
    (mins, maxs) : tuple of np.ndarray
        Each (N, 3)
    """
    n = len(segments)
    if n == 0:
        return np.zeros((0, 3)), np.zeros((0, 3))
    starts = np.array([s.start.to_tuple() for s in segments], dtype=float)
    ends = np.array([s.end.to_tuple() for s in segments], dtype=float)
    radii = np.array([s.radius for s in segments], dtype=float)[:, None]
    return np.minimum(starts, ends) - radii, np.maximum(starts, ends) + radii


def _longest_axis(extent: np.ndarray) -> int:
    # ties go to the later axis
    if extent[0] > extent[1]:
        return 0 if extent[0] > extent[2] else 2
    return 1 if extent[1] > extent[2] else 2


def _boxes_overlap(amn, amx, bmn, bmx) -> bool:
    return bool(np.all(amn <= bmx) and np.all(bmn <= amx))


def _ray_hits_box(origin, inv_dir, mn, mx, t_max: float) -> bool:
    """Slab test; inv_dir holds +/-inf for zero direction components."""
    with np.errstate(invalid="ignore"):
        t1 = (mn - origin) * inv_dir
        t2 = (mx - origin) * inv_dir
    # a zero component with the origin on a slab plane gives 0 * inf = nan
    t1 = np.where(np.isnan(t1), -np.inf, t1)
    t2 = np.where(np.isnan(t2), np.inf, t2)
    t_near = float(np.max(np.minimum(t1, t2)))
    t_far = float(np.min(np.maximum(t1, t2)))
    return t_near <= t_far and t_far >= 0.0 and t_near <= t_max


class BVH:
    """
    Bounding-volume hierarchy built from a SegmentSet.

    Attributes
    ----------
    nodes : list of BVHNode
        Node 0 is the root
    leaf_indices : list of int
        Segment indices referenced by leaf ranges
    box_min, box_max : np.ndarray
        Per-segment boxes, (N, 3)
    leaf_size : int
        Maximum segments per leaf
    """

    def __init__(
        self,
        nodes: List[BVHNode],
        leaf_indices: List[int],
        box_min: np.ndarray,
        box_max: np.ndarray,
        leaf_size: int,
    ):
        self.nodes = nodes
        self.leaf_indices = leaf_indices
        self.box_min = box_min
        self.box_max = box_max
        self.leaf_size = leaf_size

    @property
    def n_segments(self) -> int:
        return len(self.box_min)

    @property
    def leaf_count(self) -> int:
        return sum(1 for n in self.nodes if n.is_leaf)

    @property
    def internal_count(self) -> int:
        return len(self.nodes) - self.leaf_count

    def leaf_segments(self, node_index: int) -> List[int]:
        node = self.nodes[node_index]
        if not node.is_leaf:
            return []
        return self.leaf_indices[node.lo:node.lo + node.count]

    def depth(self) -> int:
        """Number of levels (1 for a single leaf)."""
        best = 0
        stack = [(0, 1)]
        while stack:
            idx, level = stack.pop()
            best = max(best, level)
            node = self.nodes[idx]
            if not node.is_leaf:
                stack.append((node.lo, level + 1))
                stack.append((node.hi, level + 1))
        return best

    # queries

    def _traverse(self, node_test, leaf_test) -> List[int]:
        hits: List[int] = []
        stack = [0]
        while stack:
            node = self.nodes[stack.pop()]
            if not node_test(node.mn, node.mx):
                continue
            if node.is_leaf:
                for seg in self.leaf_indices[node.lo:node.lo + node.count]:
                    if leaf_test(seg):
                        hits.append(seg)
            else:
                stack.append(node.hi)
                stack.append(node.lo)
        return sorted(hits)

    def query_box(self, lo, hi) -> List[int]:
        """Indices of segments whose boxes overlap the box [lo, hi]."""
        lo = np.asarray(lo, dtype=float)
        hi = np.asarray(hi, dtype=float)
        return self._traverse(
            lambda mn, mx: _boxes_overlap(mn, mx, lo, hi),
            lambda i: _boxes_overlap(self.box_min[i], self.box_max[i], lo, hi),
        )

    def query_point(self, point, radius: float = 0.0) -> List[int]:
        """Indices of segments whose boxes come within radius of point (box metric)."""
        p = np.asarray(point, dtype=float)
        return self.query_box(p - radius, p + radius)

    def ray_candidates(self, origin, direction, t_max: float = np.inf) -> List[int]:
        """
        Segments stored in leaves whose boxes the ray crosses.

        Parameters
        ----------
        origin, direction : array-like
            Ray origin and direction (need not be unit length; t is in
            units of |direction|)
        t_max : float
            Maximum ray parameter
        """
        o = np.asarray(origin, dtype=float)
        d = np.asarray(direction, dtype=float)
        with np.errstate(divide="ignore"):
            inv = 1.0 / d
        return self._traverse(
            lambda mn, mx: _ray_hits_box(o, inv, mn, mx, t_max),
            lambda i: True,
        )

    # checks and export

    def validate(self, atol: float = 1e-6) -> List[str]:
        """
        Check containment, exact cover and leaf size.

        Returns
        -------
        List[str]
            Violations (empty if valid)
        """
        errors = []
        seen: List[int] = []
        reached = set()
        stack = [0]
        while stack:
            idx = stack.pop()
            if idx in reached:
                errors.append(f"node {idx} reached twice")
                continue
            reached.add(idx)
            node = self.nodes[idx]
            if node.is_leaf:
                if node.count > self.leaf_size:
                    errors.append(f"leaf {idx} holds {node.count} > {self.leaf_size} segments")
                for seg in self.leaf_segments(idx):
                    seen.append(seg)
                    if np.any(self.box_min[seg] < node.mn - atol) or np.any(self.box_max[seg] > node.mx + atol):
                        errors.append(f"leaf {idx} does not contain segment {seg}")
                continue
            for child in node.children:
                if not 0 <= child < len(self.nodes):
                    errors.append(f"node {idx} has invalid child {child}")
                    continue
                c = self.nodes[child]
                if np.any(c.mn < node.mn - atol) or np.any(c.mx > node.mx + atol):
                    errors.append(f"node {idx} does not contain child {child}")
                stack.append(child)

        if sorted(seen) != list(range(self.n_segments)):
            errors.append("leaf ranges do not cover every segment exactly once")
        if len(reached) != len(self.nodes):
            errors.append(f"{len(self.nodes) - len(reached)} nodes unreachable from root")
        return errors

    def to_buffers(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Renderer layout.

        Returns
        -------
        nodes : np.ndarray
            Structured array with BVH_NODE_DTYPE
        leaf_indices : np.ndarray
            uint32 segment indices
        """
        buf = np.zeros(len(self.nodes), dtype=BVH_NODE_DTYPE)
        for i, node in enumerate(self.nodes):
            buf[i]["mn"] = node.mn
            buf[i]["mx"] = node.mx
            buf[i]["lo"] = node.lo
            buf[i]["hi"] = node.hi
        return buf, np.asarray(self.leaf_indices, dtype=np.uint32)

    def summary(self) -> dict:
        return {
            "node_count": len(self.nodes),
            "leaf_count": self.leaf_count,
            "internal_count": self.internal_count,
            "depth": self.depth(),
            "segment_count": self.n_segments,
        }


def build_bvh(segments: SegmentSet, policy: Optional[SpatialIndexPolicy] = None) -> BVH:
    """
    Build a BVH over segments.

    Parameters
    ----------
    segments : SegmentSet
        Segments to index
    policy : SpatialIndexPolicy, optional
        Leaf capacity

    Returns
    -------
    BVH
        Root at node 0; an empty input gives one zero-box leaf
    """
    if policy is None:
        policy = SpatialIndexPolicy()
    errors = policy.validate()
    if errors:
        raise ValueError(f"Invalid SpatialIndexPolicy: {'; '.join(errors)}")

    leaf_size = policy.leaf_size
    bmin, bmax = segment_boxes(segments)

    if len(segments) == 0:
        dummy = BVHNode(mn=np.zeros(3), mx=np.zeros(3), lo=0, hi=LEAF_FLAG)
        return BVH([dummy], [], bmin, bmax, leaf_size)

    centroids = 0.5 * (bmin + bmax)
    indices = np.arange(len(segments))
    nodes: List[BVHNode] = []
    leaf_indices: List[int] = []

    def build(first: int, count: int) -> int:
        my_index = len(nodes)
        nodes.append(None)  # reserve slot

        idx = indices[first:first + count]
        mn = bmin[idx].min(axis=0)
        mx = bmax[idx].max(axis=0)

        if count <= leaf_size:
            start = len(leaf_indices)
            leaf_indices.extend(int(i) for i in idx)
            nodes[my_index] = BVHNode(mn=mn, mx=mx, lo=start, hi=count | LEAF_FLAG)
            return my_index

        axis = _longest_axis(mx - mn)
        half = count // 2
        order = np.argpartition(centroids[idx, axis], half)
        indices[first:first + count] = idx[order]

        left = build(first, half)
        right = build(first + half, count - half)
        nodes[my_index] = BVHNode(mn=mn, mx=mx, lo=left, hi=right)
        return my_index

    build(0, len(segments))
    bvh = BVH(nodes, leaf_indices, bmin, bmax, leaf_size)
    logger.debug(
        f"BVH built: {len(nodes)} nodes ({bvh.leaf_count} leaves) over {len(segments)} segments"
    )
    return bvh


__all__ = [
    "BVH",
    "BVHNode",
    "build_bvh",
    "segment_boxes",
    "BVH_NODE_DTYPE",
    "LEAF_FLAG",
]
