"""
Fixed-depth random branching generator.

A non-parametric fallback that shares the segment data model: no grammar,
no expressions. Useful for exercising the spatial index and renderer with
a quick plausible tree.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

import numpy as np

from arbor_policies import RandomTreePolicy
from ..core.segments import Segment, SegmentSet
from ..core.types import Point3D
from ..utils.vectors import rotate_about_axis

logger = logging.getLogger(__name__)

Z_AXIS = np.array([0.0, 0.0, 1.0])
X_AXIS = np.array([1.0, 0.0, 0.0])


@dataclass
class _Pending:
    start: np.ndarray
    end: np.ndarray
    radius: float
    budget: int
    parent: Optional[int]
    depth: int


def _child_angles(rng: np.random.Generator, policy: RandomTreePolicy) -> Tuple[float, float]:
    """Draw the Z and X rotation angles for one child: both magnitudes, then both signs."""
    a1 = rng.uniform(policy.min_angle_rad, policy.max_angle_rad)
    a2 = rng.uniform(policy.min_angle_rad, policy.max_angle_rad)
    if rng.random() > 0.5:
        a1 = -a1
    if rng.random() > 0.5:
        a2 = -a2
    return a1, a2


def generate_random_tree(
    rng: Optional[np.random.Generator] = None,
    policy: Optional[RandomTreePolicy] = None,
) -> SegmentSet:
    """
    Grow a random tree depth-first from a fixed trunk.

    Pending nodes sit on a stack, so the last child spawned is emitted
    next and its subtree is finished before its siblings.

    Parameters
    ----------
    rng : np.random.Generator, optional
        Random stream (unseeded if omitted)
    policy : RandomTreePolicy, optional
        Trunk, depth budget and branching knobs

    Returns
    -------
    SegmentSet
        Segments with parents emitted before children
    """
    if rng is None:
        rng = np.random.default_rng()
    if policy is None:
        policy = RandomTreePolicy()
    errors = policy.validate()
    if errors:
        raise ValueError(f"Invalid RandomTreePolicy: {'; '.join(errors)}")

    segments = SegmentSet()
    stack = [_Pending(
        start=np.asarray(policy.trunk_start, dtype=float),
        end=np.asarray(policy.trunk_end, dtype=float),
        radius=policy.trunk_radius,
        budget=policy.max_depth,
        parent=None,
        depth=0,
    )]

    while stack:
        node = stack.pop()
        index = segments.append(Segment(
            start=Point3D.from_array(node.start),
            end=Point3D.from_array(node.end),
            radius=float(node.radius),
            depth=node.depth,
            parent=node.parent,
        ))

        if node.budget <= 1:
            continue
        axis = node.end - node.start
        length = float(np.linalg.norm(axis))
        if length < 1e-12:
            continue
        direction = axis / length

        n_children = 1 if rng.random() < policy.single_child_probability else 2
        for _ in range(n_children):
            yaw, pitch = _child_angles(rng, policy)
            d = rotate_about_axis(direction, Z_AXIS, yaw)
            d = rotate_about_axis(d, X_AXIS, pitch)
            stack.append(_Pending(
                start=node.end,
                end=node.end + d * length * policy.length_decay,
                radius=node.radius * policy.radius_decay,
                budget=node.budget - 1,
                parent=index,
                depth=node.depth + 1,
            ))

    logger.info(f"Random tree generated {len(segments)} segments")
    return segments


__all__ = ["generate_random_tree"]
