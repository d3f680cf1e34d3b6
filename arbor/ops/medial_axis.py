"""
Medial-axis radius post-pass.

Each segment's radius is replaced by a small fraction of its downstream
reach: the largest distance from its start point to its own end point or
the end point of any descendant. Thickness then follows subtree extent
instead of depth-based taper.
"""

from typing import List, Optional
import logging

import networkx as nx
import numpy as np

from arbor_policies import MedialAxisPolicy
from ..core.segments import SegmentSet
from ..adapters.networkx_adapter import to_networkx_graph

logger = logging.getLogger(__name__)


def downstream_reach(segments: SegmentSet) -> List[float]:
    """
    Compute each segment's maximum downstream reach.

    Worst case is quadratic in the number of segments (one descendant
    traversal per segment).

    Returns
    -------
    list of float
        Reach per segment index
    """
    if not segments:
        return []
    G = to_networkx_graph(segments)
    ends = np.array([seg.end.to_tuple() for seg in segments], dtype=float)

    reach = []
    for i, seg in enumerate(segments):
        reachable = [i]
        reachable.extend(nx.descendants(G, i))
        d = np.linalg.norm(ends[reachable] - seg.start.to_array(), axis=1)
        reach.append(float(d.max()))
    return reach


def compute_medial_axis_radii(
    segments: SegmentSet,
    radius_noise: Optional[float] = None,
    policy: Optional[MedialAxisPolicy] = None,
) -> SegmentSet:
    """
    Reassign every segment's radius from its downstream reach, in place.

    Parameters
    ----------
    segments : SegmentSet
        Fully generated segments; only the radius field is rewritten
    radius_noise : float, optional
        Run radius-noise sample, multiplied back in when the policy asks
        to preserve noise
    policy : MedialAxisPolicy, optional
        Reach scale and noise handling

    Returns
    -------
    SegmentSet
        The same collection, for chaining
    """
    if policy is None:
        policy = MedialAxisPolicy()
    errors = policy.validate()
    if errors:
        raise ValueError(f"Invalid MedialAxisPolicy: {'; '.join(errors)}")

    scale = policy.reach_scale
    if policy.preserve_radius_noise and radius_noise is not None:
        scale *= radius_noise

    for seg, reach in zip(segments, downstream_reach(segments)):
        seg.radius = reach * scale

    logger.debug(f"Medial-axis radii assigned to {len(segments)} segments")
    return segments


__all__ = ["downstream_reach", "compute_medial_axis_radii"]
