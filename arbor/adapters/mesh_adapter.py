"""
Adapter from SegmentSet to triangle meshes via trimesh.
"""

from typing import Optional, Tuple, TYPE_CHECKING
import logging

import numpy as np

from arbor_policies import MeshSynthesisPolicy, OperationReport
from ..core.segments import Segment, SegmentSet

if TYPE_CHECKING:
    import trimesh

logger = logging.getLogger(__name__)


def segment_to_cylinder(
    segment: Segment,
    radius: float,
    sections: int,
    cap_ends: bool = True,
) -> "trimesh.Trimesh":
    """
    Cylinder mesh along one segment's axis.

    With cap_ends=False the end caps are removed, leaving an open tube.
    """
    import trimesh

    start = segment.start.to_array()
    end = segment.end.to_array()
    cylinder = trimesh.creation.cylinder(
        radius=radius,
        sections=sections,
        segment=np.stack([start, end]),
    )
    if cap_ends:
        return cylinder

    axis = (end - start) / np.linalg.norm(end - start)
    side = np.abs(cylinder.face_normals @ axis) < 0.5
    return trimesh.Trimesh(
        vertices=cylinder.vertices,
        faces=cylinder.faces[side],
        process=False,
    )


def to_trimesh(
    segments: SegmentSet,
    policy: Optional[MeshSynthesisPolicy] = None,
) -> Tuple["trimesh.Trimesh", OperationReport]:
    """
    Build one cylinder per segment and concatenate them.

    Parameters
    ----------
    segments : SegmentSet
        Segments to mesh
    policy : MeshSynthesisPolicy, optional
        Tessellation and skipping rules

    Returns
    -------
    mesh : trimesh.Trimesh
        Combined mesh (empty when nothing could be meshed)
    report : OperationReport
        Counts of meshed and skipped segments
    """
    import trimesh

    if policy is None:
        policy = MeshSynthesisPolicy()
    errors = policy.validate()
    if errors:
        raise ValueError(f"Invalid MeshSynthesisPolicy: {'; '.join(errors)}")

    report = OperationReport(operation="to_trimesh", requested_policy=policy.to_dict())
    meshes = []
    skipped_short = 0
    skipped_thin = 0
    widened = 0

    for seg in segments:
        if seg.length < policy.min_length:
            skipped_short += 1
            continue
        radius = seg.radius
        if policy.min_radius is not None and radius < policy.min_radius:
            radius = policy.min_radius
            widened += 1
        if radius <= 0:
            skipped_thin += 1
            continue
        meshes.append(segment_to_cylinder(seg, radius, policy.segments_per_circle, policy.cap_ends))

    if meshes:
        mesh = trimesh.util.concatenate(meshes)
    else:
        mesh = trimesh.Trimesh()
        report.add_warning("No segments could be meshed")

    if skipped_short:
        report.add_warning(f"Skipped {skipped_short} zero-length segments")
    if skipped_thin:
        report.add_warning(f"Skipped {skipped_thin} zero-radius segments")

    report.effective_policy = policy.to_dict()
    report.metrics.update({
        "meshed_segments": len(meshes),
        "skipped_short": skipped_short,
        "skipped_thin": skipped_thin,
        "widened": widened,
        "vertex_count": int(len(mesh.vertices)),
        "face_count": int(len(mesh.faces)),
    })
    logger.debug(f"Meshed {len(meshes)}/{len(segments)} segments")
    return mesh, report


__all__ = ["to_trimesh", "segment_to_cylinder"]
