"""
Run-directory export for generated structures.

A run directory collects everything one generation produced: renderer
buffers (.npz), segments and grammar as JSON, an optional mesh and the
OperationReport.
"""

from typing import Optional, Dict, Any, Union, TYPE_CHECKING
from pathlib import Path
import json
import time
import logging

import numpy as np

from arbor_policies import OutputPolicy, OperationReport, MeshSynthesisPolicy

if TYPE_CHECKING:
    import trimesh
    from .generate import GeneratedStructure

logger = logging.getLogger(__name__)


def make_run_dir(
    output_policy: Optional[OutputPolicy] = None,
    run_name: Optional[str] = None,
) -> Path:
    """
    Create (if needed) and return the directory for one run.

    The name is ``run_name`` when given, else the policy's run name,
    suffixed with a timestamp under the "timestamped" convention.
    """
    policy = output_policy or OutputPolicy()
    name = run_name or policy.run_name
    if not run_name and policy.naming_convention == "timestamped":
        name = f"{name}_{time.strftime('%Y%m%d_%H%M%S')}"

    run_dir = Path(policy.output_dir) / name
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _target(rel_path: str, output_policy: Optional[OutputPolicy], run_dir: Optional[Path]) -> Path:
    if run_dir is None:
        run_dir = make_run_dir(output_policy)
    path = Path(run_dir) / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def write_json(
    data: Union[Dict[str, Any], OperationReport],
    rel_path: str,
    output_policy: Optional[OutputPolicy] = None,
    run_dir: Optional[Path] = None,
) -> Path:
    """
    Write a mapping (or anything with ``to_dict()``) as indented JSON.

    Parameters
    ----------
    data : dict or OperationReport
        Payload
    rel_path : str
        File name inside the run directory
    output_policy : OutputPolicy, optional
        Used to create a run directory when ``run_dir`` is omitted
    run_dir : Path, optional
        Target run directory

    Returns
    -------
    Path
        Written file
    """
    path = _target(rel_path, output_policy, run_dir)
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    with open(path, "w") as f:
        json.dump(payload, f, indent=2, default=str)
    logger.info(f"Wrote {path}")
    return path


def save_renderer_buffers(
    structure: "GeneratedStructure",
    rel_path: str = "buffers.npz",
    output_policy: Optional[OutputPolicy] = None,
    run_dir: Optional[Path] = None,
) -> Path:
    """
    Save the renderer buffers as a compressed .npz.

    Arrays: ``segments`` (N, 9) float32, ``parents`` (N,) int32 (exact
    parent indices), ``bvh_nodes`` structured node array, ``leaf_indices``
    uint32.
    """
    output_path = _target(rel_path, output_policy, run_dir)
    segments, nodes, leaves = structure.renderer_buffers()
    np.savez_compressed(
        output_path,
        segments=segments,
        parents=structure.segments.parent_indices(),
        bvh_nodes=nodes,
        leaf_indices=leaves,
    )
    logger.info(f"Saved renderer buffers to {output_path}")
    return output_path


def save_mesh(
    mesh: "trimesh.Trimesh",
    rel_path: str,
    output_policy: Optional[OutputPolicy] = None,
    run_dir: Optional[Path] = None,
) -> Path:
    """
    Save a mesh; the format follows the file extension (stl, obj, ply).
    """
    output_path = _target(rel_path, output_policy, run_dir)
    mesh.export(str(output_path))
    logger.info(f"Saved mesh to {output_path}")
    return output_path


def export_all(
    structure: "GeneratedStructure",
    report: Optional[OperationReport] = None,
    output_policy: Optional[OutputPolicy] = None,
    mesh_policy: Optional[MeshSynthesisPolicy] = None,
    run_dir: Optional[Path] = None,
) -> Dict[str, Path]:
    """
    Write every artifact of a run.

    Writes renderer buffers and segments JSON always, the grammar (when
    present) as preset JSON, the report when the policy saves reports, and
    a mesh when ``output_policy.mesh_format`` is set.

    Returns
    -------
    dict
        Artifact name -> written path
    """
    if output_policy is None:
        output_policy = OutputPolicy()
    errors = output_policy.validate()
    if errors:
        raise ValueError(f"Invalid OutputPolicy: {'; '.join(errors)}")
    if run_dir is None:
        run_dir = make_run_dir(output_policy)

    paths: Dict[str, Path] = {}
    paths["buffers"] = save_renderer_buffers(structure, run_dir=run_dir)
    paths["segments"] = write_json(structure.segments.to_dict(), "segments.json", run_dir=run_dir)

    if structure.grammar is not None:
        from grammarspec.presets import grammar_to_preset
        paths["grammar"] = write_json(
            {"presets": [grammar_to_preset(structure.grammar)]}, "grammar.json", run_dir=run_dir
        )

    if output_policy.mesh_format is not None:
        from ..adapters.mesh_adapter import to_trimesh
        mesh, mesh_report = to_trimesh(structure.segments, mesh_policy)
        if len(mesh.faces):
            paths["mesh"] = save_mesh(mesh, f"structure.{output_policy.mesh_format}", run_dir=run_dir)
        if report is not None:
            report.merge(mesh_report, prefix="mesh")

    if report is not None and output_policy.save_reports:
        report.effective_policy["output"] = output_policy.to_dict()
        paths["report"] = write_json(report, "report.json", run_dir=run_dir)

    return paths


__all__ = [
    "make_run_dir",
    "write_json",
    "save_renderer_buffers",
    "save_mesh",
    "export_all",
]
