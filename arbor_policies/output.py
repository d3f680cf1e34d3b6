"""
Spatial index, mesh synthesis and output policies.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Literal, Optional


@dataclass
class SpatialIndexPolicy:
    """
    Policy for the bounding-volume tree builder.

    JSON Schema:
    {
        "leaf_size": int (1 to 0x7FFFFFFF)
    }
    """
    leaf_size: int = 8

    def validate(self) -> List[str]:
        errors = []
        if self.leaf_size < 1:
            errors.append(f"leaf_size must be >= 1, got {self.leaf_size}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "SpatialIndexPolicy":
        return SpatialIndexPolicy(**{k: v for k, v in d.items() if k in SpatialIndexPolicy.__dataclass_fields__})


@dataclass
class MeshSynthesisPolicy:
    """
    Policy for converting segments to a triangle mesh.

    JSON Schema:
    {
        "segments_per_circle": int,
        "cap_ends": bool,
        "min_radius": float | null,
        "min_length": float
    }

    Segments shorter than ``min_length`` are skipped. When ``min_radius`` is
    set, thinner segments are widened to it; otherwise zero-radius segments
    are skipped.
    """
    segments_per_circle: int = 8
    cap_ends: bool = True
    min_radius: Optional[float] = None
    min_length: float = 1e-12

    def validate(self) -> List[str]:
        errors = []
        if self.segments_per_circle < 3:
            errors.append(f"segments_per_circle must be >= 3, got {self.segments_per_circle}")
        if self.min_radius is not None and self.min_radius <= 0:
            errors.append(f"min_radius must be > 0 when set, got {self.min_radius}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MeshSynthesisPolicy":
        return MeshSynthesisPolicy(**{k: v for k, v in d.items() if k in MeshSynthesisPolicy.__dataclass_fields__})


@dataclass
class OutputPolicy:
    """
    Policy for output file generation.

    JSON Schema:
    {
        "output_dir": str,
        "naming_convention": "fixed" | "timestamped",
        "run_name": str,
        "save_reports": bool,
        "mesh_format": "stl" | "obj" | "ply" | null
    }
    """
    output_dir: str = "./output"
    naming_convention: Literal["fixed", "timestamped"] = "timestamped"
    run_name: str = "run"
    save_reports: bool = True
    mesh_format: Optional[Literal["stl", "obj", "ply"]] = None

    def validate(self) -> List[str]:
        errors = []
        if self.naming_convention not in ("fixed", "timestamped"):
            errors.append(f"unknown naming_convention {self.naming_convention!r}")
        if self.mesh_format is not None and self.mesh_format not in ("stl", "obj", "ply"):
            errors.append(f"unknown mesh_format {self.mesh_format!r}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "OutputPolicy":
        return OutputPolicy(**{k: v for k, v in d.items() if k in OutputPolicy.__dataclass_fields__})


__all__ = [
    "SpatialIndexPolicy",
    "MeshSynthesisPolicy",
    "OutputPolicy",
]
