"""
Basic geometric value types.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple
import math

import numpy as np


@dataclass(frozen=True)
class Point3D:
    """Immutable 3D point (renderer coordinates)."""

    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_array(cls, arr: Iterable[float]) -> "Point3D":
        x, y, z = (float(v) for v in arr)
        return cls(x, y, z)

    def distance_to(self, other: "Point3D") -> float:
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, d: dict) -> "Point3D":
        return cls(float(d["x"]), float(d["y"]), float(d["z"]))


ORIGIN = Point3D(0.0, 0.0, 0.0)


__all__ = ["Point3D", "ORIGIN"]
