"""
Generation policies for arbor.

This module contains the policy dataclasses used by the rewriting,
turtle, medial-axis, hybridization and fallback generators. All policies
are JSON-serializable and support the "requested vs effective" pattern.

COORDINATE CONVENTIONS
----------------------
Positions and directions are in renderer coordinates, where +y points
down. The default turtle starts at y = 1 heading toward -y, and tropism
pulls toward world-up at +y.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Tuple
import math

from .base import alias_fields, coerce_vec3


TURTLE_ALIASES = {
    "step_length": "default_step_length",
    "angle_deg": "default_angle_deg",
    "start": "start_position",
    "direction": "heading",
}


@dataclass
class RewritePolicy:
    """
    Policy for the grammar rewriter's probabilistic pruning.

    A matched symbol at bracket depth d is dropped with probability
    ``prune_rate_per_level * (d - prune_start_depth)`` when d exceeds
    ``prune_start_depth`` (clamped to [0, 1]).

    JSON Schema:
    {
        "prune_start_depth": int,
        "prune_rate_per_level": float (0-1)
    }
    """
    prune_start_depth: int = 2
    prune_rate_per_level: float = 0.03

    def prune_probability(self, depth: int) -> float:
        if depth <= self.prune_start_depth:
            return 0.0
        p = self.prune_rate_per_level * (depth - self.prune_start_depth)
        return min(max(p, 0.0), 1.0)

    def validate(self) -> List[str]:
        errors = []
        if self.prune_start_depth < 0:
            errors.append(f"prune_start_depth must be >= 0, got {self.prune_start_depth}")
        if not 0.0 <= self.prune_rate_per_level <= 1.0:
            errors.append(
                f"prune_rate_per_level must be in [0, 1], got {self.prune_rate_per_level}"
            )
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RewritePolicy":
        return RewritePolicy(**{k: v for k, v in d.items() if k in RewritePolicy.__dataclass_fields__})


@dataclass
class TurtlePolicy:
    """
    Policy for the turtle interpreter's initial frame and defaults.

    JSON Schema:
    {
        "start_position": [x, y, z],
        "heading": [x, y, z] (unit),
        "up": [x, y, z] (unit, perpendicular to heading),
        "world_up": [x, y, z] (tropism target),
        "default_step_length": float,
        "default_angle_deg": float (degrees)
    }
    """
    start_position: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    heading: Tuple[float, float, float] = (0.0, -1.0, 0.0)
    up: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    world_up: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    default_step_length: float = 1.0
    default_angle_deg: float = 25.0

    def validate(self) -> List[str]:
        errors = []
        for name in ("heading", "up", "world_up"):
            vec = getattr(self, name)
            if math.sqrt(sum(c * c for c in vec)) < 1e-9:
                errors.append(f"{name} must be a non-zero vector, got {vec}")
        h, u = self.heading, self.up
        cross = (
            h[1] * u[2] - h[2] * u[1],
            h[2] * u[0] - h[0] * u[2],
            h[0] * u[1] - h[1] * u[0],
        )
        if math.sqrt(sum(c * c for c in cross)) < 1e-9:
            errors.append("heading and up must not be parallel")
        if self.default_step_length < 0:
            errors.append(f"default_step_length must be >= 0, got {self.default_step_length}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TurtlePolicy":
        d = alias_fields(d, TURTLE_ALIASES)
        kwargs = {k: v for k, v in d.items() if k in TurtlePolicy.__dataclass_fields__}
        defaults = TurtlePolicy()
        for name in ("start_position", "heading", "up", "world_up"):
            if name in kwargs:
                kwargs[name] = coerce_vec3(kwargs[name], getattr(defaults, name))
        return TurtlePolicy(**kwargs)


@dataclass
class MedialAxisPolicy:
    """
    Policy for the reach-based radius post-pass.

    JSON Schema:
    {
        "reach_scale": float,
        "preserve_radius_noise": bool
    }
    """
    reach_scale: float = 1e-8
    preserve_radius_noise: bool = True

    def validate(self) -> List[str]:
        errors = []
        if self.reach_scale < 0:
            errors.append(f"reach_scale must be >= 0, got {self.reach_scale}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MedialAxisPolicy":
        return MedialAxisPolicy(**{k: v for k, v in d.items() if k in MedialAxisPolicy.__dataclass_fields__})


@dataclass
class HybridizationPolicy:
    """
    Policy for grammar crossbreeding.

    JSON Schema:
    {
        "rule_retention_fraction": float (0-1),
        "min_rules": int
    }
    """
    rule_retention_fraction: float = 0.7
    min_rules: int = 1

    def retained_rule_count(self, total: int) -> int:
        if total <= 0:
            return 0
        keep = max(self.min_rules, int(math.floor(total * self.rule_retention_fraction)))
        return min(keep, total)

    def validate(self) -> List[str]:
        errors = []
        if not 0.0 <= self.rule_retention_fraction <= 1.0:
            errors.append(
                f"rule_retention_fraction must be in [0, 1], got {self.rule_retention_fraction}"
            )
        if self.min_rules < 0:
            errors.append(f"min_rules must be >= 0, got {self.min_rules}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "HybridizationPolicy":
        return HybridizationPolicy(**{k: v for k, v in d.items() if k in HybridizationPolicy.__dataclass_fields__})


@dataclass
class RandomTreePolicy:
    """
    Policy for the fixed-depth random branching generator.

    Each emitted node spawns one child with probability
    ``single_child_probability`` and two otherwise, until the depth budget
    is exhausted. Child directions rotate about Z then X by angles drawn
    from [min_angle_rad, max_angle_rad] with a random sign.

    JSON Schema:
    {
        "trunk_start": [x, y, z],
        "trunk_end": [x, y, z],
        "trunk_radius": float,
        "max_depth": int,
        "single_child_probability": float (0-1),
        "min_angle_rad": float,
        "max_angle_rad": float,
        "length_decay": float,
        "radius_decay": float
    }
    """
    trunk_start: Tuple[float, float, float] = (0.0, -1.0, 0.0)
    trunk_end: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    trunk_radius: float = 0.06
    max_depth: int = 5
    single_child_probability: float = 0.3
    min_angle_rad: float = 0.3
    max_angle_rad: float = 1.0
    length_decay: float = 0.8
    radius_decay: float = 0.7

    def validate(self) -> List[str]:
        errors = []
        if self.max_depth < 1:
            errors.append(f"max_depth must be >= 1, got {self.max_depth}")
        if not 0.0 <= self.single_child_probability <= 1.0:
            errors.append(
                f"single_child_probability must be in [0, 1], got {self.single_child_probability}"
            )
        if self.min_angle_rad > self.max_angle_rad:
            errors.append(
                f"min_angle_rad ({self.min_angle_rad}) must be <= max_angle_rad ({self.max_angle_rad})"
            )
        if self.trunk_radius < 0:
            errors.append(f"trunk_radius must be >= 0, got {self.trunk_radius}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RandomTreePolicy":
        kwargs = {k: v for k, v in d.items() if k in RandomTreePolicy.__dataclass_fields__}
        defaults = RandomTreePolicy()
        for name in ("trunk_start", "trunk_end"):
            if name in kwargs:
                kwargs[name] = coerce_vec3(kwargs[name], getattr(defaults, name))
        return RandomTreePolicy(**kwargs)


__all__ = [
    "RewritePolicy",
    "TurtlePolicy",
    "MedialAxisPolicy",
    "HybridizationPolicy",
    "RandomTreePolicy",
]
