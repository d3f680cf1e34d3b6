"""
Arbor Policies - policy definitions for branch structure generation.

This package provides all policy dataclasses used by the generator, the
spatial index and the exporters. All policies are JSON-serializable and
support the "requested vs effective" pattern for tracking runtime
adjustments.

Usage:
    from arbor_policies import TurtlePolicy, OperationReport
    from arbor_policies.output import SpatialIndexPolicy
"""

from .base import (
    OperationReport,
    coerce_vec3,
    alias_fields,
)

from .generation import (
    RewritePolicy,
    TurtlePolicy,
    MedialAxisPolicy,
    HybridizationPolicy,
    RandomTreePolicy,
)

from .output import (
    SpatialIndexPolicy,
    MeshSynthesisPolicy,
    OutputPolicy,
)

__all__ = [
    "OperationReport",
    "coerce_vec3",
    "alias_fields",
    "RewritePolicy",
    "TurtlePolicy",
    "MedialAxisPolicy",
    "HybridizationPolicy",
    "RandomTreePolicy",
    "SpatialIndexPolicy",
    "MeshSynthesisPolicy",
    "OutputPolicy",
]
