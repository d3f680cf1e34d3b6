"""
Arbor - procedural branch structure generation

This package grows plant-like branching structures from parametric
rewriting grammars and prepares them for ray-based rendering.

Main Entry Points:
    - generate_structure(): Grow a grammar (or run a fallback backend) and
      build the spatial index in one call
    - expand() / interpret(): Rewrite a grammar, then walk it with the turtle
    - crossbreed() / random_hybrid(): Blend grammars into offspring
    - build_bvh(): Bounding-volume hierarchy over segments

Example:
    >>> from arbor import generate_structure
    >>> from grammarspec.library import get_preset
    >>>
    >>> structure, report = generate_structure(get_preset("fern"), seed=7)
    >>> seg_buf, nodes, leaves = structure.renderer_buffers()
"""

from .api import generate_structure, describe_grammar, GeneratedStructure
from .ops import expand, interpret, crossbreed, random_hybrid, compute_medial_axis_radii
from .spatial import build_bvh, BVH
from .core import Point3D, Segment, SegmentSet, Symbol, ParametricRule, Grammar

__version__ = "0.1.0"

__all__ = [
    "generate_structure",
    "describe_grammar",
    "GeneratedStructure",
    "expand",
    "interpret",
    "crossbreed",
    "random_hybrid",
    "compute_medial_axis_radii",
    "build_bvh",
    "BVH",
    "Point3D",
    "Segment",
    "SegmentSet",
    "Symbol",
    "ParametricRule",
    "Grammar",
]
