"""
Generation operations: rewriting, turtle interpretation, post-passes,
hybridization and the fallback random tree.
"""

from .rewrite import find_rule, rewrite_pass, expand
from .turtle import interpret, draw_variation_samples, VariationSamples
from .medial_axis import compute_medial_axis_radii, downstream_reach
from .hybridize import crossbreed, random_hybrid, HybridizationError
from .random_tree import generate_random_tree

__all__ = [
    "find_rule",
    "rewrite_pass",
    "expand",
    "interpret",
    "draw_variation_samples",
    "VariationSamples",
    "compute_medial_axis_radii",
    "downstream_reach",
    "crossbreed",
    "random_hybrid",
    "HybridizationError",
    "generate_random_tree",
]
