"""
Built-in preset library.

Every preset sets all of its ranges explicitly, so loading with or without
injected randomness gives the same grammar.
"""

from typing import Any, Dict, List, Tuple

from arbor.core.grammar import Grammar
from .presets import load_presets

BUILTIN_PRESETS: List[Dict[str, Any]] = [
    {
        "name": "stalk",
        "axiom": "F",
        "rules": ["F -> F F"],
        "iterations": 3,
        "base_radius": 0.04,
        "radius_scale": [1.0, 1.0],
        "depth_taper": [0.65, 0.65],
        "angle_jitter_deg": [0.0, 0.0],
        "length_jitter": [1.0, 1.0],
        "tropism": 0.0,
        "wander_deg": [0.0, 0.0],
    },
    {
        "name": "oak",
        "axiom": "F(1.2) A(1)",
        "rules": [
            "A(s) : s - 0.15 -> [&(35) F(s) A(s*0.72)] +(137) [&(35) F(s) A(s*0.72)]"
            " +(137) [&(35) F(s*0.9) A(s*0.6)]",
        ],
        "iterations": 6,
        "base_radius": 0.05,
        "radius_scale": [0.9, 1.1],
        "depth_taper": [0.6, 0.7],
        "angle_jitter_deg": [-5.0, 5.0],
        "length_jitter": [0.9, 1.1],
        "tropism": 0.05,
        "wander_deg": [-3.0, 3.0],
    },
    {
        "name": "birch",
        "axiom": "F(1) A(1)",
        "rules": [
            "A(s) : s - 0.2 -> F(s*0.5) [+(30) &(15) F(s*0.6) A(s*0.7)] ^(5)"
            " [-(30) &(15) F(s*0.6) A(s*0.7)] F(s*0.4) A(s*0.8)",
        ],
        "iterations": 5,
        "base_radius": 0.03,
        "radius_scale": [0.95, 1.05],
        "depth_taper": [0.7, 0.75],
        "angle_jitter_deg": [-4.0, 4.0],
        "length_jitter": [0.9, 1.1],
        "tropism": 0.12,
        "wander_deg": [-2.0, 2.0],
    },
    {
        "name": "fern",
        "axiom": "A(1)",
        "rules": [
            "A(s) : s - 0.08 -> F(s) [+(50) F(s*0.4) A(s*0.4)] [-(50) F(s*0.4) A(s*0.4)] A(s*0.85)",
        ],
        "iterations": 8,
        "base_radius": 0.02,
        "radius_scale": [1.0, 1.0],
        "depth_taper": [0.9, 0.9],
        "angle_jitter_deg": [-2.0, 2.0],
        "length_jitter": [0.95, 1.05],
        "tropism": 0.0,
        "wander_deg": [-1.0, 1.0],
    },
    {
        "name": "bush",
        "axiom": "F(0.4) A",
        "rules": [
            "A -> [&(25) F(0.5) A] +(72) [&(25) F(0.5) A] +(72) [&(25) F(0.5) A]",
        ],
        "iterations": 5,
        "base_radius": 0.04,
        "medial_axis": True,
        "radius_scale": [0.8, 1.2],
        "depth_taper": [0.65, 0.65],
        "angle_jitter_deg": [-8.0, 8.0],
        "length_jitter": [0.8, 1.2],
        "tropism": 0.2,
        "wander_deg": [-5.0, 5.0],
    },
]


def builtin_presets() -> List[Tuple[str, Grammar]]:
    """All built-in presets as (name, Grammar) pairs, in library order."""
    return load_presets({"presets": BUILTIN_PRESETS}, inject_random=False)


def preset_names() -> List[str]:
    return [p["name"] for p in BUILTIN_PRESETS]


def get_preset(name: str) -> Grammar:
    """
    Look up a built-in preset by name.

    Raises
    ------
    KeyError
        If no built-in preset has that name
    """
    for preset_name, grammar in builtin_presets():
        if preset_name == name:
            return grammar
    raise KeyError(f"Unknown preset '{name}'. Available: {preset_names()}")


__all__ = ["BUILTIN_PRESETS", "builtin_presets", "preset_names", "get_preset"]
