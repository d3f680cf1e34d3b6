"""
Grammar preset loading.

Presets are JSON documents of the form::

    {
      "presets": [
        {
          "name": "oak",
          "axiom": "F(1) A(1)",
          "rules": ["A(s) : s - 0.15 -> F(s) [+(30) A(s*0.7)] A(s*0.8)"],
          "iterations": 6,
          "base_radius": 0.04,
          "medial_axis": false,
          "radius_scale": [0.9, 1.1],
          "depth_taper": [0.6, 0.7],
          "angle_jitter_deg": [-5, 5],
          "length_jitter": [0.9, 1.1],
          "tropism": 0.05,
          "wander_deg": [-3, 3]
        }
      ]
    }

Only ``axiom`` is required. Ranges are two-element lists.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union
import json
import logging

from arbor.core.grammar import Grammar, RANGE_FIELDS
from .syntax import GrammarSyntaxError, parse_axiom, parse_rule, format_axiom, format_rule

logger = logging.getLogger(__name__)


class PresetLoadError(ValueError):
    """Raised when a preset file or mapping is unreadable or malformed."""
    pass


# Ranges filled in for presets that leave them out when randomness is injected
ORGANIC_RANGES: Dict[str, Tuple[float, float]] = {
    "radius_scale": (0.85, 1.15),
    "depth_taper": (0.6, 0.75),
    "angle_jitter_deg": (-6.0, 6.0),
    "length_jitter": (0.85, 1.15),
    "wander_deg": (-4.0, 4.0),
}

KNOWN_KEYS = {
    "name", "axiom", "rules", "iterations", "base_radius", "medial_axis",
    "tropism", "auto_randomise",
} | set(RANGE_FIELDS)


def _range(value: Any, key: str, where: str) -> Tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise PresetLoadError(f"{where}: '{key}' must be a two-element list, got {value!r}")
    try:
        return (float(value[0]), float(value[1]))
    except (TypeError, ValueError) as e:
        raise PresetLoadError(f"{where}: '{key}' must hold numbers, got {value!r}") from e


def _number(value: Any, key: str, where: str, cast=float):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PresetLoadError(f"{where}: '{key}' must be a number, got {value!r}")
    return cast(value)


def _flag(value: Any, key: str, where: str) -> bool:
    if not isinstance(value, bool):
        raise PresetLoadError(f"{where}: '{key}' must be true or false, got {value!r}")
    return value


def preset_from_dict(d: Mapping[str, Any], inject_random: bool = True, index: int = 0) -> Grammar:
    """
    Build a Grammar from one preset mapping.

    Parameters
    ----------
    d : mapping
        Preset fields (see module docstring)
    inject_random : bool
        Fill unspecified ranges from ORGANIC_RANGES and mark the grammar
        auto-randomised
    index : int
        Position in the preset list, used for the default name and messages

    Raises
    ------
    PresetLoadError
        On missing axiom, wrong types or unparsable axiom/rule text
    """
    if not isinstance(d, Mapping):
        raise PresetLoadError(f"preset #{index} must be an object, got {type(d).__name__}")
    name = str(d.get("name", f"preset_{index}"))
    where = f"preset '{name}'"

    if "axiom" not in d:
        raise PresetLoadError(f"{where}: missing 'axiom'")
    if not isinstance(d["axiom"], str):
        raise PresetLoadError(f"{where}: 'axiom' must be a string")
    rules_text = d.get("rules", [])
    if not isinstance(rules_text, list) or not all(isinstance(r, str) for r in rules_text):
        raise PresetLoadError(f"{where}: 'rules' must be a list of strings")

    unknown = set(d) - KNOWN_KEYS
    if unknown:
        logger.warning(f"{where}: ignoring unknown keys {sorted(unknown)}")

    try:
        axiom = parse_axiom(d["axiom"])
        rules = tuple(parse_rule(r) for r in rules_text)
    except GrammarSyntaxError as e:
        raise PresetLoadError(f"{where}: {e}") from e

    kwargs: Dict[str, Any] = {"name": name, "axiom": axiom, "rules": rules}
    if "iterations" in d:
        kwargs["iterations"] = _number(d["iterations"], "iterations", where, int)
    if "base_radius" in d:
        kwargs["base_radius"] = _number(d["base_radius"], "base_radius", where)
    if "tropism" in d:
        kwargs["tropism"] = _number(d["tropism"], "tropism", where)
    if "medial_axis" in d:
        kwargs["medial_axis"] = _flag(d["medial_axis"], "medial_axis", where)

    missing = []
    for key in RANGE_FIELDS:
        if key in d:
            kwargs[key] = _range(d[key], key, where)
        else:
            missing.append(key)

    auto = _flag(d.get("auto_randomise", False), "auto_randomise", where)
    if inject_random and missing:
        for key in missing:
            kwargs[key] = ORGANIC_RANGES[key]
        auto = True
        logger.debug(f"{where}: injected organic ranges for {missing}")
    kwargs["auto_randomise"] = auto

    grammar = Grammar(**kwargs)
    problems = grammar.validate()
    if problems:
        raise PresetLoadError(f"{where}: {'; '.join(problems)}")
    return grammar


def load_presets(
    source: Union[str, Path, Mapping[str, Any], List[Mapping[str, Any]]],
    inject_random: bool = True,
) -> List[Tuple[str, Grammar]]:
    """
    Load an ordered list of (name, Grammar) presets.

    Parameters
    ----------
    source : path, mapping or list
        A JSON file path, an already-parsed ``{"presets": [...]}`` mapping,
        or the bare list of preset mappings
    inject_random : bool
        See preset_from_dict

    Returns
    -------
    list of (str, Grammar)
        Presets in file order

    Raises
    ------
    PresetLoadError
        If the file cannot be read or parsed, or any preset is malformed
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except OSError as e:
            raise PresetLoadError(f"cannot read preset file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise PresetLoadError(f"invalid JSON in {path}: {e}") from e
    else:
        data = source

    if isinstance(data, Mapping):
        if "presets" not in data:
            raise PresetLoadError("preset document has no 'presets' list")
        entries = data["presets"]
    else:
        entries = data
    if not isinstance(entries, list):
        raise PresetLoadError(f"'presets' must be a list, got {type(entries).__name__}")

    presets = []
    for i, entry in enumerate(entries):
        grammar = preset_from_dict(entry, inject_random=inject_random, index=i)
        presets.append((grammar.name, grammar))

    logger.info(f"Loaded {len(presets)} presets")
    return presets


def grammar_to_preset(grammar: Grammar) -> Dict[str, Any]:
    """Inverse of preset_from_dict (text axiom and rules, explicit ranges)."""
    d: Dict[str, Any] = {
        "name": grammar.name,
        "axiom": format_axiom(grammar.axiom),
        "rules": [format_rule(r) for r in grammar.rules],
        "iterations": grammar.iterations,
        "base_radius": grammar.base_radius,
        "medial_axis": grammar.medial_axis,
        "tropism": grammar.tropism,
        "auto_randomise": grammar.auto_randomise,
    }
    for key in RANGE_FIELDS:
        d[key] = list(getattr(grammar, key))
    return d


def save_presets(grammars: List[Grammar], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump({"presets": [grammar_to_preset(g) for g in grammars]}, f, indent=2)
    logger.info(f"Saved {len(grammars)} presets to {path}")
    return path


__all__ = [
    "PresetLoadError",
    "ORGANIC_RANGES",
    "preset_from_dict",
    "load_presets",
    "grammar_to_preset",
    "save_presets",
]
