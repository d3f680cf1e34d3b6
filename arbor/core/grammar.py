"""
Grammar data model: symbols, parametric rules and presets.

A Grammar is immutable once generation begins. Rule conditions and output
parameter formulas are stored as expression text and compiled on first use
(compile_expression caches by text).

RANGES
------
Stochastic knobs are (low, high) pairs sampled uniformly. A pair with
low == high is a constant but still consumes one draw, so the order of the
random stream does not depend on which ranges happen to be degenerate.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from grammarspec.expr import compile_expression

Range = Tuple[float, float]

# Grouping markers: pass through rewriting, push/pop in the turtle
PUSH = "["
POP = "]"
BRACKETS = (PUSH, POP)


@dataclass(frozen=True)
class Symbol:
    """A single-character tag plus numeric parameters."""

    tag: str
    params: Tuple[float, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def is_bracket(self) -> bool:
        return self.tag in BRACKETS

    def param(self, index: int, default: float) -> float:
        if index < len(self.params):
            return self.params[index]
        return default

    def to_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag, "params": list(self.params)}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Symbol":
        return cls(tag=d["tag"], params=tuple(float(p) for p in d.get("params", ())))


@dataclass(frozen=True)
class OutputSymbol:
    """A successor symbol whose parameters are expressions over the rule's names."""

    tag: str
    exprs: Tuple[str, ...] = ()

    def instantiate(self, env: Mapping[str, float]) -> Symbol:
        """
        Evaluate the parameter expressions into a concrete Symbol.

        Raises
        ------
        UnknownVariableError
            If an expression names a variable missing from env
        """
        return Symbol(self.tag, tuple(compile_expression(e)(env) for e in self.exprs))

    def to_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag, "exprs": list(self.exprs)}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "OutputSymbol":
        return cls(tag=d["tag"], exprs=tuple(str(e) for e in d.get("exprs", ())))


@dataclass(frozen=True)
class ParametricRule:
    """
    Rewrite rule ``head(params) : condition -> successor``.

    A rule matches a symbol with the same tag and the same number of
    parameters as ``params``. The condition, when present, is evaluated with
    the symbol's parameters bound to those names; the rule applies only
    when the result is > 0 (a NaN result does not apply either).
    """

    head: str
    params: Tuple[str, ...] = ()
    condition: Optional[str] = None
    successor: Tuple[OutputSymbol, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.params)

    def matches(self, symbol: Symbol) -> bool:
        return symbol.tag == self.head and symbol.arity == self.arity

    def bind(self, symbol: Symbol) -> Dict[str, float]:
        return dict(zip(self.params, symbol.params))

    def applies(self, env: Mapping[str, float]) -> bool:
        if self.condition is None:
            return True
        return compile_expression(self.condition)(env) > 0

    def produce(self, env: Mapping[str, float]) -> List[Symbol]:
        return [out.instantiate(env) for out in self.successor]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "head": self.head,
            "params": list(self.params),
            "condition": self.condition,
            "successor": [s.to_dict() for s in self.successor],
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ParametricRule":
        return cls(
            head=d["head"],
            params=tuple(d.get("params", ())),
            condition=d.get("condition"),
            successor=tuple(OutputSymbol.from_dict(s) for s in d.get("successor", ())),
        )


def _as_range(value: Any) -> Range:
    lo, hi = value
    return (float(lo), float(hi))


@dataclass(frozen=True)
class Grammar:
    """
    A parametric rewriting preset describing one species.

    Attributes
    ----------
    name : str
        Display name
    axiom : tuple of Symbol
        Iteration-0 symbol sequence
    rules : tuple of ParametricRule
        Rules in declaration order (first match wins)
    iterations : int
        Number of rewrite passes
    base_radius : float
        Radius per unit of segment length before noise and taper
    medial_axis : bool
        Use the reach-based radius post-pass instead of depth taper
    radius_scale : (float, float)
        Radius noise multiplier range
    depth_taper : (float, float)
        Per-depth radius taper range (radius scales by taper ** depth)
    angle_jitter_deg : (float, float)
        Range added to every turn angle, degrees
    length_jitter : (float, float)
        Forward step length multiplier range
    tropism : float
        Blend strength toward world-up after each forward step, 0 disables
    wander_deg : (float, float)
        Yaw and pitch wander range applied per forward step, degrees
    auto_randomise : bool
        Re-draw radius noise and taper per forward step instead of per run
    """

    name: str = "unnamed"
    axiom: Tuple[Symbol, ...] = ()
    rules: Tuple[ParametricRule, ...] = ()
    iterations: int = 6
    base_radius: float = 0.04
    medial_axis: bool = False
    radius_scale: Range = (1.0, 1.0)
    depth_taper: Range = (0.65, 0.65)
    angle_jitter_deg: Range = (0.0, 0.0)
    length_jitter: Range = (1.0, 1.0)
    tropism: float = 0.0
    wander_deg: Range = (0.0, 0.0)
    auto_randomise: bool = False

    def with_changes(self, **changes: Any) -> "Grammar":
        return replace(self, **changes)

    def validate(self) -> List[str]:
        """
        Check numeric knobs. Rules are deliberately not type-checked
        against the axiom.

        Returns
        -------
        List[str]
            Validation error messages (empty if valid)
        """
        errors = []

        if self.iterations < 0:
            errors.append(f"iterations must be >= 0, got {self.iterations}")

        if self.base_radius < 0:
            errors.append(f"base_radius must be >= 0, got {self.base_radius}")

        if self.tropism < 0 or self.tropism > 1:
            errors.append(f"tropism must be in [0, 1], got {self.tropism}")

        for sym in self.axiom:
            if len(sym.tag) != 1:
                errors.append(f"axiom symbol tag must be one character, got {sym.tag!r}")

        for i, rule in enumerate(self.rules):
            if len(rule.head) != 1:
                errors.append(f"rule {i}: head must be one character, got {rule.head!r}")
            if len(set(rule.params)) != len(rule.params):
                errors.append(f"rule {i}: duplicate parameter names {rule.params}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "axiom": [s.to_dict() for s in self.axiom],
            "rules": [r.to_dict() for r in self.rules],
            "iterations": self.iterations,
            "base_radius": self.base_radius,
            "medial_axis": self.medial_axis,
            "radius_scale": list(self.radius_scale),
            "depth_taper": list(self.depth_taper),
            "angle_jitter_deg": list(self.angle_jitter_deg),
            "length_jitter": list(self.length_jitter),
            "tropism": self.tropism,
            "wander_deg": list(self.wander_deg),
            "auto_randomise": self.auto_randomise,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Grammar":
        """Rebuild from to_dict() output; missing knobs take their defaults."""
        kwargs: Dict[str, Any] = {}
        if "name" in d:
            kwargs["name"] = str(d["name"])
        if "axiom" in d:
            kwargs["axiom"] = tuple(Symbol.from_dict(s) for s in d["axiom"])
        if "rules" in d:
            kwargs["rules"] = tuple(ParametricRule.from_dict(r) for r in d["rules"])
        if "iterations" in d:
            kwargs["iterations"] = int(d["iterations"])
        for key in ("base_radius", "tropism"):
            if key in d:
                kwargs[key] = float(d[key])
        for key in ("medial_axis", "auto_randomise"):
            if key in d:
                kwargs[key] = bool(d[key])
        for key in RANGE_FIELDS:
            if key in d:
                kwargs[key] = _as_range(d[key])
        return cls(**kwargs)


RANGE_FIELDS = (
    "radius_scale",
    "depth_taper",
    "angle_jitter_deg",
    "length_jitter",
    "wander_deg",
)

SCALAR_FIELDS = ("base_radius", "tropism")


__all__ = [
    "Symbol",
    "OutputSymbol",
    "ParametricRule",
    "Grammar",
    "Range",
    "RANGE_FIELDS",
    "SCALAR_FIELDS",
    "PUSH",
    "POP",
    "BRACKETS",
]
