"""
Shared policy helpers and the OperationReport returned by arbor operations.

Policies are plain dataclasses; these helpers let ``from_dict`` accept the
loose shapes that show up in preset files and CLI overrides (lists, dicts,
objects with x/y/z, alternate field names).
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Tuple
import json

Vec3 = Tuple[float, float, float]


def coerce_vec3(value: Any, default: Vec3 = (0.0, 0.0, 0.0)) -> Vec3:
    """
    Read a 3-vector from a sequence, an {x, y, z} mapping or an object
    with x/y/z attributes. Anything unreadable yields ``default``.
    """
    if value is None:
        return default

    if isinstance(value, dict):
        parts = [value.get(k) for k in ("x", "y", "z")]
    elif all(hasattr(value, k) for k in ("x", "y", "z")):
        parts = [value.x, value.y, value.z]
    else:
        try:
            parts = list(value)
        except TypeError:
            return default

    if len(parts) != 3:
        return default
    try:
        x, y, z = (float(p) for p in parts)
    except (TypeError, ValueError):
        return default
    return (x, y, z)


def alias_fields(d: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    """
    Rename alternate keys to their canonical field names.

    ``aliases`` maps alternate -> canonical. When both spellings are
    present the canonical one is kept.
    """
    result = dict(d)
    for alt_name, canonical_name in aliases.items():
        if alt_name in result:
            value = result.pop(alt_name)
            result.setdefault(canonical_name, value)
    return result


@dataclass
class OperationReport:
    """
    Outcome of one arbor operation.

    ``requested_policy`` is what the caller asked for and
    ``effective_policy`` what actually ran (for example the seed drawn when
    none was given). Warnings never flip ``success``; errors do.
    """
    operation: str = "unknown"
    success: bool = True
    requested_policy: Dict[str, Any] = field(default_factory=dict)
    effective_policy: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=_json_default)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.success = False

    def merge(self, other: "OperationReport", prefix: Optional[str] = None) -> None:
        """
        Merge another report into this one.

        Metrics from ``other`` are namespaced with ``prefix + "."`` when a
        prefix is given.
        """
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)
        if not other.success:
            self.success = False
        for key, value in other.metrics.items():
            self.metrics[f"{prefix}.{key}" if prefix else key] = value


def _json_default(obj: Any) -> Any:
    # numpy scalars and arrays end up in metrics
    if hasattr(obj, "tolist"):
        return obj.tolist()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


__all__ = [
    "OperationReport",
    "coerce_vec3",
    "alias_fields",
]
