"""
High-level regeneration API.

generate_structure() is the one-call entry used by renderers and capture
tools: it runs a generation backend and then builds the spatial index over
the fresh segments. Every call produces new, independent objects.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union
import logging
import time

import numpy as np

from arbor_policies import OperationReport, SpatialIndexPolicy
from ..backends import BackendConfig, get_backend, get_available_backends
from ..core.grammar import Grammar
from ..core.segments import SegmentSet
from ..spatial.bvh import BVH, build_bvh

logger = logging.getLogger(__name__)


@dataclass
class GeneratedStructure:
    """
    Immutable snapshot of one generation run.

    Attributes
    ----------
    segments : SegmentSet
        Generated segments
    index : BVH
        Spatial index over segments
    grammar : Grammar or None
        Grammar that was grown (None for grammar-free backends)
    seed : int
        Seed of the run's random stream
    backend : str
        Backend name
    """
    segments: SegmentSet
    index: BVH
    grammar: Optional[Grammar]
    seed: int
    backend: str = "lsystem"

    def renderer_buffers(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(segment buffer, node buffer, leaf-index buffer) for the renderer."""
        nodes, leaves = self.index.to_buffers()
        return self.segments.to_buffer(), nodes, leaves


def _resolve_source(source: Union[Grammar, str]) -> Tuple[str, Optional[Grammar]]:
    if isinstance(source, Grammar):
        return "lsystem", source
    if not isinstance(source, str):
        raise TypeError(f"Expected a Grammar or a name, got {type(source).__name__}")

    backend_class = get_backend(source)
    if backend_class is not None:
        if backend_class().requires_grammar:
            raise ValueError(f"Backend '{source}' requires a grammar")
        return source, None

    from grammarspec.library import get_preset
    try:
        return "lsystem", get_preset(source)
    except KeyError:
        raise ValueError(
            f"'{source}' is neither a backend ({', '.join(get_available_backends())}) "
            f"nor a built-in preset"
        ) from None


def generate_structure(
    source: Union[Grammar, str],
    seed: Optional[int] = None,
    config: Optional[BackendConfig] = None,
    index_policy: Optional[SpatialIndexPolicy] = None,
) -> Tuple[GeneratedStructure, OperationReport]:
    """
    Generate segments and their spatial index in one call.

    Parameters
    ----------
    source : Grammar or str
        A Grammar, a grammar-free backend name ("random_tree") or the name
        of a built-in preset
    seed : int, optional
        Seed for the run's single random stream. When omitted a fresh seed
        is drawn and recorded so the run can be reproduced.
    config : BackendConfig, optional
        Backend configuration (LSystemConfig / RandomTreeConfig)
    index_policy : SpatialIndexPolicy, optional
        Spatial index knobs

    Returns
    -------
    structure : GeneratedStructure
        Segments, index, grammar and effective seed
    report : OperationReport
        Requested/effective settings and metrics

    Raises
    ------
    ValueError
        If the source cannot be resolved or a policy is invalid
    """
    if index_policy is None:
        index_policy = SpatialIndexPolicy()

    backend_name, grammar = _resolve_source(source)
    backend = get_backend(backend_name)()

    report = OperationReport(
        operation="generate_structure",
        requested_policy={
            "backend": backend_name,
            "seed": seed,
            "index": index_policy.to_dict(),
        },
    )

    if grammar is not None:
        problems = grammar.validate()
        if problems:
            raise ValueError(f"Invalid grammar '{grammar.name}': {'; '.join(problems)}")
        logger.info(
            f"Generating '{grammar.name}': {grammar.iterations} iterations, "
            f"{len(grammar.rules)} rules, base radius {grammar.base_radius}"
        )

    effective_seed = seed
    if effective_seed is None:
        effective_seed = int(np.random.SeedSequence().generate_state(1)[0])
        report.metrics["seed_drawn"] = True
        logger.info(f"No seed given; drew seed {effective_seed}")
    rng = np.random.default_rng(effective_seed)

    t0 = time.perf_counter()
    result = backend.generate(grammar=grammar, config=config, rng=rng)
    t1 = time.perf_counter()
    index = build_bvh(result.segments, index_policy)
    t2 = time.perf_counter()

    segments = result.segments
    if not segments:
        report.add_warning("Generation produced no segments")

    report.effective_policy = dict(report.requested_policy, seed=effective_seed)
    report.metrics.update(result.metrics)
    report.metrics.update({
        "segment_count": len(segments),
        "max_depth": segments.max_depth,
        "root_count": len(segments.roots()),
        "generate_seconds": t1 - t0,
        "index_seconds": t2 - t1,
    })
    report.metrics.update({f"index_{k}": v for k, v in index.summary().items()})

    logger.info(
        f"Generated {len(segments)} segments, index with {len(index.nodes)} nodes "
        f"({index.leaf_count} leaves)"
    )

    structure = GeneratedStructure(
        segments=segments,
        index=index,
        grammar=grammar,
        seed=effective_seed,
        backend=backend_name,
    )
    return structure, report


def _fmt_range(r) -> str:
    return f"[{r[0]:g}, {r[1]:g}]"


def describe_grammar(grammar: Grammar) -> str:
    """
    Human-readable preset summary: knobs, axiom and numbered rules.
    """
    from grammarspec.syntax import format_axiom, format_rule

    lines = [
        f"Preset: {grammar.name}",
        f"  iterations       : {grammar.iterations}",
        f"  base radius      : {grammar.base_radius:g}",
        f"  medial axis      : {'yes' if grammar.medial_axis else 'no'}",
        f"  radius scale     : {_fmt_range(grammar.radius_scale)}",
        f"  depth taper      : {_fmt_range(grammar.depth_taper)}",
        f"  angle jitter deg : {_fmt_range(grammar.angle_jitter_deg)}",
        f"  length jitter    : {_fmt_range(grammar.length_jitter)}",
        f"  tropism          : {grammar.tropism:g}",
        f"  wander deg       : {_fmt_range(grammar.wander_deg)}",
        f"  auto randomise   : {'yes' if grammar.auto_randomise else 'no'}",
        f"  axiom            : {format_axiom(grammar.axiom)}",
        f"  rules ({len(grammar.rules)}):",
    ]
    for i, rule in enumerate(grammar.rules, start=1):
        lines.append(f"    {i:2d}. {format_rule(rule)}")
    return "\n".join(lines)


__all__ = ["GeneratedStructure", "generate_structure", "describe_grammar"]
