"""
Grammar-driven backend: rewrite, interpret, then the optional medial-axis
radius pass.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import numpy as np

from arbor_policies import RewritePolicy, TurtlePolicy, MedialAxisPolicy
from .base import GenerationBackend, BackendConfig, BackendResult
from ..core.grammar import Grammar
from ..ops.rewrite import expand
from ..ops.turtle import interpret, draw_variation_samples
from ..ops.medial_axis import compute_medial_axis_radii

logger = logging.getLogger(__name__)


@dataclass
class LSystemConfig(BackendConfig):
    """Configuration for the grammar-driven backend."""

    rewrite: RewritePolicy = field(default_factory=RewritePolicy)
    turtle: TurtlePolicy = field(default_factory=TurtlePolicy)
    medial_axis: MedialAxisPolicy = field(default_factory=MedialAxisPolicy)
    iterations: Optional[int] = None  # overrides grammar.iterations


class LSystemBackend(GenerationBackend):
    """
    Parametric rewriting generator.

    One random stream drives the whole run in a fixed order: pruning draws
    during expansion, then the run samples (taper, radius noise), then the
    turtle's wander and jitter draws.
    """

    name = "lsystem"

    @property
    def requires_grammar(self) -> bool:
        return True

    def generate(
        self,
        grammar: Optional[Grammar] = None,
        config: Optional[LSystemConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> BackendResult:
        if grammar is None:
            raise ValueError("LSystemBackend requires a grammar")
        if config is None:
            config = LSystemConfig()
        rng = self._rng(config, rng)

        symbols = expand(grammar, rng=rng, policy=config.rewrite, iterations=config.iterations)
        samples = draw_variation_samples(grammar, rng)
        segments = interpret(symbols, grammar, rng=rng, policy=config.turtle, samples=samples)

        if grammar.medial_axis:
            compute_medial_axis_radii(segments, radius_noise=samples.radius_noise, policy=config.medial_axis)

        if not segments:
            logger.warning(f"Grammar '{grammar.name}' produced no geometry")

        return BackendResult(
            segments=segments,
            metrics={
                "symbol_count": len(symbols),
                "depth_taper_sample": samples.depth_taper,
                "radius_noise_sample": samples.radius_noise,
                "medial_axis": grammar.medial_axis,
            },
        )


__all__ = ["LSystemBackend", "LSystemConfig"]
