"""
Fallback backend wrapping the fixed-depth random tree generator.
"""

from dataclasses import dataclass, field
from typing import Optional
import numpy as np

from arbor_policies import RandomTreePolicy
from .base import GenerationBackend, BackendConfig, BackendResult
from ..core.grammar import Grammar
from ..ops.random_tree import generate_random_tree


@dataclass
class RandomTreeConfig(BackendConfig):
    """Configuration for the random tree backend."""

    tree: RandomTreePolicy = field(default_factory=RandomTreePolicy)


class RandomTreeBackend(GenerationBackend):
    """Grammar-free random branching; any grammar passed in is ignored."""

    name = "random_tree"

    @property
    def requires_grammar(self) -> bool:
        return False

    def generate(
        self,
        grammar: Optional[Grammar] = None,
        config: Optional[RandomTreeConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> BackendResult:
        if config is None:
            config = RandomTreeConfig()
        rng = self._rng(config, rng)
        segments = generate_random_tree(rng=rng, policy=config.tree)
        return BackendResult(segments=segments, metrics={"depth_budget": config.tree.max_depth})


__all__ = ["RandomTreeBackend", "RandomTreeConfig"]
