"""
Base interface for branch structure generation backends.

This module defines the abstract interface that all generation backends
implement, giving one API over the grammar-driven generator and the
fixed-depth random fallback.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import numpy as np

from ..core.grammar import Grammar
from ..core.segments import SegmentSet


@dataclass
class BackendConfig:
    """Base configuration for generation backends."""

    seed: Optional[int] = None


@dataclass
class BackendResult:
    """Segments produced by one run plus backend-specific metrics."""

    segments: SegmentSet
    metrics: Dict[str, Any] = field(default_factory=dict)


class GenerationBackend(ABC):
    """
    Abstract base class for generation backends.

    All backends implement generate() and declare whether they consume a
    grammar via the requires_grammar property. Output is always a
    SegmentSet satisfying the forest and depth invariants.
    """

    name: str = "base"

    @property
    @abstractmethod
    def requires_grammar(self) -> bool:
        """Whether generate() needs a Grammar."""
        pass

    @abstractmethod
    def generate(
        self,
        grammar: Optional[Grammar] = None,
        config: Optional[BackendConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> BackendResult:
        """
        Generate one branch structure.

        Parameters
        ----------
        grammar : Grammar, optional
            Preset to grow (required when requires_grammar is True)
        config : BackendConfig, optional
            Backend configuration
        rng : np.random.Generator, optional
            Shared run stream; seeded from config.seed when omitted

        Returns
        -------
        BackendResult
            Generated segments and metrics
        """
        pass

    def _rng(self, config: BackendConfig, rng: Optional[np.random.Generator]) -> np.random.Generator:
        if rng is not None:
            return rng
        return np.random.default_rng(config.seed)


__all__ = ["BackendConfig", "BackendResult", "GenerationBackend"]
