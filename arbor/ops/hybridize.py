"""
Grammar hybridization.

Crossbreeding blends the numeric knobs of two grammars and merges their
rule sets by shuffle-and-truncate. The merge is not semantic: an offspring
may carry rules that never match its axiom and so grow little or nothing.
"""

from typing import List, Optional, Sequence, Union, Tuple
import logging
import math

import numpy as np

from arbor_policies import HybridizationPolicy
from ..core.grammar import Grammar, RANGE_FIELDS, SCALAR_FIELDS

logger = logging.getLogger(__name__)

DEFAULT_CROSSBREED_SEED = 0xDEADBEEF


class HybridizationError(ValueError):
    """Raised when hybridization preconditions are not met."""
    pass


def _lerp(a: float, b: float, alpha: float) -> float:
    return (1.0 - alpha) * a + alpha * b


def crossbreed(
    a: Grammar,
    b: Grammar,
    alpha: float = 0.5,
    seed: Optional[int] = DEFAULT_CROSSBREED_SEED,
    policy: Optional[HybridizationPolicy] = None,
) -> Grammar:
    """
    Blend two grammars into an offspring.

    Parameters
    ----------
    a, b : Grammar
        Parents; alpha = 0 reproduces a's knobs, alpha = 1 reproduces b's
    alpha : float
        Blend factor in [0, 1]
    seed : int, optional
        Seed for the axiom coin flip and rule shuffle. The fixed default
        makes repeated crossbreeds of the same parents reproducible; pass
        None for a fresh draw.
    policy : HybridizationPolicy, optional
        Rule retention knobs

    Returns
    -------
    Grammar
        Offspring grammar named "<a> x <b>"

    Raises
    ------
    HybridizationError
        If alpha is outside [0, 1] or the policy is invalid
    """
    if policy is None:
        policy = HybridizationPolicy()
    errors = policy.validate()
    if errors:
        raise HybridizationError(f"Invalid HybridizationPolicy: {'; '.join(errors)}")
    if not 0.0 <= alpha <= 1.0:
        raise HybridizationError(f"alpha must be in [0, 1], got {alpha}")

    rng = np.random.default_rng(seed)

    iterations = int(math.floor(_lerp(a.iterations, b.iterations, alpha) + 0.5))
    scalars = {name: _lerp(getattr(a, name), getattr(b, name), alpha) for name in SCALAR_FIELDS}
    ranges = {
        name: (
            _lerp(getattr(a, name)[0], getattr(b, name)[0], alpha),
            _lerp(getattr(a, name)[1], getattr(b, name)[1], alpha),
        )
        for name in RANGE_FIELDS
    }

    axiom = a.axiom if rng.random() < 0.5 else b.axiom

    union = list(a.rules) + list(b.rules)
    order = rng.permutation(len(union))
    keep = policy.retained_rule_count(len(union))
    rules = tuple(union[i] for i in order[:keep])

    child = Grammar(
        name=f"{a.name} x {b.name}",
        axiom=axiom,
        rules=rules,
        iterations=iterations,
        medial_axis=a.medial_axis if alpha < 0.5 else b.medial_axis,
        auto_randomise=a.auto_randomise or b.auto_randomise,
        **scalars,
        **ranges,
    )
    logger.info(
        f"Crossbred '{child.name}' (alpha={alpha:.3f}): kept {keep}/{len(union)} rules, "
        f"{iterations} iterations"
    )
    return child


def random_hybrid(
    pool: Sequence[Union[Grammar, Tuple[str, Grammar]]],
    seed: Optional[int] = None,
    policy: Optional[HybridizationPolicy] = None,
) -> Grammar:
    """
    Crossbreed two distinct grammars picked at random with a random alpha.

    Parameters
    ----------
    pool : sequence of Grammar or (name, Grammar)
        Candidate parents; load_presets() output is accepted directly
    seed : int, optional
        Seed for the pick, alpha and the crossbreed itself
    policy : HybridizationPolicy, optional
        Rule retention knobs

    Raises
    ------
    HybridizationError
        If the pool holds fewer than two grammars
    """
    grammars: List[Grammar] = [g[1] if isinstance(g, tuple) else g for g in pool]
    if len(grammars) < 2:
        raise HybridizationError(
            f"Need at least 2 grammars to hybridize, got {len(grammars)}"
        )

    rng = np.random.default_rng(seed)
    i, j = rng.choice(len(grammars), size=2, replace=False)
    alpha = float(rng.random())
    child_seed = int(rng.integers(0, 2**32))
    logger.debug(f"Random hybrid picked {int(i)} and {int(j)} with alpha={alpha:.3f}")
    return crossbreed(grammars[int(i)], grammars[int(j)], alpha=alpha, seed=child_seed, policy=policy)


__all__ = [
    "HybridizationError",
    "crossbreed",
    "random_hybrid",
    "DEFAULT_CROSSBREED_SEED",
]
