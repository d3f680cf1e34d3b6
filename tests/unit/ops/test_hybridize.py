"""
Unit tests for grammar crossbreeding.
"""

import pytest

from arbor.core.grammar import Grammar
from arbor.ops.hybridize import HybridizationError, crossbreed, random_hybrid
from arbor_policies import HybridizationPolicy
from grammarspec.syntax import parse_axiom, parse_rule


@pytest.fixture
def parents():
    a = Grammar(
        name="alpha",
        axiom=parse_axiom("A"),
        rules=(parse_rule("A -> F [ + A ] A"), parse_rule("F -> F F")),
        iterations=4,
        base_radius=0.02,
        depth_taper=(0.6, 0.7),
        tropism=0.0,
    )
    b = Grammar(
        name="beta",
        axiom=parse_axiom("B"),
        rules=(
            parse_rule("B -> F [ - B ] [ & B ]"),
            parse_rule("F -> F"),
            parse_rule("X -> X"),
        ),
        iterations=7,
        base_radius=0.06,
        depth_taper=(0.7, 0.8),
        tropism=0.4,
        medial_axis=True,
    )
    return a, b


class TestCrossbreed:

    def test_name(self, parents):
        assert crossbreed(*parents).name == "alpha x beta"

    def test_alpha_zero_takes_first_parent_knobs(self, parents):
        a, b = parents
        child = crossbreed(a, b, alpha=0.0)
        assert child.iterations == a.iterations
        assert child.base_radius == a.base_radius
        assert child.depth_taper == a.depth_taper
        assert child.medial_axis is False

    def test_alpha_one_takes_second_parent_knobs(self, parents):
        a, b = parents
        child = crossbreed(a, b, alpha=1.0)
        assert child.iterations == b.iterations
        assert child.tropism == b.tropism
        assert child.depth_taper == b.depth_taper
        assert child.medial_axis is True

    def test_iterations_round_half_up(self, parents):
        assert crossbreed(*parents, alpha=0.5).iterations == 6

    def test_rules_shuffled_and_truncated(self, parents):
        a, b = parents
        child = crossbreed(a, b)
        assert len(child.rules) == 3
        union = list(a.rules) + list(b.rules)
        assert all(rule in union for rule in child.rules)

    def test_axiom_from_a_parent(self, parents):
        a, b = parents
        assert crossbreed(a, b).axiom in (a.axiom, b.axiom)

    def test_default_seed_is_reproducible(self, parents):
        assert crossbreed(*parents) == crossbreed(*parents)

    def test_retention_policy(self, parents):
        child = crossbreed(*parents, policy=HybridizationPolicy(rule_retention_fraction=1.0))
        assert len(child.rules) == 5

    @pytest.mark.parametrize("alpha", [-0.1, 1.5])
    def test_alpha_out_of_range(self, parents, alpha):
        with pytest.raises(HybridizationError):
            crossbreed(*parents, alpha=alpha)


class TestRandomHybrid:

    def test_accepts_named_pool(self, parents):
        a, b = parents
        child = random_hybrid([("alpha", a), ("beta", b)], seed=1)
        assert child.name in ("alpha x beta", "beta x alpha")

    def test_seeded_pick_is_reproducible(self, parents):
        pool = list(parents) + [parents[0].with_changes(name="gamma")]
        assert random_hybrid(pool, seed=5) == random_hybrid(pool, seed=5)

    def test_pool_too_small(self, parents):
        with pytest.raises(HybridizationError):
            random_hybrid([parents[0]])
