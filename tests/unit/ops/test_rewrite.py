"""
Unit tests for the grammar rewriter.
"""

import numpy as np
import pytest

from arbor.core.grammar import Grammar, Symbol
from arbor.ops.rewrite import expand, find_rule, rewrite_pass
from arbor_policies import RewritePolicy
from grammarspec.expr import UnknownVariableError
from grammarspec.syntax import parse_axiom, parse_rule


def tags(symbols):
    return "".join(s.tag for s in symbols)


class TestRewritePass:
    """Tests for a single rewrite pass."""

    def test_unmatched_symbols_pass_through_once(self):
        rules = [parse_rule("F -> F F")]
        out = rewrite_pass(parse_axiom("F + G"), rules, np.random.default_rng(0))
        assert tags(out) == "FF+G"

    def test_arity_must_match(self):
        rules = [parse_rule("A(x) -> B")]
        out = rewrite_pass(parse_axiom("A A(1) A(1,2)"), rules, np.random.default_rng(0))
        assert tags(out) == "ABA"

    def test_first_satisfied_rule_wins(self):
        rules = [
            parse_rule("A(x) : x - 5 -> B"),
            parse_rule("A(x) -> C"),
            parse_rule("A(x) -> D"),
        ]
        out = rewrite_pass(parse_axiom("A(10) A(1)"), rules, np.random.default_rng(0))
        assert tags(out) == "BC"

    def test_condition_at_zero_does_not_apply(self):
        rules = [parse_rule("A(x) : x -> B")]
        out = rewrite_pass(parse_axiom("A(0) A(-1) A(0.5)"), rules, np.random.default_rng(0))
        assert tags(out) == "AAB"

    def test_nan_condition_does_not_apply(self):
        rules = [parse_rule("A(x) : x / x -> B")]
        out = rewrite_pass(parse_axiom("A(0)"), rules, np.random.default_rng(0))
        assert tags(out) == "A"

    def test_successor_parameters_evaluated(self):
        rules = [parse_rule("A(s) -> F(s) A(s * 0.5)")]
        out = rewrite_pass(parse_axiom("A(2)"), rules, np.random.default_rng(0))
        assert out == [Symbol("F", (2.0,)), Symbol("A", (1.0,))]

    def test_brackets_pass_through(self):
        rules = [parse_rule("F -> G")]
        out = rewrite_pass(parse_axiom("[F]F"), rules, np.random.default_rng(0))
        assert tags(out) == "[G]G"

    def test_unknown_variable_is_hard_failure(self):
        from arbor.core.grammar import ParametricRule, OutputSymbol
        rule = ParametricRule(head="A", params=("x",), successor=(OutputSymbol("F", ("y",)),))
        with pytest.raises(UnknownVariableError):
            rewrite_pass(parse_axiom("A(1)"), [rule], np.random.default_rng(0))

    def test_find_rule_returns_none_when_nothing_matches(self):
        assert find_rule(Symbol("Q"), [parse_rule("F -> F")]) is None


class TestPruning:
    """Tests for depth-dependent pruning."""

    def test_probability_schedule(self):
        policy = RewritePolicy()
        assert policy.prune_probability(0) == 0.0
        assert policy.prune_probability(2) == 0.0
        assert policy.prune_probability(3) == pytest.approx(0.03)
        assert policy.prune_probability(7) == pytest.approx(0.15)
        assert policy.prune_probability(100) == 1.0

    def test_no_pruning_and_no_draws_at_shallow_depth(self):
        rng = np.random.default_rng(5)
        state = rng.bit_generator.state
        rules = [parse_rule("F -> F F")]
        rewrite_pass(parse_axiom("[[F]] F"), rules, rng)
        assert rng.bit_generator.state == state

    def test_deep_matched_symbols_can_be_pruned(self):
        rules = [parse_rule("F -> G")]
        policy = RewritePolicy(prune_rate_per_level=1.0)
        out = rewrite_pass(parse_axiom("[[[F]]] F"), rules, np.random.default_rng(0), policy)
        assert tags(out) == "[[[]]]G"

    def test_unmatched_symbols_are_never_pruned(self):
        policy = RewritePolicy(prune_rate_per_level=1.0)
        out = rewrite_pass(parse_axiom("[[[X]]]"), [], np.random.default_rng(0), policy)
        assert tags(out) == "[[[X]]]"


class TestExpand:
    """Tests for full expansion."""

    def test_doubling_grammar(self):
        grammar = Grammar(axiom=parse_axiom("F"), rules=(parse_rule("F -> F F"),), iterations=3)
        assert tags(expand(grammar, np.random.default_rng(0))) == "F" * 8

    def test_zero_iterations_returns_axiom(self):
        grammar = Grammar(axiom=parse_axiom("F A"), rules=(parse_rule("F -> F F"),), iterations=0)
        assert expand(grammar, np.random.default_rng(0)) == list(grammar.axiom)

    def test_iteration_override(self):
        grammar = Grammar(axiom=parse_axiom("F"), rules=(parse_rule("F -> F F"),), iterations=3)
        assert len(expand(grammar, np.random.default_rng(0), iterations=1)) == 2

    def test_deterministic_for_fixed_seed(self):
        grammar = Grammar(
            axiom=parse_axiom("A"),
            rules=(parse_rule("A -> F [ + A ] [ - A ] A"),),
            iterations=5,
        )
        a = expand(grammar, np.random.default_rng(42))
        b = expand(grammar, np.random.default_rng(42))
        assert a == b

    def test_invalid_policy_rejected(self):
        grammar = Grammar(axiom=parse_axiom("F"))
        with pytest.raises(ValueError):
            expand(grammar, policy=RewritePolicy(prune_rate_per_level=2.0))
