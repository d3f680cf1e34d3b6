"""
Parametric grammar rewriting.

One pass walks the symbol sequence left to right. Bracket symbols pass
through unchanged and track the nesting depth. Every other symbol is
rewritten by the first rule whose head tag and arity match and whose
condition (if any) is > 0. Matched symbols may be pruned: dropped entirely
with a probability that grows linearly with nesting depth.
"""

from typing import List, Optional, Sequence
import logging

import numpy as np

from arbor_policies import RewritePolicy
from ..core.grammar import Grammar, ParametricRule, Symbol, PUSH, POP

logger = logging.getLogger(__name__)


def find_rule(symbol: Symbol, rules: Sequence[ParametricRule]) -> Optional[ParametricRule]:
    """
    Return the first rule that matches symbol and whose condition holds.

    Raises
    ------
    UnknownVariableError
        If a condition references a name the rule does not bind
    """
    for rule in rules:
        if not rule.matches(symbol):
            continue
        if rule.applies(rule.bind(symbol)):
            return rule
    return None


def rewrite_pass(
    symbols: Sequence[Symbol],
    rules: Sequence[ParametricRule],
    rng: np.random.Generator,
    policy: Optional[RewritePolicy] = None,
) -> List[Symbol]:
    """
    Apply one rewrite pass.

    Parameters
    ----------
    symbols : sequence of Symbol
        Input sequence
    rules : sequence of ParametricRule
        Rules in declaration order
    rng : np.random.Generator
        Shared run stream; one draw is consumed per matched symbol whose
        pruning probability is non-zero
    policy : RewritePolicy, optional
        Pruning knobs

    Returns
    -------
    list of Symbol
        The rewritten sequence
    """
    if policy is None:
        policy = RewritePolicy()

    out: List[Symbol] = []
    depth = 0
    pruned = 0

    for symbol in symbols:
        if symbol.tag == PUSH:
            depth += 1
            out.append(symbol)
            continue
        if symbol.tag == POP:
            depth = max(depth - 1, 0)
            out.append(symbol)
            continue

        rule = find_rule(symbol, rules)
        if rule is None:
            out.append(symbol)
            continue

        p = policy.prune_probability(depth)
        if p > 0.0 and rng.random() < p:
            pruned += 1
            continue

        out.extend(rule.produce(rule.bind(symbol)))

    if pruned:
        logger.debug(f"Pruned {pruned} symbols in rewrite pass")
    return out


def expand(
    grammar: Grammar,
    rng: Optional[np.random.Generator] = None,
    policy: Optional[RewritePolicy] = None,
    iterations: Optional[int] = None,
) -> List[Symbol]:
    """
    Run the grammar's full expansion from its axiom.

    Parameters
    ----------
    grammar : Grammar
        Grammar to expand
    rng : np.random.Generator, optional
        Random stream (unseeded if omitted)
    policy : RewritePolicy, optional
        Pruning knobs
    iterations : int, optional
        Override for grammar.iterations

    Returns
    -------
    list of Symbol
        Symbol sequence after the final pass
    """
    if rng is None:
        rng = np.random.default_rng()
    if policy is None:
        policy = RewritePolicy()
    errors = policy.validate()
    if errors:
        raise ValueError(f"Invalid RewritePolicy: {'; '.join(errors)}")

    n_iter = grammar.iterations if iterations is None else iterations
    symbols = list(grammar.axiom)
    for i in range(n_iter):
        symbols = rewrite_pass(symbols, grammar.rules, rng, policy)
        logger.debug(f"Iteration {i + 1}/{n_iter}: {len(symbols)} symbols")

    logger.info(f"Expanded '{grammar.name}' to {len(symbols)} symbols in {n_iter} iterations")
    return symbols


__all__ = ["find_rule", "rewrite_pass", "expand"]
