"""
Expression compiler.

Compiles parsed expression trees into closures that evaluate against a
mapping of variable name -> value. Evaluation is pure and deterministic;
the same text always compiles to the same tree.

DIVISION
--------
Division by zero does not raise. It follows IEEE-754: x/0 is +/-inf for
x != 0 and NaN for 0/0 or NaN/0.
"""

from functools import lru_cache
from typing import Callable, Dict, FrozenSet, Mapping, Optional
import math

from .nodes import (
    ExprNode,
    LiteralNode,
    VariableNode,
    BinaryOpNode,
    UnaryOpNode,
    ExpressionError,
    UnknownVariableError,
    free_variables,
)
from .parse import parse_expression

Env = Mapping[str, float]
Evaluator = Callable[[Env], float]


def ieee_divide(a: float, b: float) -> float:
    """Divide with IEEE-754 semantics instead of raising ZeroDivisionError."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


BINARY_OP_FUNCS: Dict[str, Callable[[float, float], float]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": ieee_divide,
}


def _compile_node(node: ExprNode) -> Evaluator:
    if isinstance(node, LiteralNode):
        value = node.value
        return lambda env: value

    elif isinstance(node, VariableNode):
        name = node.name

        def lookup(env: Env) -> float:
            try:
                return float(env[name])
            except KeyError:
                raise UnknownVariableError(name) from None

        return lookup

    elif isinstance(node, BinaryOpNode):
        op_func = BINARY_OP_FUNCS.get(node.op)
        if op_func is None:
            raise ExpressionError(f"unknown binary op: {node.op}")
        left_fn = _compile_node(node.left)
        right_fn = _compile_node(node.right)
        return lambda env: op_func(left_fn(env), right_fn(env))

    elif isinstance(node, UnaryOpNode):
        if node.op != "neg":
            raise ExpressionError(f"unknown unary op: {node.op}")
        arg_fn = _compile_node(node.arg)
        return lambda env: -arg_fn(env)

    raise ExpressionError(f"unknown node type: {type(node).__name__}")


class CompiledExpression:
    """
    A parsed and compiled expression.

    Call it with an environment mapping to evaluate::

        >>> expr = compile_expression("d * 0.5 + 1")
        >>> expr({"d": 4})
        3.0
    """

    __slots__ = ("source", "node", "variables", "_fn")

    def __init__(self, source: str, node: ExprNode):
        self.source = source
        self.node = node
        self.variables: FrozenSet[str] = frozenset(free_variables(node))
        self._fn = _compile_node(node)

    @property
    def is_constant(self) -> bool:
        return not self.variables

    def __call__(self, env: Env) -> float:
        return self._fn(env)

    def evaluate(self, env: Optional[Env] = None) -> float:
        return self._fn(env if env is not None else {})

    def __repr__(self) -> str:
        return f"CompiledExpression({self.source!r})"


@lru_cache(maxsize=4096)
def compile_expression(text: str) -> CompiledExpression:
    """
    Parse and compile expression text (cached per text).

    Parameters
    ----------
    text : str
        Expression text using + - * /, parentheses, numbers and identifiers

    Returns
    -------
    CompiledExpression
        Callable evaluator; raises UnknownVariableError at evaluation time
        if a referenced name is missing from the environment

    Raises
    ------
    ExpressionSyntaxError
        If the text cannot be parsed
    """
    return CompiledExpression(text, parse_expression(text))


def evaluate_expression(text: str, env: Optional[Env] = None) -> float:
    """Compile (cached) and evaluate expression text in one call."""
    return compile_expression(text).evaluate(env)


__all__ = [
    "CompiledExpression",
    "compile_expression",
    "evaluate_expression",
    "ieee_divide",
    "BINARY_OP_FUNCS",
]
