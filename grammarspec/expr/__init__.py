"""
Expression subsystem for parametric grammars.

Parses the small arithmetic language used in rule conditions and
successor parameters:

- Numeric literals (``3``, ``0.25``, ``1e-3``)
- Bare identifiers bound from the rule head (``d``, ``len``)
- Binary operations ``+ - * /`` with the usual precedence
- Parentheses and a leading unary minus
"""

from .nodes import (
    ExprNode,
    LiteralNode,
    VariableNode,
    BinaryOpNode,
    UnaryOpNode,
    ExpressionError,
    ExpressionSyntaxError,
    UnknownVariableError,
    free_variables,
    node_from_dict,
)
from .parse import tokenize, parse_expression
from .compile import (
    CompiledExpression,
    compile_expression,
    evaluate_expression,
    ieee_divide,
)

__all__ = [
    # Nodes
    "ExprNode",
    "LiteralNode",
    "VariableNode",
    "BinaryOpNode",
    "UnaryOpNode",
    "free_variables",
    "node_from_dict",
    # Errors
    "ExpressionError",
    "ExpressionSyntaxError",
    "UnknownVariableError",
    # Parse / compile
    "tokenize",
    "parse_expression",
    "CompiledExpression",
    "compile_expression",
    "evaluate_expression",
    "ieee_divide",
]
