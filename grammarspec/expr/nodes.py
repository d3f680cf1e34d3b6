"""
Expression node definitions for rule conditions and parameter formulas.

Expressions are parsed into a small tagged tree:

Literal:  LiteralNode(value)
Variable: VariableNode(name)
Binary:   BinaryOpNode(op, left, right)   with op in {+, -, *, /}
Unary:    UnaryOpNode("neg", arg)         leading minus on a factor

Each node has a dict form ({"type": "literal", ...}) so compiled grammars
can be inspected and serialized.
"""

from dataclasses import dataclass
from typing import Dict, Any, Set


class ExpressionError(ValueError):
    """Base class for expression errors."""
    pass


class ExpressionSyntaxError(ExpressionError):
    """Raised when expression text cannot be parsed."""

    def __init__(self, message: str, text: str = "", position: int = -1):
        self.text = text
        self.position = position
        if text and position >= 0:
            message = f"{message} at position {position} in {text!r}"
        super().__init__(message)


class UnknownVariableError(ExpressionError, KeyError):
    """Raised when an expression references a name missing from the environment."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown variable '{name}'")

    def __str__(self) -> str:
        return f"unknown variable '{self.name}'"


BINARY_OPS: Set[str] = {"+", "-", "*", "/"}

UNARY_OPS: Set[str] = {"neg"}


@dataclass(frozen=True)
class ExprNode:
    """Base class for expression nodes."""
    pass


@dataclass(frozen=True)
class LiteralNode(ExprNode):
    """A numeric literal."""
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "literal", "value": self.value}


@dataclass(frozen=True)
class VariableNode(ExprNode):
    """A bare identifier resolved against the evaluation environment."""
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "var", "name": self.name}


@dataclass(frozen=True)
class BinaryOpNode(ExprNode):
    """A binary arithmetic operation."""
    op: str
    left: ExprNode
    right: ExprNode

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "binop",
            "op": self.op,
            "left": self.left.to_dict(),
            "right": self.right.to_dict(),
        }


@dataclass(frozen=True)
class UnaryOpNode(ExprNode):
    """A unary operation (only negation)."""
    op: str
    arg: ExprNode

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "unop", "op": self.op, "arg": self.arg.to_dict()}


def free_variables(node: ExprNode) -> Set[str]:
    """
    Collect the variable names referenced by an expression tree.

    Parameters
    ----------
    node : ExprNode
        Root of the expression tree

    Returns
    -------
    set of str
        Names of all VariableNode leaves
    """
    if isinstance(node, VariableNode):
        return {node.name}
    if isinstance(node, BinaryOpNode):
        return free_variables(node.left) | free_variables(node.right)
    if isinstance(node, UnaryOpNode):
        return free_variables(node.arg)
    return set()


def node_from_dict(d: Dict[str, Any]) -> ExprNode:
    """Rebuild an expression tree from its dict form."""
    node_type = d.get("type")

    if node_type == "literal":
        return LiteralNode(value=float(d["value"]))
    elif node_type == "var":
        return VariableNode(name=d["name"])
    elif node_type == "binop":
        if d["op"] not in BINARY_OPS:
            raise ExpressionError(f"unknown binary op '{d['op']}'")
        return BinaryOpNode(
            op=d["op"],
            left=node_from_dict(d["left"]),
            right=node_from_dict(d["right"]),
        )
    elif node_type == "unop":
        if d["op"] not in UNARY_OPS:
            raise ExpressionError(f"unknown unary op '{d['op']}'")
        return UnaryOpNode(op=d["op"], arg=node_from_dict(d["arg"]))

    raise ExpressionError(f"unknown node type '{node_type}'")


__all__ = [
    "ExprNode",
    "LiteralNode",
    "VariableNode",
    "BinaryOpNode",
    "UnaryOpNode",
    "ExpressionError",
    "ExpressionSyntaxError",
    "UnknownVariableError",
    "BINARY_OPS",
    "UNARY_OPS",
    "free_variables",
    "node_from_dict",
]
