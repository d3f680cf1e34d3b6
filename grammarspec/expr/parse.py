"""
Recursive-descent parser for arithmetic expression text.

Grammar (lowest precedence first, all binary operators left-associative)::

    expr   := term (("+" | "-") term)*
    term   := factor (("*" | "/") factor)*
    factor := NUMBER | IDENT | "(" expr ")" | ("-" | "+") factor
"""

import re
from typing import List, NamedTuple

from .nodes import (
    ExprNode,
    LiteralNode,
    VariableNode,
    BinaryOpNode,
    UnaryOpNode,
    ExpressionSyntaxError,
)


class Token(NamedTuple):
    kind: str  # "num", "ident", "op", "lparen", "rparen", "end"
    text: str
    pos: int


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<num>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>[-+*/])
  | (?P<lparen>\()
  | (?P<rparen>\))
    """,
    re.VERBOSE,
)


def tokenize(text: str) -> List[Token]:
    """
    Split expression text into tokens.

    Raises
    ------
    ExpressionSyntaxError
        On any character that does not start a valid token
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ExpressionSyntaxError(
                f"unexpected character {text[pos]!r}", text, pos
            )
        kind = m.lastgroup
        if kind != "ws":
            tokens.append(Token(kind, m.group(kind), pos))
        pos = m.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _error(self, message: str) -> ExpressionSyntaxError:
        return ExpressionSyntaxError(message, self.text, self.current.pos)

    def parse(self) -> ExprNode:
        if self.current.kind == "end":
            raise self._error("empty expression")
        node = self._expr()
        if self.current.kind != "end":
            raise self._error(f"unexpected token {self.current.text!r}")
        return node

    def _expr(self) -> ExprNode:
        node = self._term()
        while self.current.kind == "op" and self.current.text in "+-":
            op = self._advance().text
            node = BinaryOpNode(op=op, left=node, right=self._term())
        return node

    def _term(self) -> ExprNode:
        node = self._factor()
        while self.current.kind == "op" and self.current.text in "*/":
            op = self._advance().text
            node = BinaryOpNode(op=op, left=node, right=self._factor())
        return node

    def _factor(self) -> ExprNode:
        tok = self.current

        if tok.kind == "num":
            self._advance()
            return LiteralNode(value=float(tok.text))

        if tok.kind == "ident":
            self._advance()
            return VariableNode(name=tok.text)

        if tok.kind == "lparen":
            self._advance()
            node = self._expr()
            if self.current.kind != "rparen":
                raise self._error("expected ')'")
            self._advance()
            return node

        if tok.kind == "op" and tok.text in "+-":
            self._advance()
            arg = self._factor()
            if tok.text == "+":
                return arg
            # fold "-3" into a literal so constants stay constants
            if isinstance(arg, LiteralNode):
                return LiteralNode(value=-arg.value)
            return UnaryOpNode(op="neg", arg=arg)

        if tok.kind == "end":
            raise self._error("unexpected end of expression")
        raise self._error(f"unexpected token {tok.text!r}")


def parse_expression(text: str) -> ExprNode:
    """
    Parse expression text into an expression tree.

    Parameters
    ----------
    text : str
        Expression such as ``"d - 1"`` or ``"(s * 0.8) / 2"``

    Returns
    -------
    ExprNode
        Root node of the parsed tree

    Raises
    ------
    ExpressionSyntaxError
        If the text is empty or malformed
    """
    if not isinstance(text, str):
        raise ExpressionSyntaxError(
            f"expression must be a string, got {type(text).__name__}"
        )
    return _Parser(text).parse()


__all__ = ["Token", "tokenize", "parse_expression"]
