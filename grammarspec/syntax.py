"""
Text syntax for symbols and parametric rules.

SYMBOLS
-------
A symbol is one character other than whitespace, ``(``, ``)`` or ``,``,
optionally followed by a parenthesized, comma-separated list of
expressions::

    F(1.5) [ +(25) F(l*0.7) ] A

RULES
-----
::

    HEAD(name, ...) [: CONDITION] -> SUCCESSOR

The condition is an arithmetic expression; the rule applies when it
evaluates to a value > 0. Successor parameters stay as expression text and
may only reference the head's parameter names. Axiom parameters must be
constant expressions.
"""

from typing import List, Sequence, Tuple, Union
import re

from arbor.core.grammar import Symbol, OutputSymbol, ParametricRule
from .expr import (
    ExpressionError,
    compile_expression,
)


class GrammarSyntaxError(ValueError):
    """Raised when symbol or rule text cannot be parsed."""

    def __init__(self, message: str, text: str = ""):
        self.text = text
        if text:
            message = f"{message} in {text!r}"
        super().__init__(message)


ARROW = "->"
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RESERVED_TAG_CHARS = "(),"


def _split_args(body: str, text: str) -> List[str]:
    """Split on commas at parenthesis depth 0."""
    args: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in body:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    args.append("".join(current).strip())
    if any(not a for a in args):
        raise GrammarSyntaxError("empty parameter", text)
    return args


def split_symbols(text: str) -> List[Tuple[str, List[str]]]:
    """
    Split symbol-sequence text into (tag, [argument text, ...]) pairs.

    Raises
    ------
    GrammarSyntaxError
        On unbalanced parentheses or a misplaced ``(``, ``)`` or ``,``
    """
    out: List[Tuple[str, List[str]]] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if ch in _RESERVED_TAG_CHARS:
            raise GrammarSyntaxError(f"unexpected {ch!r} at position {i}", text)
        tag = ch
        i += 1

        j = i
        while j < n and text[j].isspace():
            j += 1
        if j < n and text[j] == "(":
            depth = 0
            k = j
            while k < n:
                if text[k] == "(":
                    depth += 1
                elif text[k] == ")":
                    depth -= 1
                    if depth == 0:
                        break
                k += 1
            if depth != 0:
                raise GrammarSyntaxError(f"unbalanced parentheses after {tag!r}", text)
            out.append((tag, _split_args(text[j + 1:k], text)))
            i = k + 1
        else:
            out.append((tag, []))
    return out


def _check_expression(expr_text: str, allowed: Sequence[str], text: str) -> None:
    try:
        compiled = compile_expression(expr_text)
    except ExpressionError as e:
        raise GrammarSyntaxError(f"bad expression {expr_text!r}: {e}", text) from e
    unknown = compiled.variables - set(allowed)
    if unknown:
        raise GrammarSyntaxError(
            f"expression {expr_text!r} references unbound names {sorted(unknown)}", text
        )


def parse_axiom(text: str) -> Tuple[Symbol, ...]:
    """
    Parse an axiom; every parameter must be a constant expression.

    >>> parse_axiom("F(1) [ +(30) F(0.5) ]")[0]
    Symbol(tag='F', params=(1.0,))
    """
    symbols = []
    for tag, args in split_symbols(text):
        for a in args:
            _check_expression(a, (), text)
        symbols.append(Symbol(tag, tuple(compile_expression(a).evaluate() for a in args)))
    return tuple(symbols)


def parse_successor(text: str, params: Sequence[str] = ()) -> Tuple[OutputSymbol, ...]:
    """Parse successor text; expressions may reference ``params`` only."""
    out = []
    for tag, args in split_symbols(text):
        for a in args:
            _check_expression(a, params, text)
        out.append(OutputSymbol(tag, tuple(args)))
    return tuple(out)


def parse_rule(text: str) -> ParametricRule:
    """
    Parse ``HEAD(names) [: CONDITION] -> SUCCESSOR``.

    Raises
    ------
    GrammarSyntaxError
        If the arrow is missing, the head is malformed, parameter names are
        not identifiers or repeat, or an expression is invalid or references
        a name the head does not bind
    """
    if ARROW not in text:
        raise GrammarSyntaxError(f"missing '{ARROW}'", text)
    lhs, successor_text = text.split(ARROW, 1)

    condition = None
    if ":" in lhs:
        lhs, condition = lhs.split(":", 1)
        condition = condition.strip()
        if not condition:
            raise GrammarSyntaxError("empty condition", text)

    head = split_symbols(lhs)
    if len(head) != 1:
        raise GrammarSyntaxError("rule head must be exactly one symbol", text)
    tag, names = head[0]
    if tag in ("[", "]"):
        raise GrammarSyntaxError("bracket symbols cannot be rewritten", text)
    for name in names:
        if not _IDENT_RE.match(name):
            raise GrammarSyntaxError(f"parameter {name!r} is not an identifier", text)
    if len(set(names)) != len(names):
        raise GrammarSyntaxError("duplicate parameter names", text)

    if condition is not None:
        _check_expression(condition, names, text)

    return ParametricRule(
        head=tag,
        params=tuple(names),
        condition=condition,
        successor=parse_successor(successor_text, names),
    )


def _fmt_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_symbol(symbol: Union[Symbol, OutputSymbol]) -> str:
    """Render a symbol back to text (``F(1,0.5)``, ``+``)."""
    if isinstance(symbol, OutputSymbol):
        args = list(symbol.exprs)
    else:
        args = [_fmt_number(p) for p in symbol.params]
    if not args:
        return symbol.tag
    return f"{symbol.tag}({','.join(args)})"


def format_axiom(symbols: Sequence[Union[Symbol, OutputSymbol]]) -> str:
    return " ".join(format_symbol(s) for s in symbols)


def format_rule(rule: ParametricRule) -> str:
    """Render a rule back to ``HEAD(names) : COND -> SUCCESSOR`` text."""
    head = rule.head if not rule.params else f"{rule.head}({','.join(rule.params)})"
    cond = f" : {rule.condition}" if rule.condition is not None else ""
    return f"{head}{cond} {ARROW} {format_axiom(rule.successor)}"


__all__ = [
    "GrammarSyntaxError",
    "split_symbols",
    "parse_axiom",
    "parse_successor",
    "parse_rule",
    "format_symbol",
    "format_axiom",
    "format_rule",
]
