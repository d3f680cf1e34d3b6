"""
GrammarSpec - textual grammar layer for arbor.

Subpackages and modules:
    - expr: expression language for rule conditions and parameters
    - syntax: symbol / rule text parser and formatter
    - presets: JSON preset loader (load_presets)
    - library: built-in presets (get_preset)

Usage:
    from grammarspec.presets import load_presets
    from grammarspec.library import get_preset

The syntax, presets and library modules depend on arbor.core and are not
imported here, so that arbor.core can import grammarspec.expr freely.
"""

from .expr import (
    ExpressionError,
    ExpressionSyntaxError,
    UnknownVariableError,
    compile_expression,
    evaluate_expression,
)

__all__ = [
    "ExpressionError",
    "ExpressionSyntaxError",
    "UnknownVariableError",
    "compile_expression",
    "evaluate_expression",
]
