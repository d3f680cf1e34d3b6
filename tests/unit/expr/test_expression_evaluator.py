"""
Unit tests for the expression parser and compiler.
"""

import math

import pytest

from grammarspec.expr import (
    BinaryOpNode,
    ExpressionError,
    ExpressionSyntaxError,
    LiteralNode,
    UnaryOpNode,
    UnknownVariableError,
    VariableNode,
    compile_expression,
    evaluate_expression,
    free_variables,
    node_from_dict,
    parse_expression,
)


class TestParsing:
    """Tests for precedence, associativity and node shapes."""

    def test_literal_and_identifier(self):
        assert parse_expression("2.5") == LiteralNode(2.5)
        assert parse_expression("len") == VariableNode("len")

    def test_multiplication_binds_tighter_than_addition(self):
        node = parse_expression("1 + 2 * 3")
        assert isinstance(node, BinaryOpNode)
        assert node.op == "+"
        assert node.right == BinaryOpNode("*", LiteralNode(2.0), LiteralNode(3.0))

    def test_subtraction_is_left_associative(self):
        assert evaluate_expression("10 - 4 - 3") == 3.0
        assert evaluate_expression("24 / 4 / 2") == 3.0

    def test_parentheses_override_precedence(self):
        assert evaluate_expression("(1 + 2) * 3") == 9.0

    def test_negative_literal_is_folded(self):
        assert parse_expression("-3") == LiteralNode(-3.0)

    def test_negated_variable(self):
        node = parse_expression("-x")
        assert node == UnaryOpNode("neg", VariableNode("x"))
        assert evaluate_expression("-x", {"x": 2}) == -2.0

    def test_exponent_literal(self):
        assert evaluate_expression("1e-3 * 1000") == pytest.approx(1.0)

    @pytest.mark.parametrize("text", ["", "   ", "1 +", "(1 + 2", "1 2", "a $ b", "()"])
    def test_malformed_text_raises(self, text):
        with pytest.raises(ExpressionSyntaxError):
            parse_expression(text)

    def test_syntax_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_expression("*")

    def test_free_variables(self):
        assert free_variables(parse_expression("a * (b - a) / 2")) == {"a", "b"}

    def test_dict_form_rebuilds_same_tree(self):
        node = parse_expression("s * 0.7 - -t")
        assert node_from_dict(node.to_dict()) == node

    def test_unknown_node_type_in_dict(self):
        with pytest.raises(ExpressionError):
            node_from_dict({"type": "call"})


class TestEvaluation:
    """Tests for evaluation against an environment."""

    def test_variables_bound_from_env(self):
        expr = compile_expression("d * 0.5 + 1")
        assert expr({"d": 4}) == 3.0
        assert expr.variables == frozenset({"d"})
        assert not expr.is_constant

    def test_unknown_variable_raises_at_evaluation(self):
        expr = compile_expression("x + 1")
        with pytest.raises(UnknownVariableError) as exc:
            expr({"y": 1})
        assert exc.value.name == "x"
        assert "x" in str(exc.value)

    def test_unknown_variable_is_key_error(self):
        with pytest.raises(KeyError):
            evaluate_expression("q")

    def test_division_by_zero_gives_infinity(self):
        assert evaluate_expression("1 / 0") == math.inf
        assert evaluate_expression("-1 / 0") == -math.inf

    def test_zero_over_zero_gives_nan(self):
        assert math.isnan(evaluate_expression("0 / 0"))

    def test_compilation_is_cached_and_deterministic(self):
        a = compile_expression("a + b * 2")
        b = compile_expression("a + b * 2")
        assert a is b
        env = {"a": 1.5, "b": -0.25}
        assert a(env) == b(env)

    def test_constant_expression(self):
        expr = compile_expression("(2 + 3) * 4")
        assert expr.is_constant
        assert expr.evaluate() == 20.0
