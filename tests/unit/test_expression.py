"""
Tests for the expression parser and evaluator

Checks:
1. Grammar: precedence, associativity, implicit multiplication
2. Parse errors carry the offending position
3. Domain errors at undefined points
4. Symbolic helpers (derivative, LaTeX)
"""

import math

import pytest

from pyNUMLAB import DomainError, ParseError
from pyNUMLAB.mathparse import Expression, as_function, evaluate, parse, tokenize


# =============================================================================
# GRAMMAR
# =============================================================================


class TestGrammar:
    """Operator precedence and literal forms"""

    def test_precedence(self) -> None:
        """* binds tighter than +"""
        assert parse("1 + 2*3")(0.0) == 7.0
        assert parse("(1 + 2)*3")(0.0) == 9.0

    def test_power_is_right_associative(self) -> None:
        assert parse("2^3^2")(0.0) == 512.0

    def test_unary_minus_below_power(self) -> None:
        """-x^2 is -(x^2)"""
        assert parse("-x^2")(3.0) == -9.0
        assert parse("(-x)^2")(3.0) == 9.0
        assert parse("2^-1")(0.0) == 0.5

    def test_number_forms(self) -> None:
        assert parse(".5")(0.0) == 0.5
        assert parse("1.5")(0.0) == 1.5
        assert parse("1e-3")(0.0) == pytest.approx(0.001)

    def test_constants(self) -> None:
        assert parse("pi")(0.0) == math.pi
        assert parse("e")(0.0) == math.e

    def test_functions(self) -> None:
        assert parse("sin(x)")(math.pi / 2) == pytest.approx(1.0)
        assert parse("abs(x)")(-4.0) == 4.0
        assert parse("sqrt(x)")(9.0) == 3.0
        assert parse("ln(e)")(0.0) == pytest.approx(1.0)
        assert parse("pow(2, 10)")(0.0) == 1024.0


class TestImplicitMultiplication:
    """Juxtaposition multiplies"""

    def test_number_variable(self) -> None:
        assert parse("2x")(3.0) == 6.0

    def test_number_function(self) -> None:
        assert parse("2sin(x)")(math.pi / 2) == pytest.approx(2.0)

    def test_parenthesised_groups(self) -> None:
        assert parse("(x+1)(x-1)")(3.0) == 8.0
        assert parse("3(x)")(2.0) == 6.0
        assert parse("(x)2")(3.0) == 6.0

    def test_binds_power_first(self) -> None:
        """2x^2 is 2*(x^2)"""
        assert parse("2x^2")(3.0) == 18.0

    def test_number_then_constant_e(self) -> None:
        """2e without exponent digits is 2*e"""
        assert parse("2e")(0.0) == pytest.approx(2 * math.e)

    def test_mixed_expression(self) -> None:
        f = parse("2sin(x) - 3cos(4x)")
        x = 0.3
        assert f(x) == pytest.approx(2 * math.sin(x) - 3 * math.cos(4 * x))


class TestTwoVariables:
    """Expressions of x and y"""

    def test_arity(self) -> None:
        assert parse("x + 1").arity == 1
        assert parse("x*y").arity == 2
        assert parse("x*y").variables == frozenset({"x", "y"})

    def test_evaluate_two_arguments(self) -> None:
        assert evaluate(parse("x*y"), 2.0, 3.0) == 6.0

    def test_missing_y_raises(self) -> None:
        with pytest.raises(TypeError):
            parse("x*y")(2.0)

    def test_unary_expression_ignores_y(self) -> None:
        assert parse("x + 1")(1.0, 100.0) == 2.0


# =============================================================================
# PARSE ERRORS
# =============================================================================


class TestParseErrors:
    """Malformed text is rejected with a position"""

    @pytest.mark.parametrize(
        "text,position",
        [
            ("", 0),
            ("   ", 0),
            ("(x+1", 0),
            ("x+1)", 3),
            ("foo(x)", 0),
            ("sin x", 4),
            ("pow(1)", 0),
            ("x $ 1", 2),
            ("2 + * 3", 4),
            ("x +", 3),
            ("2 3", 2),
            ("1.2.3", 3),
            ("x^2 3", 4),
        ],
    )
    def test_position(self, text, position) -> None:
        with pytest.raises(ParseError) as info:
            parse(text)
        assert info.value.position == position

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse("sinx")

    def test_message_kept(self) -> None:
        with pytest.raises(ParseError) as info:
            parse("foo(x)")
        assert "foo" in info.value.message


# =============================================================================
# DOMAIN ERRORS
# =============================================================================


class TestDomainErrors:
    """Undefined points raise DomainError instead of returning NaN"""

    @pytest.mark.parametrize(
        "text,x",
        [
            ("1/x", 0.0),
            ("ln(x)", 0.0),
            ("ln(x)", -1.0),
            ("sqrt(x)", -1.0),
            ("x^0.5", -1.0),
            ("x^(-1)", 0.0),
            ("exp(x)", 1000.0),
            ("x*x*x*x", 1e100),
        ],
    )
    def test_undefined(self, text, x) -> None:
        with pytest.raises(DomainError):
            parse(text)(x)

    def test_is_arithmetic_error(self) -> None:
        with pytest.raises(ArithmeticError):
            parse("1/x")(0.0)

    def test_integer_power_of_negative(self) -> None:
        assert parse("x^3")(-2.0) == -8.0


class TestCallables:
    """Plain Python callables are wrapped with the same error policy"""

    def test_zero_division(self) -> None:
        f = as_function(lambda x: 1 / x)
        with pytest.raises(DomainError):
            f(0.0)

    def test_nan(self) -> None:
        f = as_function(lambda x: float("nan"))
        with pytest.raises(DomainError):
            f(1.0)

    def test_expression_passthrough(self) -> None:
        expr = parse("x")
        assert as_function(expr) is expr

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError):
            as_function(42)


# =============================================================================
# VALUE SEMANTICS AND SYMBOLIC HELPERS
# =============================================================================


class TestExpressionObject:
    """Immutability, equality and symbolic helpers"""

    def test_immutable(self) -> None:
        f = parse("x")
        with pytest.raises(AttributeError):
            f.text = "y"

    def test_deterministic(self) -> None:
        f = parse("sin(x)^2 + cos(3x)")
        assert f(0.7) == f(0.7)

    def test_equality_ignores_whitespace(self) -> None:
        assert parse("x+1") == parse("x + 1")
        assert hash(parse("x+1")) == hash(parse("x + 1"))
        assert parse("x+1") != parse("x+2")

    def test_derivative(self) -> None:
        d = Expression("x^3").derivative()
        assert d(2.0) == pytest.approx(12.0)

    def test_partial_derivative(self) -> None:
        d = Expression("x^2*y").derivative("y")
        assert d(3.0, 5.0) == pytest.approx(9.0)

    def test_derivative_domain_error(self) -> None:
        d = Expression("sqrt(x)").derivative()
        with pytest.raises(DomainError):
            d(0.0)

    def test_latex(self) -> None:
        assert Expression("sqrt(x)").latex() == r"\sqrt{x}"


class TestTokenizer:
    """Token stream"""

    def test_kinds(self) -> None:
        kinds = [t.kind for t in tokenize("2x + sin(1)")]
        assert kinds == ["number", "ident", "op", "ident", "(", "number", ")", "end"]

    def test_positions(self) -> None:
        tokens = tokenize("12 + x")
        assert [t.position for t in tokens] == [0, 3, 5, 6]
