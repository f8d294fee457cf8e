"""Tests for partial evaluation against a session environment."""

import pytest

from config_manager import DEFAULT_SETTINGS, Limits
from custom_types import Rational
from errors import (
    ArityError, DepthExceeded, DivisionByZero, DomainError,
    InvalidNumberLiteral, UnsupportedOperation
)
from executor import Environment, evaluate
from parser import (
    parse, BinaryOperationNode, ConstantNode, IdentifierNode,
    LambdaFunctionNode
)
from sets import FiniteSet


class TestConcrete:
    @pytest.mark.parametrize("line, expected", [
        ("1 + 2 * 3", 7),
        ("1/3 + 1/6", Rational(1, 2)),
        ("0.1 + 0.2", Rational(3, 10)),
        ("2^10", 1024),
        ("2^-2", Rational(1, 4)),
        ("-2^2", 4),
        ("2^3^2", 512),
        ("7 % 3", 1),
        ("-7 % 3", 2),
        ("1.5e-3 * 2000", 3),
        ("3 × 4 − 2", 10),
        ("2(3 + 4)", 14),
        ("(1 + 1)(2 + 2)", 8),
    ])
    def test_arithmetic(self, calc, line, expected):
        assert calc(line) == expected

    def test_results_are_exact(self, calc):
        result = calc("1/3 * 3")
        assert isinstance(result, Rational)
        assert result == 1

    def test_deterministic(self, calc):
        assert calc("1/7 + 2/9") == calc("1/7 + 2/9")

    def test_long_flat_chains(self, calc):
        assert calc(" + ".join(["1"] * 1000)) == 1000
        assert calc(" - ".join(["1"] * 1000)) == -998
        assert calc(" * ".join(["2"] * 300)) == 2**300

    @pytest.mark.parametrize("line", ["1e1000000000", "1e-1000000000"])
    def test_huge_literal_exponent(self, calc, line):
        with pytest.raises(InvalidNumberLiteral, match="bits") as info:
            calc(line)
        assert info.value.position == 0


class TestPowers:
    @pytest.mark.parametrize("line, expected", [
        ("4^(1/2)", 2),
        ("8^(2/3)", 4),
        ("(-8)^(1/3)", -2),
        ("(9/4)^(-1/2)", Rational(2, 3)),
        ("1^1000000", 1),
        ("(-1)^1000001", -1),
    ])
    def test_exact(self, calc, line, expected):
        assert calc(line) == expected

    def test_irrational_stays_symbolic(self, show):
        assert show("2^(1/2)") == "2^0.5"
        assert show("(-4)^(1/2)") == "-4^0.5"

    def test_zero_to_negative(self, calc):
        with pytest.raises(DivisionByZero):
            calc("0^-1")

    def test_result_too_large(self, calc):
        with pytest.raises(UnsupportedOperation, match="bits"):
            calc("2^1000000")

    def test_huge_root_degree(self, calc):
        result = calc("3^(1/10^15)")
        assert isinstance(result, BinaryOperationNode)
        assert result.left_expr == ConstantNode(Rational(3))
        assert calc("1^(1/10^15)") == 1


class TestPartial:
    """Unknowns are kept, everything concrete is folded."""

    def test_unknowns_kept(self, show):
        assert show("2*y + 3*y") == "2 * y + 3 * y"
        assert show("2*3 + y") == "6 + y"
        assert show("x") == "x"

    def test_juxtaposition(self, calc, show):
        assert show("1/2b") == "1/2b"
        calc("b := 2")
        assert calc("1/2b") == Rational(1, 4)

    def test_bindings_are_lazy(self, calc, show):
        assert show("x := y + 1") == "y + 1"
        calc("y := 2")
        assert calc("x") == 3
        calc("y := 5")
        assert calc("x") == 6

    def test_self_reference_terminates(self, calc, show):
        assert show("a := a") == "a"
        assert show("a") == "a"
        assert show("a + 1") == "a + 1"

    def test_growing_self_reference(self, calc, show):
        assert show("x := x + 1") == "x + 1"
        assert show("x") == "x + 1"
        assert calc("x := 3") == 3

    def test_mutual_reference_terminates(self, calc, show):
        calc("a := b + 1")
        calc("b := a + 1")
        assert show("a") == "b + 1 + 1 + 1"

    def test_symbolic_builtin(self, show):
        assert show("floor x") == "floor(x)"

    def test_unknown_name_multiplies(self, show):
        assert show("unknown(2 + 3)") == "unknown 5"

    def test_division_by_concrete_zero(self, calc):
        with pytest.raises(DivisionByZero):
            calc("x / 0")
        with pytest.raises(DivisionByZero):
            calc("x % (1 - 1)")


class TestAssignment:
    def test_stores_reduced_value(self, env, calc):
        assert calc("x := 1 + 2") == 3
        assert env['x'] == ConstantNode(Rational(3))

    def test_chained(self, env, calc):
        assert calc("a := b := 3") == 3
        assert env['a'] == env['b'] == ConstantNode(Rational(3))

    def test_failure_leaves_env_untouched(self, env, calc):
        calc("x := 5")
        with pytest.raises(DivisionByZero):
            calc("x := 1/0")
        with pytest.raises(DivisionByZero):
            calc("y := z := 1/0")
        assert env['x'] == ConstantNode(Rational(5))
        assert 'y' not in env
        assert 'z' not in env

    def test_expression_does_not_bind(self, env, calc):
        calc("x := 2")
        before = dict(env)
        calc("x + 1")
        assert dict(env) == before


class TestBuiltins:
    @pytest.mark.parametrize("line, expected", [
        ("floor 3.7", 3),
        ("floor(-3.2)", -4),
        ("ceil 3.2", 4),
        ("round 2.5", 2),
        ("round 3.5", 4),
        ("round(2.675, 2)", Rational(67, 25)),
        ("trunc(-3.7)", -3),
        ("fract(-3.75)", Rational(-3, 4)),
        ("abs(-1/2)", Rational(1, 2)),
        ("sgn(-4)", -1),
        ("gcd(12, 18)", 6),
        ("lcm(4, 6)", 12),
        ("max(1, 1/2, 3)", 3),
        ("min(1, 1/2, 3)", Rational(1, 2)),
        ("floor 7/2", Rational(7, 2)),
        ("2 floor 3.5", 6),
    ])
    def test_values(self, calc, line, expected):
        assert calc(line) == expected

    def test_wrong_arity(self, calc):
        with pytest.raises(ArityError) as info:
            calc("floor(3.2, 1)")
        assert isinstance(info.value, DomainError)
        with pytest.raises(ArityError):
            calc("floor(x, 1)")
        with pytest.raises(ArityError):
            calc("max()")

    def test_integer_arguments(self, calc):
        with pytest.raises(DomainError, match="ℤ"):
            calc("gcd(1/2, 2)")
        with pytest.raises(DomainError):
            calc("round(1, 1/2)")

    @pytest.mark.parametrize("line", ["round(1, 10^9)", "round(1, -10^9)"])
    def test_round_places_bounded(self, calc, line):
        with pytest.raises(UnsupportedOperation, match="places"):
            calc(line)


class TestSets:
    def test_construction(self, calc):
        assert calc("()") == FiniteSet()
        assert calc("(1,)") == FiniteSet([Rational(1)])
        assert len(calc("(1, 2, 3)")) == 3
        assert calc("(1, x)")[0] == 1

    def test_elements_are_evaluated(self, calc):
        assert calc("(1 + 1, x)") == FiniteSet(
            [Rational(2), IdentifierNode('x')]
        )

    def test_printing(self, show):
        assert show("()") == "∅"
        assert show("(1/2, 2)") == "{0.5, 2}"

    @pytest.mark.parametrize("line", [
        "(1, 2) + 1",
        "-(1,)",
        "floor((1, 2))",
        "s * 2",
    ])
    def test_no_arithmetic(self, calc, line):
        calc("s := (3, 4)")
        with pytest.raises(UnsupportedOperation):
            calc(line)


class TestUserFunctions:
    def test_define_and_call(self, calc):
        assert isinstance(calc("f(x) := x^2 + 1"), LambdaFunctionNode)
        assert calc("f(3)") == 10
        assert calc("f 2") == 5
        assert calc("2 f 2") == 10

    def test_several_parameters(self, calc, show):
        calc("g(x, y) := x y + 1")
        assert calc("g(2, 3)") == 7
        assert show("g(2, z)") == "2z + 1"

    def test_parameters_shadow_globals(self, calc):
        calc("x := 10")
        calc("h(x) := x * 2")
        assert calc("h(3)") == 6

    def test_globals_resolved_when_called(self, calc, show):
        calc("g(y) := k + y")
        assert show("g(1)") == "k + 1"
        calc("k := 10")
        assert calc("g(1)") == 11

    def test_global_not_captured_by_parameter(self, calc, show):
        calc("k := z")
        calc("p(z) := k + z")
        assert show("p(3)") == "k + 3"
        calc("k := 5")
        assert calc("p(3)") == 8

    def test_recursion_stays_symbolic(self, calc, show):
        calc("fact(n) := n * fact(n - 1)")
        assert show("fact(3)") == "3 * fact(2)"

    def test_arity(self, calc):
        calc("f(x) := x")
        with pytest.raises(ArityError):
            calc("f(1, 2)")

    def test_redefinition(self, calc):
        calc("f(x) := x + 1")
        calc("f(x) := x + 2")
        assert calc("f(1)") == 3

    def test_unicode_names(self, calc):
        calc("π := 3")
        assert calc("2π") == 6


def test_depth_limit():
    env = Environment()
    limits = Limits(max_depth=3, max_exponent_bits=100)
    with pytest.raises(DepthExceeded):
        evaluate(parse("1 + (2 + (3 + (4 + 5)))"), env, limits)
    assert evaluate(parse("1 + 2"), env, limits) == 3


def test_depth_ignores_chain_length():
    env = Environment()
    limits = Limits(max_depth=3, max_exponent_bits=100)
    line = " + ".join(["1"] * 50)
    assert evaluate(parse(line), env, limits) == 50
    with pytest.raises(DepthExceeded):
        evaluate(parse(f"{line} + (1 + (1 + (1 + 1)))"), env, limits)


def test_limits_from_settings(isolated_config):
    isolated_config.write_text('{"max_depth": 7}')
    assert Limits.from_settings() == Limits(max_depth=7)
    given = DEFAULT_SETTINGS | {"max_nesting": 3}
    assert Limits.from_settings(given) == Limits(max_nesting=3)
