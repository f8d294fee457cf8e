import pytest

from custom_types import Rational
from errors import (
    InvalidNumberLiteral, NestingTooDeep, UnbalancedBracketsError,
    UnclosedBracketsError, UnknownCharacterError, LexError, ParseError
)
from tokenizer import tokenize_expression, full_tokenize
from tokens import (
    TokenGroup, NumberToken, IdentifierToken, SeparatorToken,
    UnknownOperatorToken, EndToken
)


def values(line):
    return [tok.value for tok in tokenize_expression(line)]


def test_simple_stream():
    assert list(tokenize_expression("12.5 + x")) == [
        NumberToken('12.5', Rational(25, 2)),
        UnknownOperatorToken('+'),
        IdentifierToken('x'),
        EndToken(''),
    ]


def test_positions():
    assert [tok.position for tok in tokenize_expression("a+ 12")] == [
        0, 1, 3, 5
    ]


def test_longest_operator_wins():
    assert values("a:=b") == ['a', ':=', 'b', '']
    assert values("a = b") == ['a', '=', 'b', '']


@pytest.mark.parametrize("line, expected", [
    ("3 × 4 ÷ 2 − 1", ['3', '*', '4', '/', '2', '-', '1', '']),
    ("a · b ⋅ c ∗ d", ['a', '*', 'b', '*', 'c', '*', 'd', '']),
    ("1 ∕ 2", ['1', '/', '2', '']),
    ("x ≔ 2", ['x', ':=', '2', '']),
])
def test_operator_glyphs(line, expected):
    assert values(line) == expected


def test_unicode_identifiers():
    assert values("2π r") == ['2', 'π', 'r', '']
    assert values("Δx_1 + ℏω") == ['Δx_1', '+', 'ℏω', '']


class TestNumbers:
    def test_exponent(self):
        tokens = list(tokenize_expression("2.5E-2"))
        assert tokens[0] == NumberToken('2.5E-2', Rational(1, 40))

    def test_e_without_digits_is_identifier(self):
        assert values("2e") == ['2', 'e', '']
        assert values("2e+x") == ['2', 'e', '+', 'x', '']

    def test_leading_and_trailing_dot(self):
        assert values(".5 + 5.") == ['.5', '+', '5.', '']

    def test_second_dot(self):
        with pytest.raises(InvalidNumberLiteral) as info:
            list(tokenize_expression("1 + 1.2.3"))
        assert info.value.position == 4

    def test_lone_dot(self):
        with pytest.raises(UnknownCharacterError):
            list(tokenize_expression("1 + . 5"))


@pytest.mark.parametrize("line, position", [
    ("1 $ 2", 2),
    ("a : b", 2),
    ("x ⊕ y", 2),
    ("{1}", 0),
])
def test_unknown_character(line, position):
    with pytest.raises(UnknownCharacterError) as info:
        list(tokenize_expression(line))
    assert info.value.position == position
    assert isinstance(info.value, LexError)
    assert f"(at position {position})" in str(info.value)


class TestBrackets:
    def test_groups(self):
        assert full_tokenize("(1, 2)", 64) == [
            TokenGroup('(', [
                NumberToken('1', Rational(1)),
                SeparatorToken(','),
                NumberToken('2', Rational(2)),
            ])
        ]

    def test_unclosed(self):
        with pytest.raises(UnclosedBracketsError) as info:
            full_tokenize("2 * (1 + 2", 64)
        assert info.value.position == 4

    def test_unbalanced(self):
        with pytest.raises(UnbalancedBracketsError) as info:
            full_tokenize("1 + 2)", 64)
        assert info.value.position == 5
        assert isinstance(info.value, ParseError)

    def test_nesting_limit(self):
        assert full_tokenize("(1)", 1)
        with pytest.raises(NestingTooDeep) as info:
            full_tokenize("((1))", 1)
        assert info.value.position == 1


def test_number_bit_bound():
    assert values("2 + 1e290") == ['2', '+', '1e290', '']
    with pytest.raises(InvalidNumberLiteral, match="bits") as info:
        list(tokenize_expression("2 + 1e400", 1000))
    assert info.value.position == 4
