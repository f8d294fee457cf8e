from __future__ import annotations
from dataclasses import dataclass
import string

BRACKETS = {
    '(': ')',
}

BRACKET_START_CHARS = set(b[0] for b in BRACKETS)
BRACKET_END_CHARS = set(b[0] for b in BRACKETS.values())
NUMBER_LITERAL_START_CHARS = '0123456789.'
DIGITS = '0123456789'

@dataclass(frozen=True)
class Operator:
    symbol: str
    precedence: int
class UnaryOperator(Operator): pass
class PrefixUnaryOperator(UnaryOperator): pass
class BinaryOperator(Operator): pass
class LeftAssociativeBinaryOperator(BinaryOperator): pass
class RightAssociativeBinaryOperator(BinaryOperator): pass

LeftAssociative = LeftAssociativeBinaryOperator
RightAssociative = PrefixUnaryOperator | RightAssociativeBinaryOperator

# U+2062 INVISIBLE TIMES, never typed, inserted between juxtaposed operands
IMPLICIT_MULTIPLICATION = '⁢'

# bare and parenthesized function application binds tightest
APPLICATION_PRECEDENCE = 140

OPERATORS: list[Operator] = [
    ## prefix unary ##
    PrefixUnaryOperator('+', 130),  # positive
    PrefixUnaryOperator('-', 130),  # negative

    ## binary ##
    RightAssociativeBinaryOperator('^', 120),  # exponentiation
    # juxtaposition sits between ^ and *, so 1/2b is 1/(2b)
    LeftAssociativeBinaryOperator(IMPLICIT_MULTIPLICATION, 110),
    LeftAssociativeBinaryOperator('*', 100),  # multiplication
    LeftAssociativeBinaryOperator('/', 100),  # division
    LeftAssociativeBinaryOperator('%', 100),  # floored modulo
    LeftAssociativeBinaryOperator('+', 90),   # addition
    LeftAssociativeBinaryOperator('-', 90),   # subtraction
    # assignment, only at the top of a line
    RightAssociativeBinaryOperator(':=', 1),
    RightAssociativeBinaryOperator('=', 1),
]

ASSIGNMENT_OPERATORS = (':=', '=')

# common mathematical glyphs accepted in place of the ascii operators
OPERATOR_ALIASES = {
    '×': '*',
    '·': '*',
    '⋅': '*',
    '∗': '*',
    '÷': '/',
    '∕': '/',
    '−': '-',
    '≔': ':=',
}

VALID_OPERATOR_SYMBOLS = [
    op.symbol for op in OPERATORS
    if op.symbol != IMPLICIT_MULTIPLICATION
] + list(OPERATOR_ALIASES)

OPERATOR_START_CHARS = set(op[0] for op in VALID_OPERATOR_SYMBOLS)

PREFIX_UNARY_OPERATORS = {
    op.symbol: op for op in OPERATORS
    if isinstance(op, PrefixUnaryOperator)
}
BINARY_OPERATORS = {
    op.symbol: op for op in OPERATORS
    if isinstance(op, BinaryOperator)
}

# greek letters (U+03A2 is unassigned), their symbol variants
# and a few letterlike symbols
UNICODE_IDENTIFIER_CHARS = frozenset(
    [chr(c) for c in range(0x391, 0x3AA) if c != 0x3A2] +
    [chr(c) for c in range(0x3B1, 0x3CA)] +
    list('ϑϕϖϵ') +
    list('ℯℏ∞ℵ')
)
IDENTIFIER_START_CHARS = frozenset(string.ascii_letters) | UNICODE_IDENTIFIER_CHARS
IDENTIFIER_CHARS = IDENTIFIER_START_CHARS | frozenset(DIGITS + '_')
