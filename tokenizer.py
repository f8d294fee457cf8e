from __future__ import annotations
from collections.abc import Container, Iterator
from typing import Optional
from errors import (
    UnknownCharacterError, InvalidNumberLiteral, ParseError,
    UnbalancedBracketsError, UnclosedBracketsError, NestingTooDeep
)
from tokens import (
    Token, TokenGroup, IdentifierToken, NumberToken, OperatorToken,
    SeparatorToken, OpenBracketToken, ClosedBracketToken,
    UnknownOperatorToken, EndToken
)
from constants import (
    BRACKET_START_CHARS, BRACKET_END_CHARS, DIGITS,
    NUMBER_LITERAL_START_CHARS, OPERATOR_START_CHARS, VALID_OPERATOR_SYMBOLS,
    OPERATOR_ALIASES, PREFIX_UNARY_OPERATORS, BINARY_OPERATORS,
    ASSIGNMENT_OPERATORS, IMPLICIT_MULTIPLICATION, IDENTIFIER_START_CHARS,
    IDENTIFIER_CHARS, PrefixUnaryOperator
)
from custom_types import Rational
from utils import prev_curr_next_iter

def _consume_digits(expression: str, cursor: int) -> int:
    while cursor < len(expression) and expression[cursor] in DIGITS:
        cursor += 1
    return cursor

def _tokenize_number(expression: str, cursor: int) -> str:
    new_cursor = _consume_digits(expression, cursor)
    if new_cursor < len(expression) and expression[new_cursor] == '.':
        new_cursor = _consume_digits(expression, new_cursor+1)
    # an exponent needs digits, otherwise the e is an identifier: 2e is 2*e
    if new_cursor < len(expression) and expression[new_cursor] in 'eE':
        exponent_cursor = new_cursor + 1
        if (
            exponent_cursor < len(expression) and
            expression[exponent_cursor] in '+-'
        ):
            exponent_cursor += 1
        if (
            exponent_cursor < len(expression) and
            expression[exponent_cursor] in DIGITS
        ):
            new_cursor = _consume_digits(expression, exponent_cursor)
    if new_cursor < len(expression) and expression[new_cursor] == '.':
        raise InvalidNumberLiteral(
            f"Invalid decimal literal '{expression[cursor:new_cursor+1]}'.",
            cursor
        )
    return expression[cursor:new_cursor]

def _tokenize_identifier(expression: str, cursor: int) -> str:
    new_cursor = cursor+1
    while (
        new_cursor < len(expression) and
        expression[new_cursor] in IDENTIFIER_CHARS
    ):
        new_cursor += 1
    return expression[cursor:new_cursor]

def tokenize_expression(
    expression: str,
    max_bits: Optional[int] = None
) -> Iterator[Token]:
    """
    Split a line into a flat token stream, ending with an EndToken.

    Operator glyphs are normalized to their ascii symbol, so a token's
    value can be shorter or longer than the text it was read from.
    Number literals that may need more than ``max_bits`` bits are
    rejected.
    """
    cursor = 0
    max_operator_length = len(max(VALID_OPERATOR_SYMBOLS, key=len))
    min_operator_length = len(min(VALID_OPERATOR_SYMBOLS, key=len))

    while cursor < len(expression):
        char = expression[cursor]
        if char in NUMBER_LITERAL_START_CHARS:
            if char == '.' and (
                cursor + 1 == len(expression) or
                expression[cursor+1] not in DIGITS
            ):
                raise UnknownCharacterError(
                    "Unknown character '.'.", cursor
                )
            number = _tokenize_number(expression, cursor)
            try:
                value = Rational.from_decimal(number, max_bits)
            except InvalidNumberLiteral as e:
                raise InvalidNumberLiteral(e.message, cursor) from None
            yield NumberToken(number, value, position=cursor)
            cursor += len(number)
        elif char in BRACKET_START_CHARS:
            yield OpenBracketToken(char, position=cursor)
            cursor += 1
        elif char in BRACKET_END_CHARS:
            yield ClosedBracketToken(char, position=cursor)
            cursor += 1
        elif char in OPERATOR_START_CHARS:
            for i in range(max_operator_length, min_operator_length-1, -1):
                if cursor + i > len(expression):
                    continue
                symbol = expression[cursor:cursor+i]
                if symbol in VALID_OPERATOR_SYMBOLS:
                    yield UnknownOperatorToken(
                        OPERATOR_ALIASES.get(symbol, symbol),
                        position=cursor
                    )
                    cursor += i
                    break
            else:
                raise UnknownCharacterError(
                    f"Unknown character '{char}'.", cursor
                )
        elif char == ',':
            yield SeparatorToken(char, position=cursor)
            cursor += 1
        elif char in IDENTIFIER_START_CHARS:
            identifier = _tokenize_identifier(expression, cursor)
            yield IdentifierToken(identifier, position=cursor)
            cursor += len(identifier)
        elif not char.strip():
            cursor += 1
        else:
            raise UnknownCharacterError(
                f"Unknown character '{char}'.", cursor
            )
    yield EndToken('', position=cursor)


def group_brackets(
    tokenized: list[Token],
    max_nesting: int
) -> list[Token | TokenGroup]:
    def _group(
        start_index: int,
        final: list[Token | TokenGroup],
        depth: int,
        opening: OpenBracketToken | None = None
    ) -> int:
        if depth > max_nesting:
            raise NestingTooDeep(
                f"Brackets are nested deeper than {max_nesting} levels.",
                opening.position if opening is not None else None
            )
        i = start_index
        while i < len(tokenized):
            match tokenized[i]:
                case OpenBracketToken() as tok:
                    result: list[Token | TokenGroup] = []
                    i = _group(i+1, result, depth+1, tok)
                    final.append(
                        TokenGroup(tok.value, result, position=tok.position)
                    )
                case ClosedBracketToken() as tok:
                    if opening is None:
                        raise UnbalancedBracketsError(
                            f"Closing {tok.value} without an opening match.",
                            tok.position
                        )
                    return i+1
                case EndToken():
                    if opening is not None:
                        raise UnclosedBracketsError(
                            f"Bracket {opening.value} is not closed.",
                            opening.position
                        )
                    return i+1
                case tok:
                    final.append(tok)
                    i += 1
        return len(tokenized)
    result: list[Token | TokenGroup] = []
    _group(0, result, 0)
    return result

def full_tokenize(
    expression: str,
    max_nesting: int,
    max_bits: Optional[int] = None
) -> list[Token | TokenGroup]:
    return group_brackets(
        list(tokenize_expression(expression, max_bits)), max_nesting
    )


def _ends_operand(
    tok: Token | TokenGroup | None,
    functions: Container[str]
) -> bool:
    match tok:
        case NumberToken() | TokenGroup():
            return True
        case IdentifierToken(name):
            return name not in functions
    return False

def _starts_operand(tok: Token | TokenGroup | None) -> bool:
    return isinstance(tok, (NumberToken, IdentifierToken, TokenGroup))

def _specify_operator_type(
    tokenized: list[Token | TokenGroup],
    functions: Container[str],
    top_level: bool = True
) -> list[Token | TokenGroup]:
    """
    Decide prefix or binary for every operator, check that functions
    get an argument, and insert an implicit multiplication between
    juxtaposed operands.
    """
    result: list[Token | TokenGroup] = []
    for _, c, n in prev_curr_next_iter(tokenized):
        p = result[-1] if result else None
        match c:
            case TokenGroup():
                c = TokenGroup(
                    c.bracket,
                    _specify_operator_type(c.values, functions, False),
                    position=c.position
                )
            case SeparatorToken() if top_level:
                raise ParseError("Unexpected ','.", c.position)
            case UnknownOperatorToken(op) if op in ASSIGNMENT_OPERATORS:
                raise ParseError(
                    f"Unexpected '{op}', assignment is only allowed "
                    "once at the start of a line.",
                    c.position
                )
            case UnknownOperatorToken(op):
                if n is None or isinstance(n, SeparatorToken):
                    raise ParseError(
                        f"Expected an operand after '{op}'.", c.position
                    )
                # mark an operator as a prefix unary operator
                if not _ends_operand(p, functions):
                    if op not in PREFIX_UNARY_OPERATORS:
                        raise ParseError(
                            f"Expected an operand before '{op}'.", c.position
                        )
                    c = OperatorToken(
                        op, PREFIX_UNARY_OPERATORS[op], position=c.position
                    )
                else:
                    c = OperatorToken(
                        op, BINARY_OPERATORS[op], position=c.position
                    )
            case IdentifierToken(name) if name in functions:
                if not (
                    _starts_operand(n) or
                    isinstance(n, UnknownOperatorToken) and
                    n.value in PREFIX_UNARY_OPERATORS
                ):
                    raise ParseError(
                        f"Function '{name}' expects an argument.", c.position
                    )
        if _ends_operand(p, functions) and _starts_operand(c):
            result.append(OperatorToken(
                IMPLICIT_MULTIPLICATION,
                BINARY_OPERATORS[IMPLICIT_MULTIPLICATION],
                position=c.position
            ))
        result.append(c)
    return result

def group_unary(
    tokenized: list[Token | TokenGroup],
    functions: Container[str],
    max_nesting: int
) -> list[Token | TokenGroup]:
    """
    Bind prefix operators and function names to the single operand
    right after them, as TokenGroup(None, [operator, operand]).

    Going right to left makes - - 3 and floor -3 nest correctly.
    Every bracket and every bound operator or function counts as one
    level of nesting, more than ``max_nesting`` raises NestingTooDeep.
    """
    grouped, _ = _group_unary(tokenized, functions, max_nesting)
    return grouped

def _group_unary(
    tokenized: list[Token | TokenGroup],
    functions: Container[str],
    max_nesting: int
) -> tuple[list[Token | TokenGroup], int]:
    tokenized_copy: list[Token | TokenGroup] = []
    # nesting below each token in tokenized_copy
    levels: list[int] = []
    for tok in tokenized:
        if isinstance(tok, TokenGroup):
            values, level = _group_unary(tok.values, functions, max_nesting)
            tok = TokenGroup(tok.bracket, values, position=tok.position)
            _check_nesting(level + 1, max_nesting, tok)
            levels.append(level + 1)
        else:
            levels.append(0)
        tokenized_copy.append(tok)
    for i in range(len(tokenized_copy) - 2, -1, -1):
        match tokenized_copy[i]:
            case (
                OperatorToken(operator=PrefixUnaryOperator()) |
                IdentifierToken()
            ) as tok if (
                isinstance(tok, OperatorToken) or tok.value in functions
            ):
                _check_nesting(levels[i+1] + 1, max_nesting, tok)
                tokenized_copy[i:i+2] = [TokenGroup(
                    None, [tok, tokenized_copy[i+1]], position=tok.position
                )]
                levels[i:i+2] = [levels[i+1] + 1]
    return tokenized_copy, max(levels, default=0)

def _check_nesting(
    level: int,
    max_nesting: int,
    tok: Token | TokenGroup
) -> None:
    if level > max_nesting:
        raise NestingTooDeep(
            f"Expression is nested deeper than {max_nesting} levels.",
            tok.position
        )
