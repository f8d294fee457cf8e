from __future__ import annotations
from typing import Optional, TYPE_CHECKING
from dataclasses import dataclass
import logging
from tokens import (
    Token, TokenGroup, IdentifierToken, NumberToken,
    OperatorToken, SeparatorToken, UnknownOperatorToken
)
from errors import (
    ParseError, InvalidExpressionList, InvalidAssignmentTarget
)
from constants import (
    ASSIGNMENT_OPERATORS, BinaryOperator, PrefixUnaryOperator,
    RightAssociative
)
from custom_types import Rational
from tokenizer import full_tokenize, _specify_operator_type, group_unary
from defaults import defaults
from config_manager import Limits

if TYPE_CHECKING:
    from executor import Environment

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Node: pass
@dataclass(frozen=True)
class ExpressionNode(Node): pass
@dataclass(frozen=True)
class IdentifierNode(ExpressionNode):
    value: str
@dataclass(frozen=True)
class ConstantNode(ExpressionNode):
    value: Rational
@dataclass(frozen=True)
class SetNode(ExpressionNode):
    exprs: tuple[ExpressionNode, ...]
class OperationNode(ExpressionNode): pass
@dataclass(frozen=True)
class PrefixUnaryOperationNode(OperationNode):
    operator: str
    expr: ExpressionNode
@dataclass(frozen=True)
class BinaryOperationNode(OperationNode):
    operator: str
    left_expr: ExpressionNode
    right_expr: ExpressionNode
@dataclass(frozen=True)
class FunctionApplicationNode(ExpressionNode):
    function: str
    args: tuple[ExpressionNode, ...]
@dataclass(frozen=True)
class LambdaFunctionNode(ExpressionNode):
    parameters: tuple[str, ...]
    expr: ExpressionNode
@dataclass(frozen=True)
class AssignmentNode(ExpressionNode):
    target: str
    value: ExpressionNode


def split_expression_list(
    tokenized: list[Token | TokenGroup]
) -> list[list[Token | TokenGroup]]:
    """Split on commas, a single trailing comma is allowed."""
    result: list[list[Token | TokenGroup]] = []
    if not tokenized:
        return result
    if isinstance(tokenized[0], SeparatorToken):
        raise InvalidExpressionList(
            "First element of expression list is a separator.",
            tokenized[0].position
        )
    result.append([])
    for token in tokenized:
        if isinstance(token, SeparatorToken):
            if not result[-1]:
                raise InvalidExpressionList(
                    "Multiple separators in a row.", token.position
                )
            result.append([])
            continue
        result[-1].append(token)
    if not result[-1]:
        result.pop()
    return result


def _position(tok: Token | TokenGroup) -> Optional[int]:
    return tok.position if tok.position >= 0 else None

def parse_expression(
    tokenized: list[Token | TokenGroup] | TokenGroup | Token
) -> ExpressionNode:
    if isinstance(tokenized, (TokenGroup, Token)):
        tokenized = [tokenized]
    match tokenized:
        case []:
            raise ParseError("Blank expression encountered.")
        ### number ###
        case [NumberToken(number=number)]:
            return ConstantNode(number)
        ### identifier ###
        case [IdentifierToken(name)]:
            return IdentifierNode(name)
        ### group or set ###
        case [TokenGroup(bracket='(', values=values)]:
            if values and not any(
                isinstance(tok, SeparatorToken) for tok in values
            ):
                return parse_expression(values)
            return SetNode(tuple(
                parse_expression(expr)
                for expr in split_expression_list(values)
            ))
        ### prefix unary operator ###
        case [
            TokenGroup(None, [
                OperatorToken(op, PrefixUnaryOperator()), operand
            ])
        ]:
            return PrefixUnaryOperationNode(op, parse_expression(operand))
        ### function application with an argument list ###
        case [
            TokenGroup(None, [
                IdentifierToken(name), TokenGroup(bracket='(') as arguments
            ])
        ]:
            return FunctionApplicationNode(name, tuple(
                parse_expression(expr)
                for expr in split_expression_list(arguments.values)
            ))
        ### bare function application ###
        case [TokenGroup(None, [IdentifierToken(name), operand])]:
            return FunctionApplicationNode(
                name, (parse_expression(operand),)
            )
        ### complex expression ###
        case _:
            return parse_complex_expression(tokenized)

def parse_complex_expression(
    tokenized: list[Token | TokenGroup]
) -> ExpressionNode:
    # after grouping, operands and binary operators alternate
    for i, tok in enumerate(tokenized):
        is_operator = (
            isinstance(tok, OperatorToken) and
            isinstance(tok.operator, BinaryOperator)
        )
        if is_operator != (i % 2 == 1):
            raise ParseError("Unexpected token.", _position(tok))
    if len(tokenized) % 2 == 0:
        raise ParseError(
            "Expression ends with an operator.", _position(tokenized[-1])
        )

    operators = [tok.operator for tok in tokenized[1::2]]  # type: ignore
    lowest = min(operators, key=lambda operator: operator.precedence)
    # each precedence level has a single associativity, so every
    # operator at the lowest level can be split on at once
    split_indices = [
        i for i in range(1, len(tokenized), 2)
        if tokenized[i].operator.precedence == lowest.precedence  # type: ignore
    ]
    bounds = [-1, *split_indices, len(tokenized)]
    operands = [
        parse_expression(tokenized[start+1:stop])
        for start, stop in zip(bounds, bounds[1:])
    ]
    symbols = [tokenized[i].value for i in split_indices]
    if isinstance(lowest, RightAssociative):
        node = operands[-1]
        for symbol, operand in zip(reversed(symbols), reversed(operands[:-1])):
            node = BinaryOperationNode(symbol, operand, node)
        return node
    node = operands[0]
    for symbol, operand in zip(symbols, operands[1:]):
        node = BinaryOperationNode(symbol, node, operand)
    return node


def _parse_parameters(parameters: TokenGroup) -> tuple[str, ...]:
    names: list[str] = []
    for parameter in split_expression_list(parameters.values):
        match parameter:
            case [IdentifierToken(name) as tok]:
                if name in defaults:
                    raise InvalidAssignmentTarget(
                        f"Built-in function '{name}' cannot be a parameter.",
                        tok.position
                    )
                if name in names:
                    raise InvalidAssignmentTarget(
                        f"Duplicate parameter '{name}'.", tok.position
                    )
                names.append(name)
            case [tok, *_]:
                raise InvalidAssignmentTarget(
                    "Function parameters have to be identifiers.",
                    _position(tok)
                )
    return tuple(names)

def parse_line(
    tokenized: list[Token | TokenGroup],
    functions: set[str],
    max_nesting: int
) -> ExpressionNode:
    """Parse grouped tokens of a whole line, which may be an assignment."""
    for i, tok in enumerate(tokenized):
        if not (
            isinstance(tok, UnknownOperatorToken) and
            tok.value in ASSIGNMENT_OPERATORS
        ):
            continue
        target, value = tokenized[:i], tokenized[i+1:]
        if not value:
            raise ParseError(
                f"Expected a value after '{tok.value}'.", tok.position
            )
        match target:
            case []:
                raise InvalidAssignmentTarget(
                    f"Expected a target before '{tok.value}'.", tok.position
                )
            case [IdentifierToken(name) as target_tok]:
                if name in defaults:
                    raise InvalidAssignmentTarget(
                        f"Cannot assign to built-in function '{name}'.",
                        target_tok.position
                    )
                return AssignmentNode(
                    name, parse_line(value, functions - {name}, max_nesting)
                )
            case [
                IdentifierToken(name) as target_tok,
                TokenGroup(bracket='(') as parameters
            ]:
                if name in defaults:
                    raise InvalidAssignmentTarget(
                        f"Cannot redefine built-in function '{name}'.",
                        target_tok.position
                    )
                names = _parse_parameters(parameters)
                body = parse_line(
                    value, (functions | {name}) - set(names), max_nesting
                )
                if isinstance(body, AssignmentNode):
                    raise ParseError(
                        "A function body cannot be an assignment.",
                        tok.position
                    )
                logger.debug("parsed definition of %s%s", name, names)
                return AssignmentNode(name, LambdaFunctionNode(names, body))
            case [first, *_]:
                raise InvalidAssignmentTarget(
                    "Can only assign to an identifier or a function "
                    "signature like f(x, y).",
                    _position(first)
                )
    if not tokenized:
        raise ParseError("Blank expression encountered.")
    tokenized = _specify_operator_type(tokenized, functions)
    tokenized = group_unary(tokenized, functions, max_nesting)
    return parse_expression(tokenized)

def parse(
    line: str,
    env: Optional[Environment] = None,
    limits: Optional[Limits] = None
) -> ExpressionNode:
    """
    Lex and parse one line into an expression tree.

    Built-in function names are always applied to what follows them,
    names of functions defined in ``env`` are too; any other name next
    to an operand is multiplied with it.
    """
    if limits is None:
        limits = Limits.from_settings()
    functions = set(defaults)
    if env is not None:
        functions |= env.functions
    tokenized = full_tokenize(
        line, limits.max_nesting, limits.max_exponent_bits
    )
    return parse_line(tokenized, functions, limits.max_nesting)
