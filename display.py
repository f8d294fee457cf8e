from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional
from custom_types import Rational
from sets import FiniteSet
from constants import (
    BINARY_OPERATORS, PREFIX_UNARY_OPERATORS, APPLICATION_PRECEDENCE,
    IMPLICIT_MULTIPLICATION, LeftAssociative, RightAssociative
)
from parser import (
    ExpressionNode, ConstantNode, IdentifierNode, SetNode,
    PrefixUnaryOperationNode, BinaryOperationNode, FunctionApplicationNode,
    LambdaFunctionNode, AssignmentNode
)

@dataclass(frozen=True)
class DecimalExpansion:
    negative: bool
    integer: int
    prefix: str
    cycle: str

    def __str__(self):
        text = ('-' if self.negative else '') + str(self.integer)
        if self.prefix or self.cycle:
            text += '.' + self.prefix
        if self.cycle:
            text += f'({self.cycle})'
        return text


def decimal_expansion(
    value: Rational,
    max_digits: Optional[int] = None
) -> Optional[DecimalExpansion]:
    """
    Long division of |numerator| by denominator, stopping at the first
    remainder seen twice, which starts the repeating cycle.

    Remainders lie in [0, denominator), so this takes at most
    denominator steps. With ``max_digits`` set, None is returned
    instead of computing more fractional digits than that.
    """
    integer, remainder = divmod(abs(value.numerator), value.denominator)
    digits: list[str] = []
    seen: dict[int, int] = {}
    while remainder and remainder not in seen:
        if max_digits is not None and len(digits) >= max_digits:
            return None
        seen[remainder] = len(digits)
        digit, remainder = divmod(remainder * 10, value.denominator)
        digits.append(str(digit))
    start = seen[remainder] if remainder else len(digits)
    return DecimalExpansion(
        value.numerator < 0,
        integer,
        ''.join(digits[:start]),
        ''.join(digits[start:])
    )

def render(value: Rational, max_digits: Optional[int] = None) -> str:
    """
    Minimal decimal text, with a repeating cycle in parentheses:
    1/6 is 0.1(6). Past ``max_digits`` the exact p/q form is used.
    """
    expansion = decimal_expansion(value, max_digits)
    if expansion is None:
        return str(value)
    return str(expansion)


ATOM_PRECEDENCE = 1000

def _constant_as_operation(
    value: Rational,
    max_digits: Optional[int]
) -> Optional[ExpressionNode]:
    # a constant inside an expression is written so it parses back:
    # negatives as -x, repeating decimals as p/q
    if value < 0:
        return PrefixUnaryOperationNode('-', ConstantNode(-value))
    expansion = decimal_expansion(value, max_digits)
    if expansion is None or expansion.cycle:
        return BinaryOperationNode(
            '/',
            ConstantNode(Rational(value.numerator)),
            ConstantNode(Rational(value.denominator))
        )
    return None

def _precedence(node: ExpressionNode, max_digits: Optional[int]) -> int:
    match node:
        case ConstantNode(value):
            operation = _constant_as_operation(value, max_digits)
            if operation is not None:
                return _precedence(operation, max_digits)
            return ATOM_PRECEDENCE
        case PrefixUnaryOperationNode(op):
            return PREFIX_UNARY_OPERATORS[op].precedence
        case BinaryOperationNode(op):
            return BINARY_OPERATORS[op].precedence
        case FunctionApplicationNode():
            return APPLICATION_PRECEDENCE
        case AssignmentNode():
            return BINARY_OPERATORS[':='].precedence
        case LambdaFunctionNode():
            return 0
    return ATOM_PRECEDENCE

def _wrap(text: str, needed: bool) -> str:
    return f"({text})" if needed else text

def _format_binary(
    node: BinaryOperationNode,
    max_digits: Optional[int]
) -> str:
    operator = BINARY_OPERATORS[node.operator]
    left_precedence = _precedence(node.left_expr, max_digits)
    right_precedence = _precedence(node.right_expr, max_digits)
    left = _wrap(
        format_expression(node.left_expr, max_digits),
        left_precedence < operator.precedence or (
            left_precedence == operator.precedence and
            isinstance(operator, RightAssociative)
        )
    )
    right = format_expression(node.right_expr, max_digits)
    right = _wrap(
        right,
        right_precedence < operator.precedence or (
            right_precedence == operator.precedence and
            isinstance(operator, LeftAssociative)
        ) or (
            # x -3 would read back as a subtraction
            node.operator == IMPLICIT_MULTIPLICATION and
            right.startswith(('-', '+'))
        )
    )
    if node.operator == IMPLICIT_MULTIPLICATION:
        # 2b, 2(x + 1), (x + 1)y, but x y, x 2 and 2 e (not 2e)
        glued = right.startswith('(') or (
            left[-1].isdigit() and not right[0].isdigit() and
            right[0] not in '.eE'
        ) or left.endswith(')')
        return f"{left}{'' if glued else ' '}{right}"
    if node.operator in ('^', '/'):
        return f"{left}{node.operator}{right}"
    return f"{left} {node.operator} {right}"

def format_expression(
    node: ExpressionNode,
    max_digits: Optional[int] = None
) -> str:
    """Write an expression back in the input syntax."""
    match node:
        case ConstantNode(value):
            operation = _constant_as_operation(value, max_digits)
            if operation is not None:
                return format_expression(operation, max_digits)
            return render(value)
        case IdentifierNode(name):
            return name
        case SetNode(exprs) if len(exprs) == 1:
            return f"({format_expression(exprs[0], max_digits)},)"
        case SetNode(exprs):
            return '(' + ', '.join(
                format_expression(expr, max_digits) for expr in exprs
            ) + ')'
        case PrefixUnaryOperationNode(op, expr):
            operand = format_expression(expr, max_digits)
            return op + _wrap(
                operand,
                _precedence(expr, max_digits) <
                PREFIX_UNARY_OPERATORS[op].precedence or
                operand.startswith(('-', '+'))
            )
        case BinaryOperationNode():
            return _format_binary(node, max_digits)
        case FunctionApplicationNode(name, args):
            return f"{name}(" + ', '.join(
                format_expression(arg, max_digits) for arg in args
            ) + ')'
        case LambdaFunctionNode(parameters, expr):
            return (
                f"({', '.join(parameters)}) ↦ "
                f"{format_expression(expr, max_digits)}"
            )
        case AssignmentNode(target, LambdaFunctionNode(parameters, expr)):
            return (
                f"{target}({', '.join(parameters)}) := "
                f"{format_expression(expr, max_digits)}"
            )
        case AssignmentNode(target, value):
            return f"{target} := {format_expression(value, max_digits)}"
    raise TypeError(f"Cannot format {node!r}.")

def format_result(value: Any, max_digits: Optional[int] = None) -> str:
    """Text for anything evaluation returns: a number, a set or an expression."""
    match value:
        case Rational():
            return render(value, max_digits)
        case FiniteSet() if not value:
            return '∅'
        case FiniteSet():
            return '{' + ', '.join(
                format_result(element, max_digits) for element in value
            ) + '}'
    return format_expression(value, max_digits)
