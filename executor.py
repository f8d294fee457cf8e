from __future__ import annotations
from collections import ChainMap
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Optional
import logging
import operator
from parser import (
    ExpressionNode, IdentifierNode, ConstantNode, SetNode,
    PrefixUnaryOperationNode, BinaryOperationNode, FunctionApplicationNode,
    LambdaFunctionNode, AssignmentNode
)
from custom_types import Rational, decimal_bits
from sets import FiniteSet
from defaults import defaults, check_arity
from constants import IMPLICIT_MULTIPLICATION
from errors import (
    ArityError, DepthExceeded, DivisionByZero, UnsupportedOperation
)
from config_manager import Limits

logger = logging.getLogger(__name__)

type Value = Rational | FiniteSet | ExpressionNode


class Environment(ChainMap[str, ExpressionNode]):
    """
    Session bindings: each name maps to the expression last assigned to
    it, which may still be symbolic. Functions are bound to a
    LambdaFunctionNode.
    """

    @property
    def functions(self) -> set[str]:
        return {
            name for name, value in self.items()
            if isinstance(value, LambdaFunctionNode)
        }

    @contextmanager
    def transaction(self) -> Iterator[Environment]:
        # bindings go to a child scope and are only
        # copied over if the block finishes
        staged = self.new_child()
        yield staged
        self.maps[0].update(staged.maps[0])


PREFIX_UNARY_OPERATOR_FUNCTIONS: dict[str, Callable[[Rational], Rational]] = {
    '-': operator.neg,
    '+': operator.pos,
}
BINARY_OPERATOR_FUNCTIONS: dict[
    str, Callable[[Rational, Rational], Rational]
] = {
    '+': operator.add, '-': operator.sub,
    '*': operator.mul, IMPLICIT_MULTIPLICATION: operator.mul,
    '/': operator.truediv, '%': operator.mod,
    '^': operator.pow,
}


def to_expression(value: Value) -> ExpressionNode:
    match value:
        case Rational():
            return ConstantNode(value)
        case FiniteSet():
            return SetNode(tuple(to_expression(element) for element in value))
    return value

def _names(value: Value) -> Iterator[str]:
    match value:
        case IdentifierNode(name):
            yield name
        case PrefixUnaryOperationNode(_, expr):
            yield from _names(expr)
        case BinaryOperationNode(_, left_expr, right_expr):
            yield from _names(left_expr)
            yield from _names(right_expr)
        case SetNode(exprs) | FunctionApplicationNode(_, exprs):
            for expr in exprs:
                yield from _names(expr)
        case FiniteSet():
            for element in value:
                yield from _names(element)

def _reject_sets(description: str, *operands: Value) -> None:
    if any(isinstance(operand, FiniteSet) for operand in operands):
        raise UnsupportedOperation(f"Sets do not support {description}.")

def _power(base: Rational, exponent: Rational, limits: Limits) -> Optional[Rational]:
    if not exponent.is_integer():
        # only exact roots, anything irrational stays symbolic
        root = base.root(exponent.denominator)
        if root is None:
            return None
        base, exponent = root, Rational(exponent.numerator)
    trivial = base.is_integer() and abs(base.numerator) <= 1
    if (
        not trivial and
        base.bit_length() * abs(exponent.numerator) > limits.max_exponent_bits
    ):
        raise UnsupportedOperation(
            f"{base}^{exponent} has more than "
            f"{limits.max_exponent_bits} bits."
        )
    return base ** exponent

def _check_round_digits(ndigits: Rational, limits: Limits) -> None:
    # rounding to n places scales by 10^n
    if (
        ndigits.is_integer() and
        decimal_bits(abs(ndigits.numerator)) > limits.max_exponent_bits
    ):
        raise UnsupportedOperation(
            f"Rounding to {ndigits} places needs more than "
            f"{limits.max_exponent_bits} bits."
        )

def _apply_binary(
    symbol: str,
    lhs: Value,
    rhs: Value,
    limits: Limits
) -> Value:
    _reject_sets("arithmetic", lhs, rhs)
    if symbol in ('/', '%') and isinstance(rhs, Rational) and rhs.is_zero():
        raise DivisionByZero(
            "Division by zero." if symbol == '/' else "Modulo by zero."
        )
    if isinstance(lhs, Rational) and isinstance(rhs, Rational):
        if symbol != '^':
            return BINARY_OPERATOR_FUNCTIONS[symbol](lhs, rhs)
        result = _power(lhs, rhs, limits)
        if result is not None:
            return result
    return BinaryOperationNode(symbol, to_expression(lhs), to_expression(rhs))


def execute_tree(
    node: ExpressionNode,
    scope: Environment,
    limits: Limits,
    arguments: Mapping[str, Value] | None = None,
    expanding: frozenset[str] = frozenset(),
    depth: int = 0
) -> Value:
    """
    Reduce ``node`` as far as it goes.

    ``arguments`` holds the already reduced arguments while a user
    function body is evaluated, ``expanding`` the names whose bound
    expressions are being substituted on the way down to this node.
    """
    if depth > limits.max_depth:
        raise DepthExceeded(
            f"Evaluation went deeper than {limits.max_depth} levels."
        )
    if arguments is None:
        arguments = {}

    def recurse(child: ExpressionNode) -> Value:
        return execute_tree(
            child, scope, limits, arguments, expanding, depth+1
        )

    match node:
        case ConstantNode(value):
            return value
        case IdentifierNode(name):
            if name in arguments:
                return arguments[name]
            if name in expanding:
                logger.debug("%s refers to itself, left symbolic", name)
                return node
            bound = scope.get(name)
            if bound is None or isinstance(bound, LambdaFunctionNode):
                return node if bound is None else bound
            # globals never see the caller's arguments
            value = execute_tree(
                bound, scope, limits, None, expanding | {name}, depth+1
            )
            if arguments and not arguments.keys().isdisjoint(_names(value)):
                # a parameter of the same name would capture it
                return node
            return value
        case SetNode(exprs):
            return FiniteSet(recurse(expr) for expr in exprs)
        case PrefixUnaryOperationNode(op, expr):
            operand = recurse(expr)
            _reject_sets("arithmetic", operand)
            if isinstance(operand, Rational):
                return PREFIX_UNARY_OPERATOR_FUNCTIONS[op](operand)
            return PrefixUnaryOperationNode(op, to_expression(operand))
        case BinaryOperationNode():
            # the left spine of 1 + 2 + ... + n is walked in a loop,
            # only right operands go one level deeper
            spine = [node]
            while isinstance(spine[-1].left_expr, BinaryOperationNode):
                spine.append(spine[-1].left_expr)
            result = recurse(spine[-1].left_expr)
            for link in reversed(spine):
                result = _apply_binary(
                    link.operator, result, recurse(link.right_expr), limits
                )
            return result
        case FunctionApplicationNode(name, args):
            reduced = tuple(recurse(arg) for arg in args)
            _reject_sets(f"being passed to {name}", *reduced)
            function = scope.get(name)
            if isinstance(function, LambdaFunctionNode):
                return _call_function(
                    name, function, reduced, scope, limits, expanding, depth
                )
            if name in defaults:
                check_arity(name, reduced)
                if all(isinstance(arg, Rational) for arg in reduced):
                    if name == 'round' and len(reduced) == 2:
                        _check_round_digits(reduced[1], limits)
                    return defaults[name](*reduced)
            return FunctionApplicationNode(
                name, tuple(to_expression(arg) for arg in reduced)
            )
        case AssignmentNode(target, LambdaFunctionNode(parameters, expr)):
            # parameters stay symbolic while the body is simplified
            shielded = {
                parameter: IdentifierNode(parameter)
                for parameter in parameters
            }
            body = execute_tree(
                expr, scope, limits, shielded, expanding, depth+1
            )
            function = LambdaFunctionNode(parameters, to_expression(body))
            scope[target] = function
            logger.debug("defined %s%s", target, parameters)
            return function
        case AssignmentNode(target, value):
            result = recurse(value)
            scope[target] = to_expression(result)
            logger.debug("bound %s", target)
            return result
        case LambdaFunctionNode():
            return node
    raise UnsupportedOperation(f"Cannot evaluate {type(node).__name__}.")

def _call_function(
    name: str,
    function: LambdaFunctionNode,
    args: tuple[Value, ...],
    scope: Environment,
    limits: Limits,
    expanding: frozenset[str],
    depth: int
) -> Value:
    if len(args) != len(function.parameters):
        raise ArityError(
            f"{name} takes {len(function.parameters)} "
            f"argument{'s' * (len(function.parameters) != 1)}, "
            f"got {len(args)}."
        )
    if name in expanding:
        logger.debug("%s calls itself, left symbolic", name)
        return FunctionApplicationNode(
            name, tuple(to_expression(arg) for arg in args)
        )
    return execute_tree(
        function.expr, scope, limits,
        dict(zip(function.parameters, args)),
        expanding | {name}, depth+1
    )


def evaluate(
    expr: ExpressionNode,
    env: Environment,
    limits: Optional[Limits] = None
) -> Any:
    """
    Evaluate one parsed line against the session environment.

    Returns a Rational, a FiniteSet or the residual expression. Any
    assignment is only stored in ``env`` if the whole evaluation
    succeeds.
    """
    if limits is None:
        limits = Limits.from_settings()
    with env.transaction() as scope:
        result = execute_tree(expr, scope, limits)
    logger.debug("%r evaluated to %r", expr, result)
    return result
