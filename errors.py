from typing import Optional


class MathError(Exception):
    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self):
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


## lexical ##
class LexError(MathError): pass
class UnknownCharacterError(LexError): pass
class InvalidNumberLiteral(LexError): pass

## syntactic ##
class ParseError(MathError): pass
class UnbalancedBracketsError(ParseError): pass
class UnclosedBracketsError(ParseError): pass
class InvalidExpressionList(ParseError): pass
class InvalidAssignmentTarget(ParseError): pass

## evaluation ##
class EvalError(MathError): pass
class DivisionByZero(EvalError, ZeroDivisionError): pass
class DomainError(EvalError, ValueError): pass
class ArityError(DomainError): pass
class UnsupportedOperation(EvalError): pass
class DepthExceeded(EvalError): pass

# too many nested brackets is caught while parsing,
# but is the same guard as the evaluation depth
class NestingTooDeep(DepthExceeded, ParseError): pass
