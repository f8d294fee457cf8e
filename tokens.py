from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Self
from constants import Operator
from custom_types import Rational

@dataclass(frozen=True, eq=True)
class Token:
    value: str
    position: int = field(default=-1, compare=False, kw_only=True)

@dataclass
class TokenGroup:
    bracket: Optional[str] = None
    values: list[Token | Self] = field(default_factory=list)
    position: int = field(default=-1, compare=False, kw_only=True)

class IdentifierToken(Token): pass
class UnknownOperatorToken(Token): pass
class OpenBracketToken(Token): pass
class ClosedBracketToken(Token): pass
class SeparatorToken(Token): pass
class EndToken(Token): pass
@dataclass(frozen=True, eq=True)
class NumberToken(Token):
    number: Rational
@dataclass(frozen=True, eq=True)
class OperatorToken(Token):
    operator: Operator
