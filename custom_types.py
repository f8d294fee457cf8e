from __future__ import annotations
from functools import total_ordering
from typing import Optional, Self, Any, overload
import math
import re
from errors import DivisionByZero, UnsupportedOperation, InvalidNumberLiteral

_DECIMAL_LITERAL = re.compile(
    r'(?P<sign>[-+]?)'
    r'(?P<integer>[0-9]*)'
    r'(?:\.(?P<prefix>[0-9]*)(?:\((?P<cycle>[0-9]+)\))?)?'
    r'(?:[eE](?P<exponent>[-+]?[0-9]+))?'
)
_FRACTION_LITERAL = re.compile(r'(?P<numerator>[-+]?[0-9]+)/(?P<denominator>[0-9]+)')


def _integer_root(value: int, degree: int) -> Optional[int]:
    """Exact non-negative integer root of a non-negative int, or None."""
    if value < 2:
        return value
    # 2 ** degree > value, so the root lies strictly between 1 and 2
    if degree >= value.bit_length():
        return None
    # newton's method from above converges to the floor of the root
    guess = 1 << -(-value.bit_length() // degree)
    while True:
        better = (
            (degree - 1) * guess + value // guess ** (degree - 1)
        ) // degree
        if better >= guess:
            break
        guess = better
    return guess if guess ** degree == value else None

def decimal_bits(digits: int) -> int:
    """Upper bound on the bit length of 10 ** digits."""
    return digits * 10 // 3 + 1

def _to_int(digits: str, text: str) -> int:
    try:
        return int(digits)
    except ValueError:
        # longer than the interpreter converts from a string
        raise InvalidNumberLiteral(
            f"Number literal '{text}' has too many digits."
        ) from None


@total_ordering
class Rational:
    """
    An exact signed fraction, always kept in lowest terms.

    The sign lives in the numerator, the denominator is always positive
    and zero is 0/1. Instances are immutable, every operation builds a
    new one.
    """

    __slots__ = ('_numerator', '_denominator')

    _numerator: int
    _denominator: int

    def __init__(self, numerator: int = 0, denominator: int = 1):
        if not isinstance(numerator, int) or not isinstance(denominator, int):
            raise TypeError("Rational takes an integer numerator and denominator.")
        if denominator == 0:
            raise DivisionByZero(f"{numerator}/0 has a zero denominator.")
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        divisor = math.gcd(numerator, denominator)
        object.__setattr__(self, '_numerator', numerator // divisor)
        object.__setattr__(self, '_denominator', denominator // divisor)

    def __setattr__(self, name: str, value: Any):
        raise AttributeError("Rational is immutable.")

    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @classmethod
    def from_decimal(cls, text: str, max_bits: Optional[int] = None) -> Self:
        """
        Parse a decimal literal: optional sign, integer part, optional
        fractional part whose repeating cycle may be given in parentheses,
        optional exponent. ``0.1(6)`` is 1/6, ``-2.5e-3`` is -1/400.
        A plain ``p/q`` fraction is accepted too.

        With ``max_bits`` set, a literal whose numerator or denominator
        may need more bits than that raises InvalidNumberLiteral.
        """
        text = text.strip()
        if (matched := _FRACTION_LITERAL.fullmatch(text)) is not None:
            if max_bits is not None and decimal_bits(len(text)) > max_bits:
                raise InvalidNumberLiteral(
                    f"Number literal '{text}' needs more than {max_bits} bits."
                )
            return cls(
                _to_int(matched['numerator'], text),
                _to_int(matched['denominator'], text)
            )
        matched = _DECIMAL_LITERAL.fullmatch(text)
        if matched is None or not (
            matched['integer'] or matched['prefix'] or matched['cycle']
        ):
            raise InvalidNumberLiteral(f"Invalid decimal literal '{text}'.")
        integer = matched['integer'] or ''
        prefix = matched['prefix'] or ''
        cycle = matched['cycle'] or ''
        exponent = _to_int(matched['exponent'] or '0', text)
        if max_bits is not None and decimal_bits(
            len(integer) + len(prefix) + len(cycle) + abs(exponent)
        ) > max_bits:
            raise InvalidNumberLiteral(
                f"Number literal '{text}' needs more than {max_bits} bits."
            )
        numerator = _to_int((integer or '0') + prefix, text)
        denominator = 10 ** len(prefix)
        if cycle:
            period = 10 ** len(cycle) - 1
            numerator = numerator * period + _to_int(cycle, text)
            denominator *= period
        if exponent >= 0:
            numerator *= 10 ** exponent
        else:
            denominator *= 10 ** -exponent
        if matched['sign'] == '-':
            numerator = -numerator
        return cls(numerator, denominator)

    # predicates
    def is_integer(self) -> bool:
        return self._denominator == 1

    def is_zero(self) -> bool:
        return self._numerator == 0

    def bit_length(self) -> int:
        return max(self._numerator.bit_length(), self._denominator.bit_length())

    # arithmetic
    def __add__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return Rational(
            self._numerator * other._denominator +
            other._numerator * self._denominator,
            self._denominator * other._denominator
        )

    def __radd__(self, other: Any) -> Rational:
        return self.__add__(other)

    def __sub__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return self + -other

    def __rsub__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return other - self

    def __mul__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return Rational(
            self._numerator * other._numerator,
            self._denominator * other._denominator
        )

    def __rmul__(self, other: Any) -> Rational:
        return self.__mul__(other)

    def __truediv__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        if other.is_zero():
            raise DivisionByZero("Division by zero.")
        return Rational(
            self._numerator * other._denominator,
            self._denominator * other._numerator
        )

    def __rtruediv__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return other / self

    def __mod__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        if other.is_zero():
            raise DivisionByZero("Modulo by zero.")
        # floored, the result takes the sign of the divisor
        return self - other * math.floor(self / other)

    def __rmod__(self, other: Any) -> Rational:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return other % self

    def __neg__(self) -> Rational:
        return Rational(-self._numerator, self._denominator)

    def __pos__(self) -> Rational:
        return self

    def __abs__(self) -> Rational:
        return Rational(abs(self._numerator), self._denominator)

    def __pow__(self, exponent: Any) -> Rational:
        exponent = coerce(exponent)
        if not isinstance(exponent, Rational):
            return NotImplemented
        if not exponent.is_integer():
            raise UnsupportedOperation(
                f"Exponent {exponent} is not an integer."
            )
        power = exponent._numerator
        if power >= 0:
            return Rational(self._numerator ** power, self._denominator ** power)
        if self.is_zero():
            raise DivisionByZero("Zero raised to a negative power.")
        return Rational(self._denominator ** -power, self._numerator ** -power)

    def root(self, degree: int) -> Optional[Rational]:
        """The exact real ``degree``-th root, or None if it is irrational."""
        if degree < 1:
            raise UnsupportedOperation("Root degree has to be positive.")
        if self._numerator < 0 and degree % 2 == 0:
            return None
        numerator = _integer_root(abs(self._numerator), degree)
        denominator = _integer_root(self._denominator, degree)
        if numerator is None or denominator is None:
            return None
        return Rational(
            -numerator if self._numerator < 0 else numerator, denominator
        )

    # rounding, all of these stay Rational
    def __floor__(self) -> Rational:
        return Rational(self._numerator // self._denominator)

    def __ceil__(self) -> Rational:
        return Rational(-(-self._numerator // self._denominator))

    def __trunc__(self) -> Rational:
        if self._numerator < 0:
            return self.__ceil__()
        return self.__floor__()

    @overload
    def __round__(self) -> Rational: ...
    @overload
    def __round__(self, ndigits: int) -> Rational: ...

    def __round__(self, ndigits=None):
        # ties go to the even neighbour
        if ndigits is not None:
            shift = Rational(10) ** abs(ndigits)
            if ndigits >= 0:
                return round(self * shift) / shift
            return round(self / shift) * shift
        floor, remainder = divmod(self._numerator, self._denominator)
        twice = 2 * remainder
        if twice < self._denominator or (
            twice == self._denominator and floor % 2 == 0
        ):
            return Rational(floor)
        return Rational(floor + 1)

    def fract(self) -> Rational:
        return self - self.__trunc__()

    def sign(self) -> Rational:
        return Rational((self._numerator > 0) - (self._numerator < 0))

    # comparison
    def __eq__(self, other: object) -> bool:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return (
            self._numerator == other._numerator and
            self._denominator == other._denominator
        )

    def __lt__(self, other: Any) -> bool:
        other = coerce(other)
        if not isinstance(other, Rational):
            return NotImplemented
        return (
            self._numerator * other._denominator <
            other._numerator * self._denominator
        )

    def __hash__(self) -> int:
        if self._denominator == 1:
            return hash(self._numerator)
        return hash((self._numerator, self._denominator))

    def __bool__(self) -> bool:
        return self._numerator != 0

    def __repr__(self) -> str:
        return f"Rational({self._numerator}, {self._denominator})"

    def __str__(self) -> str:
        if self._denominator == 1:
            return str(self._numerator)
        return f"{self._numerator}/{self._denominator}"


@overload
def coerce(object: int) -> Rational: ...
@overload
def coerce[T](object: T) -> T: ...

def coerce(object):
    # bool is an int, but it is never a number here
    if isinstance(object, int) and not isinstance(object, bool):
        return Rational(object)
    return object
