import math
import inspect
from collections.abc import Callable
from custom_types import Rational
from errors import ArityError
from sets import RATIONALS, INTEGERS

def _round(x, ndigits=None, /):
    if ndigits is None:
        return round(RATIONALS(x))
    return round(RATIONALS(x), INTEGERS(ndigits))

defaults: dict[str, Callable[..., Rational]] = {
    'floor': lambda x, /: math.floor(RATIONALS(x)),
    'ceil': lambda x, /: math.ceil(RATIONALS(x)),
    'round': _round,
    'trunc': lambda x, /: math.trunc(RATIONALS(x)),
    'fract': lambda x, /: RATIONALS(x).fract(),
    'abs': lambda x, /: abs(RATIONALS(x)),
    'sgn': lambda x, /: RATIONALS(x).sign(),
    'gcd': lambda x, /, *args: Rational(
        math.gcd(*(INTEGERS(arg) for arg in (x, *args)))
    ),
    'lcm': lambda x, /, *args: Rational(
        math.lcm(*(INTEGERS(arg) for arg in (x, *args)))
    ),
    'min': lambda x, /, *args: min(RATIONALS(arg) for arg in (x, *args)),
    'max': lambda x, /, *args: max(RATIONALS(arg) for arg in (x, *args)),
}

function_signatures = {
    'floor': "ℚ -> ℤ",
    'ceil': "ℚ -> ℤ",
    'round': "ℚ×{null}? -> ℤ or ℚ×ℤ -> ℚ",
    'trunc': "ℚ -> ℤ",
    'fract': "ℚ -> ℚ",
    'abs': "ℚ -> ℚ",
    'sgn': "ℚ -> {-1, 0, 1}",
    'gcd': "ℤ+ -> ℤ",
    'lcm': "ℤ+ -> ℤ",
    'min': "ℚ+ -> ℚ",
    'max': "ℚ+ -> ℚ",
}


def check_arity(name: str, args: tuple) -> None:
    try:
        inspect.signature(defaults[name]).bind(*args)
    except TypeError:
        raise ArityError(
            f"{name} got {len(args)} argument{'s' * (len(args) != 1)}, "
            f"expected {function_signatures[name]}."
        ) from None
