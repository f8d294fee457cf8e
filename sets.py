from __future__ import annotations
from collections.abc import Iterable, Iterator, Sequence
from typing import Any
from custom_types import Rational
from errors import DomainError, UnsupportedOperation

class FiniteSet(Sequence):
    """
    The evaluated elements of a set literal, kept in the order they were
    written. Duplicates are not removed and nothing is flattened.
    """

    elements: tuple[Any, ...]

    def __init__(self, elements: Iterable[Any] = ()):
        self.elements = tuple(elements)

    def __getitem__(self, index: int) -> Any:
        return self.elements[index]

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.elements)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FiniteSet):
            return NotImplemented
        return self.elements == other.elements

    def __hash__(self) -> int:
        return hash(self.elements)

    def __repr__(self):
        return f"FiniteSet({list(self.elements)!r})"


# sets used as membership tests for function arguments,
# calling one returns the argument or raises
class Rationals:
    def __contains__(self, elem):
        return isinstance(elem, Rational)
    def __repr__(self):
        return 'ℚ'
    def __call__(self, item: Any) -> Rational:
        if isinstance(item, FiniteSet):
            raise UnsupportedOperation("Sets do not support arithmetic.")
        if item not in self:
            raise DomainError(f"{item} ∉ {self}")
        return item

class Integers:
    def __contains__(self, elem):
        return isinstance(elem, Rational) and elem.is_integer()
    def __repr__(self):
        return 'ℤ'
    def __call__(self, item: Any) -> int:
        if item not in self:
            raise DomainError(f"{RATIONALS(item)} ∉ {self}")
        return item.numerator

RATIONALS = Rationals()
INTEGERS = Integers()
