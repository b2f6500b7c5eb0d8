"""Cartesian products of indexed sequences."""

from itertools import product
from typing import Iterator, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")

IndexedPair = Tuple[Tuple[int, T], Tuple[int, U]]


def combine(
    first: Sequence[T],
    second: Optional[Sequence[U]] = None,
    symmetric: bool = False
) -> Iterator[IndexedPair]:
    """
    Lazy cartesian product of two indexed sequences.

    Yields ((i, a), (j, b)) for every a = first[i], b = second[j], with i
    as the outer loop. When `second` is None the product is taken of
    `first` with itself.

    With symmetric=True only pairs with i >= j are produced, which is all a
    symmetric evaluator needs: (j, i) is recovered by swapping.

    Parameters:
        first: Row sequence
        second: Column sequence (defaults to `first`)
        symmetric: Keep only the lower triangle i >= j

    Returns:
        Iterator of ((i, a), (j, b)) pairs
    """
    if second is None:
        second = first

    pairs = product(enumerate(first), enumerate(second))
    if symmetric:
        return ((a, b) for a, b in pairs if a[0] >= b[0])
    return pairs

