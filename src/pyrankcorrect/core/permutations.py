"""Permutation space of full rankings and ranking encode/decode adapters.

A ranking of J items is stored as a tuple of 1-based positions in item
order: ``(2, 1, 3)`` means item 1 was ranked second, item 2 first and item 3
third. Survey data encodes the same ranking as the digit string ``"213"``;
the string form is only used at the boundary (keys, joins, dataframes).

Enumeration is exact and grows as J!, so J is bounded by
``config.MAX_EXACT_ITEMS``. This is a scaling limit of the problem, not of
the implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from itertools import permutations
from math import factorial
from typing import Iterator, Sequence

import numpy as np
from numpy.typing import NDArray

from pyrankcorrect import config
from pyrankcorrect.core.exceptions import (
    ComputationalLimitError,
    DimensionError,
    ValueRangeError,
)
from pyrankcorrect.core.types import Ranking


# =============================================================================
# ENCODE / DECODE ADAPTERS
# =============================================================================


def encode_ranking(positions: Sequence[int]) -> str:
    """
    Render a ranking as its canonical digit-string key.

    Args:
        positions: 1-based positions in item order

    Returns:
        Concatenated digits, e.g. ``(2, 1, 3) -> "213"``

    Raises:
        ValueRangeError: If the sequence is not a permutation of 1..J
    """
    ranking = tuple(int(p) for p in positions)
    _check_permutation(ranking, len(ranking))
    return "".join(str(p) for p in ranking)


def decode_ranking(key: str | Sequence[int], num_items: int | None = None) -> Ranking:
    """
    Parse a ranking key (or position sequence) into a position tuple.

    Args:
        key: Digit string such as ``"213"``, or a sequence of positions
        num_items: Expected J. Defaults to the length of the key.

    Returns:
        Tuple of 1-based positions in item order

    Raises:
        ValueRangeError: If the key contains non-digits or is not a
            permutation of 1..J
        DimensionError: If the key length does not match num_items
    """
    if isinstance(key, str):
        text = key.strip()
        if not text.isdigit():
            raise ValueRangeError(
                f"Ranking '{key}' must be a string of single digits (one per item)."
            )
        ranking = tuple(int(ch) for ch in text)
    else:
        ranking = tuple(int(p) for p in key)

    J = len(ranking) if num_items is None else num_items
    if len(ranking) != J:
        raise DimensionError(
            f"Ranking '{key}' has {len(ranking)} positions but J={J} items are expected."
        )
    _check_permutation(ranking, J)
    return ranking


def is_valid_ranking(key: str | Sequence[int], num_items: int | None = None) -> bool:
    """Return True if ``key`` decodes to a permutation of 1..J."""
    try:
        decode_ranking(key, num_items)
    except (ValueRangeError, DimensionError, TypeError, ValueError):
        return False
    return True


def rankings_from_order(order: Sequence[int]) -> Ranking:
    """
    Convert an item order (best first, 1-based item indices) to positions.

    Example:
        >>> rankings_from_order([2, 3, 1])  # item 2 first, item 3 second
        (3, 1, 2)
    """
    J = len(order)
    positions = [0] * J
    for pos, item in enumerate(order, start=1):
        item = int(item)
        if not 1 <= item <= J:
            raise ValueRangeError(f"Item index {item} is outside 1..{J}.")
        positions[item - 1] = pos
    ranking = tuple(positions)
    _check_permutation(ranking, J)
    return ranking


def order_from_ranking(ranking: Sequence[int]) -> tuple[int, ...]:
    """Inverse of rankings_from_order: positions in item order -> item order."""
    J = len(ranking)
    order = [0] * J
    for item, pos in enumerate(ranking, start=1):
        order[int(pos) - 1] = item
    return tuple(order)


def _check_permutation(ranking: Ranking, num_items: int) -> None:
    if sorted(ranking) != list(range(1, num_items + 1)):
        raise ValueRangeError(
            f"Ranking {ranking} is not a permutation of 1..{num_items}: "
            "every position must appear exactly once."
        )


# =============================================================================
# PERMUTATION SPACE
# =============================================================================


@dataclass(frozen=True)
class PermutationSpace:
    """
    All J! rankings of J items, ordered lexicographically by key.

    Instances are immutable and cached per J; build them with
    ``get_permutation_space(J)``.

    Attributes:
        num_items: Number of ranked items J
        keys: Canonical digit-string keys, sorted lexicographically
        positions: J! x J int array, row r holds the positions of ``keys[r]``

    Example:
        >>> space = get_permutation_space(3)
        >>> space.keys
        ('123', '132', '213', '231', '312', '321')
        >>> space.index_of("213")
        2
    """

    num_items: int
    keys: tuple[str, ...]
    positions: NDArray[np.int64]
    _index: dict[str, int] = field(repr=False, compare=False)

    @property
    def size(self) -> int:
        """Number of rankings, J!."""
        return len(self.keys)

    @property
    def uniform_probability(self) -> float:
        """Probability of each ranking under uniformly random answering."""
        return 1.0 / self.size

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def index_of(self, key: str | Sequence[int]) -> int:
        """Row index of a ranking key (or position sequence) in the space."""
        if not isinstance(key, str):
            key = encode_ranking(key)
        try:
            return self._index[key]
        except KeyError:
            raise ValueRangeError(
                f"Ranking '{key}' is not a ranking of {self.num_items} items."
            ) from None

    def indices_of(self, keys: Sequence[str]) -> NDArray[np.int64]:
        """Vectorised index_of for a sequence of keys."""
        return np.fromiter(
            (self.index_of(k) for k in keys), dtype=np.int64, count=len(keys)
        )

    def ranking(self, index: int) -> Ranking:
        """Position tuple of the ranking at a row index."""
        return tuple(int(p) for p in self.positions[index])

    def __repr__(self) -> str:
        return f"PermutationSpace(J={self.num_items}, size={self.size})"


def get_permutation_space(num_items: int) -> PermutationSpace:
    """
    Enumerate all J! rankings of J items (cached per J).

    Args:
        num_items: Number of items J, 1 <= J <= config.MAX_EXACT_ITEMS

    Returns:
        PermutationSpace with keys sorted lexicographically

    Raises:
        ValueRangeError: If J < 1
        ComputationalLimitError: If J exceeds config.MAX_EXACT_ITEMS
    """
    J = int(num_items)
    if J < 1:
        raise ValueRangeError(f"Number of items must be at least 1, got {J}.")
    if J > config.MAX_EXACT_ITEMS:
        raise ComputationalLimitError(
            f"Exact enumeration of J! rankings is limited to J <= "
            f"{config.MAX_EXACT_ITEMS} (single-digit ranking encoding). "
            f"J={J} would require {factorial(J):,} rankings."
        )
    return _build_permutation_space(J)


@lru_cache(maxsize=None)
def _build_permutation_space(J: int) -> PermutationSpace:
    # keys sorted lexicographically; row r of positions decodes keys[r]
    keys = sorted("".join(str(p) for p in perm) for perm in permutations(range(1, J + 1)))
    positions = np.array([[int(ch) for ch in key] for key in keys], dtype=np.int64)
    positions.setflags(write=False)
    index = {key: i for i, key in enumerate(keys)}
    return PermutationSpace(
        num_items=J,
        keys=tuple(keys),
        positions=positions,
        _index=index,
    )


enumerate_permutations = get_permutation_space
"""Alias: the enumerate(J) operation of the permutation space."""
