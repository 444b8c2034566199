"""
GlyphWeave Sequence Statistics
===============================

Small pure helpers over token streams: distinct values, adjacent-repeat
detection, repeat-gap histograms and subsequence search. Every function
accepts either trigram tokens or plain integer values.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from typing import Optional, Union

from glyphweave.core.models import TrigramToken

TokenLike = Union[TrigramToken, int]


def as_values(stream: Iterable[TokenLike]) -> list[int]:
    """Project a token stream onto its numeric values."""
    return [t.value if isinstance(t, TrigramToken) else int(t) for t in stream]


def unique_values(stream: Iterable[TokenLike]) -> set[int]:
    return set(as_values(stream))


def value_range(stream: Iterable[TokenLike]) -> Optional[tuple[int, int]]:
    """``(min, max)`` of the stream values, or ``None`` when empty."""
    values = as_values(stream)
    if not values:
        return None
    return (min(values), max(values))


def is_contiguous(values: Iterable[int]) -> bool:
    """True when the distinct values form an unbroken integer range."""
    distinct = set(values)
    if not distinct:
        return False
    return len(distinct) == max(distinct) - min(distinct) + 1


def has_adjacent_repeats(stream: Iterable[TokenLike]) -> bool:
    """True if any token has the same value as its predecessor."""
    values = as_values(stream)
    return any(values[i] == values[i - 1] for i in range(1, len(values)))


def repeat_gap_counts(
    stream: Iterable[TokenLike],
    gap_is_between_count: bool = True,
) -> dict[int, int]:
    """Histogram of distances between consecutive repeats of each value.

    With ``gap_is_between_count`` the gap is the number of tokens lying
    strictly between the two occurrences (adjacent repeats have gap 0);
    otherwise it is the raw index distance.

    Returns:
        Gap -> number of consecutive-occurrence pairs, keys ascending.
    """
    positions: dict[int, list[int]] = defaultdict(list)
    for index, value in enumerate(as_values(stream)):
        positions[value].append(index)

    counts: Counter[int] = Counter()
    for occurrences in positions.values():
        for prev, cur in zip(occurrences, occurrences[1:]):
            distance = cur - prev
            counts[distance - 1 if gap_is_between_count else distance] += 1

    return dict(sorted(counts.items()))


def find_subsequence(sequence: Sequence[int], needle: Sequence[int]) -> int:
    """Index of the first occurrence of *needle* in *sequence*, or -1.

    An empty needle is found at index 0.
    """
    if not needle:
        return 0
    width = len(needle)
    target = list(needle)
    for i in range(len(sequence) - width + 1):
        if list(sequence[i:i + width]) == target:
            return i
    return -1
