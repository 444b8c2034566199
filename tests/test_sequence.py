"""
Tests for sequence statistics helpers
"""

from glyphweave.analyzers.sequence import (
    as_values,
    find_subsequence,
    has_adjacent_repeats,
    is_contiguous,
    repeat_gap_counts,
    unique_values,
    value_range,
)
from glyphweave.analyzers.weaver import weave


class TestSequenceStatistics:
    def test_tokens_and_ints_mix(self, pair_grid):
        tokens = weave(pair_grid)
        assert as_values(tokens) == [39, 68, 21]
        assert as_values([tokens[0], 5]) == [39, 5]
        assert unique_values(tokens + tokens) == {21, 39, 68}

    def test_value_range(self):
        assert value_range([5, 2, 9]) == (2, 9)
        assert value_range([]) is None

    def test_contiguous(self):
        assert is_contiguous([3, 1, 2, 2])
        assert not is_contiguous([1, 3])
        assert not is_contiguous([])

    def test_adjacent_repeats(self):
        assert has_adjacent_repeats([1, 2, 2])
        assert not has_adjacent_repeats([1, 2, 1])
        assert not has_adjacent_repeats([])

    def test_repeat_gaps_between(self):
        assert repeat_gap_counts([1, 2, 1, 1, 3, 2]) == {0: 1, 1: 1, 3: 1}

    def test_repeat_gaps_distance(self):
        assert repeat_gap_counts([1, 2, 1, 1, 3, 2], gap_is_between_count=False) == {
            1: 1,
            2: 1,
            4: 1,
        }

    def test_find_subsequence(self):
        assert find_subsequence([1, 66, 5, 2], [66, 5]) == 1
        assert find_subsequence([1, 66, 5, 66, 5], [66, 5]) == 1
        assert find_subsequence([1, 66, 5, 2], [5, 66]) == -1
        assert find_subsequence([1], [1, 2]) == -1
        assert find_subsequence([1, 2], []) == 0
