"""
Tests for the Sequence Aligner
"""

import pytest

from glyphweave.analyzers.alignment import (
    SequenceAligner,
    align,
    align_anchored,
    conflict_count,
    substitution_mapping,
)
from glyphweave.core.errors import AnalysisPreconditionError, AnchorBoundsError


def _pairs(result):
    return [(s.index_a, s.index_b) for s in result.steps]


class TestGlobalAlignment:
    def test_identical_sequences(self):
        result = align([1, 2, 3], [1, 2, 3])
        assert result.score == 6
        assert result.match_count == 3
        assert result.gap_count == 0
        assert _pairs(result) == [(0, 0), (1, 1), (2, 2)]

    @pytest.mark.parametrize("seq", [[4], [7, 7, 7, 7], [0, 82, 5, 66, 5]])
    def test_self_alignment_score(self, seq):
        assert align(seq, seq).score == 2 * len(seq)

    def test_empty_inputs(self):
        assert align([], []).score == 0
        assert align([], []).steps == ()
        result = align([1, 2], [])
        assert result.score == -2
        assert _pairs(result) == [(0, None), (1, None)]
        assert align([], [5]).score == -1

    def test_diagonal_preferred_on_tie(self):
        result = align([1, 2], [3])
        assert result.score == -2
        assert _pairs(result) == [(0, None), (1, 0)]

    def test_up_preferred_over_left(self):
        result = align([1, 2], [2, 1])
        assert result.score == 0
        assert _pairs(result) == [(None, 0), (0, 1), (1, None)]
        assert result.match_count == 1
        assert result.gap_count == 2

    def test_single_mismatch(self):
        result = align([1], [2])
        assert result.score == -1
        assert result.mismatch_count == 1

    def test_custom_scores(self):
        aligner = SequenceAligner(match_score=5, mismatch_score=-3, gap_score=-2)
        assert aligner.align([1, 2], [1, 2]).score == 10
        assert aligner.align([1], []).score == -2

    def test_steps_are_forward_ordered(self):
        result = align([1, 2, 3, 4], [2, 3])
        indices = [s.index_a for s in result.steps if s.index_a is not None]
        assert indices == [0, 1, 2, 3]


class TestAnchoredAlignment:
    def test_anchor_split(self):
        result = align_anchored([7, 66, 5, 8], [66, 5, 9], 1, 0, 2)
        assert result.score == 2
        assert _pairs(result) == [(0, None), (1, 0), (2, 1), (3, 2)]
        assert result.match_count == 2
        assert result.mismatch_count == 1
        assert result.gap_count == 1

    def test_score_is_sum_of_independent_parts(self):
        a = [3, 66, 5, 49, 75, 54, 20]
        b = [8, 3, 66, 5, 49, 54, 75]
        result = align_anchored(a, b, 1, 2, 2)

        prefix = align(a[:1], b[:2])
        suffix = align(a[3:], b[4:])
        anchor_score = 2 + 2
        assert result.score == prefix.score + anchor_score + suffix.score

    def test_anchor_window_reproduces_anchor(self):
        a = [3, 66, 5, 49, 75, 54, 20]
        b = [8, 3, 66, 5, 49, 54, 75]
        result = align_anchored(a, b, 1, 2, 2)

        window = [s for s in result.steps if s.index_a in (1, 2)]
        assert [(s.index_a, s.index_b) for s in window] == [(1, 2), (2, 3)]
        assert [s.value_a for s in window] == [66, 5]
        assert [s.value_b for s in window] == [66, 5]

    def test_anchor_forced_even_if_unequal(self):
        result = align_anchored([1], [2], 0, 0, 1)
        assert result.score == -1
        assert _pairs(result) == [(0, 0)]

    def test_anchor_length_must_be_positive(self):
        with pytest.raises(AnchorBoundsError) as exc_info:
            align_anchored([1], [1], 0, 0, 0)
        assert exc_info.value.bound == "length"
        assert exc_info.value.sequence is None

    def test_anchor_start_out_of_bounds(self):
        with pytest.raises(AnchorBoundsError) as exc_info:
            align_anchored([1, 2], [1, 2], -1, 0, 1)
        assert exc_info.value.sequence == "A"
        assert exc_info.value.bound == "start"

    def test_anchor_end_out_of_bounds_in_b(self):
        with pytest.raises(AnchorBoundsError) as exc_info:
            align_anchored([1, 2, 3], [1, 2], 0, 1, 2)
        err = exc_info.value
        assert (err.sequence, err.bound, err.value, err.length) == ("B", "end", 3, 2)

    def test_sequence_a_checked_first(self):
        with pytest.raises(AnchorBoundsError) as exc_info:
            align_anchored([1], [1], 5, 5, 1)
        assert exc_info.value.sequence == "A"

    def test_bounds_error_is_precondition_error(self):
        with pytest.raises(AnalysisPreconditionError):
            align_anchored([1], [1], 0, 0, -2)


class TestSubstitutionMapping:
    def test_mapping_ignores_gaps(self):
        result = align_anchored([7, 66, 5, 8], [66, 5, 9], 1, 0, 2)
        mapping = substitution_mapping(result)
        assert mapping == {5: {5}, 8: {9}, 66: {66}}
        assert conflict_count(mapping) == 0

    def test_conflicts(self):
        result = align_anchored([1, 1, 4], [2, 3, 4], 0, 0, 3)
        mapping = substitution_mapping(result)
        assert mapping == {1: {2, 3}, 4: {4}}
        assert conflict_count(mapping) == 1

    def test_accepts_steps(self):
        steps = align([1, 2], [1, 2]).steps
        assert substitution_mapping(steps) == {1: {1}, 2: {2}}
