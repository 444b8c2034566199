"""
Tests for GlyphWeave data models
"""

import pytest
from pydantic import ValidationError

from glyphweave.core.errors import GridValidationError
from glyphweave.core.models import (
    AlignmentResult,
    AlignmentStep,
    GlyphGrid,
    Orientation,
    Permutation,
    TrigramToken,
    WeaveScheme,
    trigram_base5,
    trigram_value,
)


class TestTrigramEncoding:
    def test_value_is_base5(self):
        assert trigram_value(0, 0, 0) == 0
        assert trigram_value(4, 4, 4) == 124
        assert trigram_value(2, 3, 3) == 68

    def test_base5_string(self):
        assert trigram_base5(0, 4, 1) == "041"

    def test_token_properties(self):
        token = TrigramToken(index=0, orientation=Orientation.UP, first=2, second=3, third=3)
        assert token.value == 68
        assert token.base5 == "233"
        assert token.glyphs == (2, 3, 3)
        assert token.placement is None

    def test_token_dump_includes_value_and_base5(self):
        token = TrigramToken(index=0, orientation=Orientation.DOWN, first=0, second=4, third=1)
        data = token.model_dump(mode="json")
        assert data["value"] == 21
        assert data["base5"] == "041"

    def test_token_rejects_out_of_range_glyph(self):
        with pytest.raises(ValidationError):
            TrigramToken(index=0, orientation=Orientation.DOWN, first=5, second=0, third=0)


class TestGlyphGrid:
    def test_from_lines_strips_breaks_and_blanks(self):
        grid = GlyphGrid.from_lines(["  1230 ", "", "555", "4521"], message_id=3)
        assert grid.rows == ((1, 2, 3, 0), (4, 2, 1))
        assert grid.message_id == 3

    def test_dimensions(self, two_pair_grid):
        assert two_pair_grid.height == 4
        assert two_pair_grid.width == 5
        assert two_pair_grid.glyph_count == 18
        assert two_pair_grid.lines[1] == "4321"
        assert two_pair_grid.glyph(2, 4) == 4

    def test_from_digit_string_splits_on_five(self):
        grid = GlyphGrid.from_digit_string("12304554321")
        assert grid.lines == ("12304", "4321")

    def test_invalid_character_reports_position(self):
        with pytest.raises(GridValidationError) as exc_info:
            GlyphGrid.from_lines(["12", "307"], message_id=9)
        err = exc_info.value
        assert (err.message_id, err.row, err.column) == (9, 1, 2)
        assert "row 1, col 2" in str(err)

    def test_invalid_glyph_value(self):
        with pytest.raises(GridValidationError) as exc_info:
            GlyphGrid(rows=((1, 9),))
        assert exc_info.value.column == 1

    def test_empty_row_rejected(self):
        with pytest.raises(GridValidationError) as exc_info:
            GlyphGrid(rows=((1, 2), ()))
        assert exc_info.value.row == 1
        assert exc_info.value.column is None

    def test_grid_is_frozen(self, pair_grid):
        with pytest.raises(ValidationError):
            pair_grid.message_id = 4


class TestWeaveScheme:
    def test_permutation_apply(self):
        assert Permutation.from_label("102").apply(7, 8, 9) == (8, 7, 9)
        assert Permutation.from_label("201").apply(7, 8, 9) == (9, 7, 8)

    def test_permutation_must_be_bijective(self):
        with pytest.raises(ValidationError):
            Permutation(first=0, second=0, third=1)

    def test_six_permutations(self):
        labels = [p.label for p in Permutation.all()]
        assert labels == ["012", "021", "102", "120", "201", "210"]

    def test_canonical(self):
        scheme = WeaveScheme.canonical()
        assert scheme.down.label == "012"
        assert scheme.up.label == "102"
        assert scheme.start is Orientation.DOWN
        assert scheme.label == "012/102"

    def test_from_label(self):
        assert WeaveScheme.from_label("012/102") == WeaveScheme.canonical()
        scheme = WeaveScheme.from_label("210/021/up")
        assert scheme.start is Orientation.UP
        assert scheme.label == "210/021/up"
        assert scheme.permutation_for(Orientation.UP).label == "021"

    def test_bad_label(self):
        with pytest.raises(ValueError):
            WeaveScheme.from_label("012")

    def test_all_schemes_down_major(self):
        schemes = WeaveScheme.all_schemes()
        assert len(schemes) == 36
        assert len({s.label for s in schemes}) == 36
        assert schemes[0].label == "012/012"
        assert schemes[1].label == "012/021"
        assert schemes[6].label == "021/012"

    def test_orientation_flip(self):
        assert Orientation.DOWN.flipped is Orientation.UP
        assert Orientation.UP.flipped is Orientation.DOWN


class TestAlignmentModels:
    def test_step_kinds(self):
        assert AlignmentStep(index_a=0, value_a=1).is_gap
        assert AlignmentStep(index_a=0, index_b=0, value_a=1, value_b=1).is_match
        assert not AlignmentStep(index_a=0, index_b=0, value_a=1, value_b=2).is_match

    def test_shifted_keeps_gaps(self):
        step = AlignmentStep(index_b=2, value_b=7).shifted(10, 20)
        assert step.index_a is None
        assert step.index_b == 22

    def test_result_counts(self):
        result = AlignmentResult(
            score=0,
            steps=(
                AlignmentStep(index_a=0, index_b=0, value_a=1, value_b=1),
                AlignmentStep(index_a=1, index_b=1, value_a=1, value_b=2),
                AlignmentStep(index_b=2, value_b=3),
            ),
        )
        assert result.match_count == 1
        assert result.mismatch_count == 1
        assert result.gap_count == 1
        assert result.aligned_count == 2
