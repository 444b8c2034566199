"""
GlyphWeave Sequence Aligner
============================

Global pairwise alignment of token value sequences (Needleman-Wunsch)
and anchored alignment around a known-equal window.

Scoring:
    match    +2   (values equal)
    mismatch -1   (values differ)
    gap      -1   (one side skipped)

The first row and column of the score matrix hold cumulative gap
penalties. When candidate moves tie, the diagonal wins over a gap in B
(consume A, "up"), which wins over a gap in A (consume B, "left").

Anchored alignment splits both sequences around the anchor window,
aligns the prefixes and suffixes independently, and pins the anchor
position-for-position in between.

References:
    - Needleman, S. B. & Wunsch, C. D. (1970). A general method
      applicable to the search for similarities in the amino acid
      sequence of two proteins. J. Mol. Biol., 48(3), 443-453.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

import numpy as np

from shared.logger import GlyphLogger

from glyphweave.core.errors import AnchorBoundsError
from glyphweave.core.models import AlignmentResult, AlignmentStep

logger = GlyphLogger("glyphweave.alignment")

# Traceback directions
_DIAG = 0
_UP = 1
_LEFT = 2


class SequenceAligner:
    """Needleman-Wunsch aligner with fixed linear scores.

    Usage::

        aligner = SequenceAligner()
        result = aligner.align([1, 2, 3], [1, 3])
        result.score, result.match_count
    """

    def __init__(
        self,
        match_score: int = 2,
        mismatch_score: int = -1,
        gap_score: int = -1,
    ) -> None:
        self.match_score = match_score
        self.mismatch_score = mismatch_score
        self.gap_score = gap_score

    # ------------------------------------------------------------------ #
    #  Global alignment
    # ------------------------------------------------------------------ #

    def align(self, a: Sequence[int], b: Sequence[int]) -> AlignmentResult:
        """Globally align *a* against *b*.

        Returns:
            :class:`AlignmentResult` with the optimal score and steps in
            forward order. Index fields are positions in *a* and *b*.
        """
        rows = len(a) + 1
        cols = len(b) + 1
        score = np.zeros((rows, cols), dtype=np.int64)
        direction = np.full((rows, cols), _DIAG, dtype=np.int8)

        for i in range(1, rows):
            score[i, 0] = score[i - 1, 0] + self.gap_score
            direction[i, 0] = _UP
        for j in range(1, cols):
            score[0, j] = score[0, j - 1] + self.gap_score
            direction[0, j] = _LEFT

        for i in range(1, rows):
            ai = a[i - 1]
            for j in range(1, cols):
                pair = self.match_score if ai == b[j - 1] else self.mismatch_score
                best = score[i - 1, j - 1] + pair
                best_dir = _DIAG

                up = score[i - 1, j] + self.gap_score
                if up > best:
                    best, best_dir = up, _UP

                left = score[i, j - 1] + self.gap_score
                if left > best:
                    best, best_dir = left, _LEFT

                score[i, j] = best
                direction[i, j] = best_dir

        steps: list[AlignmentStep] = []
        row, col = len(a), len(b)
        while row > 0 or col > 0:
            if row > 0 and col > 0 and direction[row, col] == _DIAG:
                steps.append(
                    AlignmentStep(
                        index_a=row - 1, index_b=col - 1,
                        value_a=a[row - 1], value_b=b[col - 1],
                    )
                )
                row -= 1
                col -= 1
            elif row > 0 and (col == 0 or direction[row, col] == _UP):
                steps.append(AlignmentStep(index_a=row - 1, value_a=a[row - 1]))
                row -= 1
            else:
                steps.append(AlignmentStep(index_b=col - 1, value_b=b[col - 1]))
                col -= 1

        steps.reverse()
        return AlignmentResult(score=int(score[len(a), len(b)]), steps=tuple(steps))

    # ------------------------------------------------------------------ #
    #  Anchored alignment
    # ------------------------------------------------------------------ #

    def align_anchored(
        self,
        a: Sequence[int],
        b: Sequence[int],
        anchor_index_a: int,
        anchor_index_b: int,
        anchor_length: int,
    ) -> AlignmentResult:
        """Align *a* and *b* with a forced window pinned together.

        ``a[anchor_index_a + k]`` is paired with ``b[anchor_index_b + k]``
        for every ``k < anchor_length``, whether or not the values agree.
        The score is prefix score + anchor pair scores + suffix score.

        Raises:
            AnchorBoundsError: If ``anchor_length`` <= 0 or the window
                does not fit inside A or B. Checked before any work.
        """
        if anchor_length <= 0:
            raise AnchorBoundsError(
                f"Anchor length must be positive (got {anchor_length}).",
                sequence=None,
                bound="length",
                value=anchor_length,
            )
        _check_window("A", anchor_index_a, anchor_length, len(a))
        _check_window("B", anchor_index_b, anchor_length, len(b))

        end_a = anchor_index_a + anchor_length
        end_b = anchor_index_b + anchor_length

        prefix = self.align(a[:anchor_index_a], b[:anchor_index_b])
        suffix = self.align(a[end_a:], b[end_b:])

        anchor_score = 0
        anchor_steps: list[AlignmentStep] = []
        for k in range(anchor_length):
            value_a = a[anchor_index_a + k]
            value_b = b[anchor_index_b + k]
            anchor_score += (
                self.match_score if value_a == value_b else self.mismatch_score
            )
            anchor_steps.append(
                AlignmentStep(
                    index_a=anchor_index_a + k,
                    index_b=anchor_index_b + k,
                    value_a=value_a,
                    value_b=value_b,
                )
            )

        steps = (
            list(prefix.steps)
            + anchor_steps
            + [step.shifted(end_a, end_b) for step in suffix.steps]
        )
        total = prefix.score + anchor_score + suffix.score

        logger.debug(
            f"Anchored alignment |A|={len(a)} |B|={len(b)} "
            f"anchor A@{anchor_index_a} B@{anchor_index_b} x{anchor_length}: "
            f"score {total}"
        )
        return AlignmentResult(score=total, steps=tuple(steps))


def _check_window(name: str, start: int, length: int, seq_len: int) -> None:
    if start < 0:
        raise AnchorBoundsError(
            f"Anchor start {start} is out of bounds for sequence {name} "
            f"(length {seq_len}).",
            sequence=name,
            bound="start",
            value=start,
            length=seq_len,
        )
    if start + length > seq_len:
        raise AnchorBoundsError(
            f"Anchor end {start + length} is out of bounds for sequence {name} "
            f"(length {seq_len}).",
            sequence=name,
            bound="end",
            value=start + length,
            length=seq_len,
        )


# ---------------------------------------------------------------------- #
#  Substitution mapping
# ---------------------------------------------------------------------- #


def substitution_mapping(result: AlignmentResult | Iterable[AlignmentStep]) -> dict[int, set[int]]:
    """Map each aligned A value to the set of B values it was paired with.

    Gap steps are ignored. Keys are ascending.
    """
    steps = result.steps if isinstance(result, AlignmentResult) else result
    mapping: dict[int, set[int]] = {}
    for step in steps:
        if step.is_gap:
            continue
        mapping.setdefault(step.value_a, set()).add(step.value_b)  # type: ignore[arg-type]
    return dict(sorted(mapping.items()))


def conflict_count(mapping: dict[int, set[int]]) -> int:
    """Number of A values paired with more than one distinct B value."""
    return sum(1 for targets in mapping.values() if len(targets) > 1)


# ---------------------------------------------------------------------- #
#  Module-level query functions
# ---------------------------------------------------------------------- #


def align(
    a: Sequence[int],
    b: Sequence[int],
    match_score: int = 2,
    mismatch_score: int = -1,
    gap_score: int = -1,
) -> AlignmentResult:
    return SequenceAligner(match_score, mismatch_score, gap_score).align(a, b)


def align_anchored(
    a: Sequence[int],
    b: Sequence[int],
    anchor_index_a: int,
    anchor_index_b: int,
    anchor_length: int,
    match_score: int = 2,
    mismatch_score: int = -1,
    gap_score: int = -1,
) -> AlignmentResult:
    return SequenceAligner(match_score, mismatch_score, gap_score).align_anchored(
        a, b, anchor_index_a, anchor_index_b, anchor_length
    )
