"""
GlyphWeave Token-Stream Predictor
==================================

Order-1 and order-2 Markov prediction over token value sequences, used
to measure how predictable the woven streams are.

Models:
    - Argmax:       the most frequent successor of a context
                    (ties -> smallest value), ``None`` if unseen.
    - Interpolated: add-k smoothed mixture over the vocabulary

        P_k(v | ctx) = (count(ctx, v) + k) / (total(ctx) + k * |V|)
        score(v)     = l2 * P_k(v | p2, p1) + l1 * P_k(v | p1) + l0 * P_k(v)

Counts never cross sequence boundaries.

Evaluations:
    - In-sample:      train and score on every sequence, against a
                      majority-class baseline.
    - Leave-one-out:  train on all other sequences, score the held-out
                      one; ``seen`` counts contexts present in training.
    - Smoothed LOO:   as above with the interpolated model, so every
                      position gets a prediction.

References:
    - Jelinek, F. & Mercer, R. L. (1980). Interpolated estimation of
      Markov source parameters from sparse data.
    - Chen, S. F. & Goodman, J. (1999). An empirical study of smoothing
      techniques for language modeling. Computer Speech & Language,
      13(4), 359-394.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Optional

from shared.logger import GlyphLogger

from glyphweave.core.errors import AnalysisPreconditionError
from glyphweave.core.models import LeaveOneOutStats, MarkovStats, SmoothedStats

logger = GlyphLogger("glyphweave.markov")

_TIE_EPSILON = 1e-12


def _check_smoothing(k: float) -> None:
    if not k > 0:
        raise AnalysisPreconditionError(
            f"Smoothing constant k must be positive (got {k})."
        )


def argmax_value(counts: Mapping[int, int]) -> Optional[int]:
    """Value with the highest count; ties go to the smallest value."""
    best: Optional[int] = None
    best_count = -1
    for value, count in counts.items():
        if count > best_count or (count == best_count and value < best):  # type: ignore[operator]
            best, best_count = value, count
    return best


class NGramPredictor:
    """Unigram/bigram/trigram-context counts with argmax and smoothed queries.

    Args:
        k: Add-k smoothing constant.
        lambda2: Weight of the order-2 (two-token context) probability.
        lambda1: Weight of the order-1 probability.
        lambda0: Weight of the unigram probability.

    Raises:
        AnalysisPreconditionError: If ``k`` is not positive.
    """

    def __init__(
        self,
        k: float = 0.5,
        lambda2: float = 0.6,
        lambda1: float = 0.3,
        lambda0: float = 0.1,
    ) -> None:
        _check_smoothing(k)
        self.k = k
        self.lambda2 = lambda2
        self.lambda1 = lambda1
        self.lambda0 = lambda0
        self._unigram: Counter[int] = Counter()
        self._bigram: dict[int, Counter[int]] = {}
        self._trigram: dict[tuple[int, int], Counter[int]] = {}

    def fit(self, sequences: Iterable[Sequence[int]]) -> NGramPredictor:
        """Count n-grams of every sequence, replacing any previous counts."""
        self._unigram = Counter()
        self._bigram = {}
        self._trigram = {}

        for sequence in sequences:
            self._unigram.update(sequence)
            for i in range(1, len(sequence)):
                self._bigram.setdefault(sequence[i - 1], Counter())[sequence[i]] += 1
            for i in range(2, len(sequence)):
                key = (sequence[i - 2], sequence[i - 1])
                self._trigram.setdefault(key, Counter())[sequence[i]] += 1
        return self

    # -- Introspection --

    @property
    def vocabulary(self) -> list[int]:
        return sorted(self._unigram)

    @property
    def order1_contexts(self) -> int:
        return len(self._bigram)

    @property
    def order2_contexts(self) -> int:
        return len(self._trigram)

    @property
    def order2_deterministic(self) -> int:
        """Order-2 contexts that were only ever followed by one value."""
        return sum(1 for successors in self._trigram.values() if len(successors) == 1)

    def has_order1(self, prev: int) -> bool:
        return prev in self._bigram

    def has_order2(self, prev2: int, prev1: int) -> bool:
        return (prev2, prev1) in self._trigram

    # -- Argmax prediction --

    def most_common(self) -> Optional[int]:
        """Globally most frequent value (the majority-class baseline)."""
        return argmax_value(self._unigram)

    def predict_order1(self, prev: int) -> Optional[int]:
        successors = self._bigram.get(prev)
        return argmax_value(successors) if successors else None

    def predict_order2(self, prev2: int, prev1: int) -> Optional[int]:
        successors = self._trigram.get((prev2, prev1))
        return argmax_value(successors) if successors else None

    # -- Smoothed prediction --

    def predict_interpolated(
        self,
        prev1: int,
        prev2: Optional[int] = None,
        vocabulary: Optional[Sequence[int]] = None,
    ) -> Optional[int]:
        """Highest-scoring value under the interpolated add-k model.

        Without ``prev2`` the order-2 term is dropped (lambda2 = 0).
        ``vocabulary`` defaults to the values seen in training; pass a
        wider one to score values the training data never produced.
        Scores within 1e-12 of each other tie, and ties go to the
        smallest value.
        """
        vocab = sorted(vocabulary) if vocabulary is not None else self.vocabulary
        if not vocab:
            return None
        size = len(vocab)
        lambda2 = self.lambda2 if prev2 is not None else 0.0

        total0 = sum(self._unigram.values())
        successors1 = self._bigram.get(prev1)
        total1 = sum(successors1.values()) if successors1 else 0
        successors2 = self._trigram.get((prev2, prev1)) if prev2 is not None else None
        total2 = sum(successors2.values()) if successors2 else 0

        best_value: Optional[int] = None
        best_score = float("-inf")
        for value in vocab:
            p0 = self._smoothed(self._unigram, total0, value, size)
            p1 = self._smoothed(successors1, total1, value, size)
            p2 = self._smoothed(successors2, total2, value, size)
            score = lambda2 * p2 + self.lambda1 * p1 + self.lambda0 * p0
            if score > best_score or (
                abs(score - best_score) < _TIE_EPSILON and value < best_value  # type: ignore[operator]
            ):
                best_score, best_value = score, value
        return best_value

    def _smoothed(
        self,
        counts: Optional[Mapping[int, int]],
        total: int,
        value: int,
        vocabulary_size: int,
    ) -> float:
        count = counts.get(value, 0) if counts else 0
        return (count + self.k) / (total + self.k * vocabulary_size)


# ---------------------------------------------------------------------- #
#  Evaluations
# ---------------------------------------------------------------------- #


def evaluate_in_sample(sequences: Mapping[int, Sequence[int]]) -> MarkovStats:
    """Train on every sequence and score argmax predictions on the same data."""
    predictor = NGramPredictor().fit(sequences.values())
    baseline = predictor.most_common()

    baseline_correct = order1_correct = order1_total = 0
    order2_correct = order2_total = 0

    for sequence in sequences.values():
        for i in range(1, len(sequence)):
            actual = sequence[i]
            order1_total += 1
            if actual == baseline:
                baseline_correct += 1
            if predictor.predict_order1(sequence[i - 1]) == actual:
                order1_correct += 1
        for i in range(2, len(sequence)):
            order2_total += 1
            if predictor.predict_order2(sequence[i - 2], sequence[i - 1]) == sequence[i]:
                order2_correct += 1

    stats = MarkovStats(
        baseline_correct=baseline_correct,
        baseline_total=order1_total,
        order1_correct=order1_correct,
        order1_total=order1_total,
        order2_correct=order2_correct,
        order2_total=order2_total,
        order1_contexts=predictor.order1_contexts,
        order2_contexts=predictor.order2_contexts,
        order2_deterministic=predictor.order2_deterministic,
    )
    logger.info(
        f"In-sample: baseline {baseline_correct}/{order1_total}, "
        f"order-1 {order1_correct}/{order1_total}, "
        f"order-2 {order2_correct}/{order2_total}"
    )
    return stats


def _held_out(sequences: Mapping[int, Sequence[int]], held: int) -> list[Sequence[int]]:
    return [seq for key, seq in sequences.items() if key != held]


def evaluate_leave_one_out(sequences: Mapping[int, Sequence[int]]) -> LeaveOneOutStats:
    """Argmax accuracy on each sequence with the model trained on the others."""
    order1_correct = order1_seen = order1_total = 0
    order2_correct = order2_seen = order2_total = 0

    for held, target in sequences.items():
        predictor = NGramPredictor().fit(_held_out(sequences, held))

        for i in range(1, len(target)):
            order1_total += 1
            prev = target[i - 1]
            if predictor.has_order1(prev):
                order1_seen += 1
                if predictor.predict_order1(prev) == target[i]:
                    order1_correct += 1

        for i in range(2, len(target)):
            order2_total += 1
            prev2, prev1 = target[i - 2], target[i - 1]
            if predictor.has_order2(prev2, prev1):
                order2_seen += 1
                if predictor.predict_order2(prev2, prev1) == target[i]:
                    order2_correct += 1

    logger.info(
        f"Leave-one-out: order-1 {order1_correct}/{order1_seen}/{order1_total}, "
        f"order-2 {order2_correct}/{order2_seen}/{order2_total} (correct/seen/total)"
    )
    return LeaveOneOutStats(
        order1_correct=order1_correct,
        order1_seen=order1_seen,
        order1_total=order1_total,
        order2_correct=order2_correct,
        order2_seen=order2_seen,
        order2_total=order2_total,
    )


def evaluate_leave_one_out_smoothed(
    sequences: Mapping[int, Sequence[int]],
    k: float = 0.5,
    lambda2: float = 0.6,
    lambda1: float = 0.3,
    lambda0: float = 0.1,
) -> SmoothedStats:
    """Interpolated-model accuracy under leave-one-out.

    The vocabulary is every value in *all* sequences, held-out one
    included, so unseen values still compete for each prediction.

    Raises:
        AnalysisPreconditionError: If ``k`` is not positive.
    """
    _check_smoothing(k)
    vocabulary = sorted({value for seq in sequences.values() for value in seq})

    order1_correct = order1_total = 0
    order2_correct = order2_total = 0

    for held, target in sequences.items():
        predictor = NGramPredictor(k, lambda2, lambda1, lambda0).fit(
            _held_out(sequences, held)
        )

        for i in range(1, len(target)):
            order1_total += 1
            prediction = predictor.predict_interpolated(
                target[i - 1], None, vocabulary=vocabulary
            )
            if prediction == target[i]:
                order1_correct += 1

        for i in range(2, len(target)):
            order2_total += 1
            prediction = predictor.predict_interpolated(
                target[i - 1], target[i - 2], vocabulary=vocabulary
            )
            if prediction == target[i]:
                order2_correct += 1

    logger.info(
        f"Smoothed leave-one-out (k={k}): order-1 {order1_correct}/{order1_total}, "
        f"order-2 {order2_correct}/{order2_total}"
    )
    return SmoothedStats(
        order1_correct=order1_correct,
        order1_total=order1_total,
        order2_correct=order2_correct,
        order2_total=order2_total,
        k=k,
        lambda2=lambda2,
        lambda1=lambda1,
        lambda0=lambda0,
    )
