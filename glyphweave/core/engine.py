"""
GlyphWeave Engine -- Corpus Analysis Pipeline
==============================================

Runs every analysis over a message corpus and collects the results into
a single :class:`CorpusReport`.

Pipeline Phases:
    Phase 1 -- Weaving:
        Weave every message grid with the configured scheme.
    Phase 2 -- Sequence statistics:
        Per-message summaries and the corpus-wide value range.
    Phase 3 -- Transition graph:
        Degree/hub/SCC analysis of the concatenated stream, networkx
        topology metrics, and clusters at each configured weight floor.
    Phase 4 -- Alignment:
        Anchored alignment of the configured message pairs.
    Phase 5 -- Prediction:
        In-sample, leave-one-out and smoothed leave-one-out accuracy.

Phases run sequentially; each is logged and timed.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from typing import Optional

from shared.config import GlyphConfig
from shared.logger import GlyphLogger

from glyphweave.analyzers.alignment import (
    SequenceAligner,
    conflict_count,
    substitution_mapping,
)
from glyphweave.analyzers.graph import GraphAnalyzer
from glyphweave.analyzers.layout import LayoutBuilder
from glyphweave.analyzers.markov import (
    evaluate_in_sample,
    evaluate_leave_one_out,
    evaluate_leave_one_out_smoothed,
)
from glyphweave.analyzers.sequence import (
    as_values,
    find_subsequence,
    has_adjacent_repeats,
    is_contiguous,
    value_range,
)
from glyphweave.analyzers.weaver import concatenate, weave
from glyphweave.collectors.message_store import MessageStore
from glyphweave.core.models import (
    AlignmentResult,
    AlignmentSummary,
    ClusterSummary,
    CorpusReport,
    GlyphGrid,
    GlyphLayout,
    GraphSummary,
    MessageSummary,
    TrigramToken,
    WeaveScheme,
)

logger = GlyphLogger("glyphweave.engine")


class GlyphWeaveEngine:
    """Orchestrates weaving and structural analysis of a message corpus.

    Usage::

        engine = GlyphWeaveEngine(config=GlyphConfig.load())
        store = MessageStore.from_json("data/messages.json")
        report = engine.analyze(store)
    """

    def __init__(self, config: Optional[GlyphConfig] = None) -> None:
        """Initialise the engine.

        Args:
            config: GlyphConfig instance. If None, defaults are used.
        """
        self.config = config or GlyphConfig()
        cfg = self.config.glyphweave

        self.scheme = WeaveScheme.from_label(cfg.scheme)
        self.graph_analyzer = GraphAnalyzer(hub_threshold=cfg.hub_threshold)
        self.aligner = SequenceAligner(
            match_score=cfg.match_score,
            mismatch_score=cfg.mismatch_score,
            gap_score=cfg.gap_score,
        )
        self.layout_builder = LayoutBuilder(
            column_spacing=cfg.column_spacing,
            row_spacing=cfg.row_spacing,
            row_offset=cfg.row_offset,
            with_trigrams=cfg.layout_trigrams,
        )

    # ================================================================== #
    #  Building blocks
    # ================================================================== #

    def weave_corpus(
        self,
        store: MessageStore,
        scheme: Optional[WeaveScheme] = None,
    ) -> dict[int, list[TrigramToken]]:
        """Weave every message of *store*, keyed by message id."""
        scheme = scheme or self.scheme
        streams: dict[int, list[TrigramToken]] = {}
        for grid in store.all():
            with logger.bind_message(grid.message_id):
                streams[grid.message_id] = weave(grid, scheme)
        return streams

    def layout(self, store: MessageStore, message_id: int) -> GlyphLayout:
        """Mesh layout of one message.

        Raises:
            MessageNotFoundError: If *message_id* is not in *store*.
        """
        with logger.bind_message(message_id):
            return self.layout_builder.build(store.get(message_id))

    @staticmethod
    def summarize_message(grid: GlyphGrid, tokens: Sequence[TrigramToken]) -> MessageSummary:
        values = as_values(tokens)
        return MessageSummary(
            message_id=grid.message_id,
            height=grid.height,
            width=grid.width,
            glyph_count=grid.glyph_count,
            token_count=len(values),
            unique_count=len(set(values)),
            value_sum=sum(values),
            first_value=values[0] if values else None,
            adjacent_repeats=has_adjacent_repeats(values),
        )

    def graph_summary(self, stream: Sequence[TrigramToken] | Sequence[int]) -> GraphSummary:
        """Transition-graph metrics of one combined stream."""
        analysis = self.graph_analyzer.analyze(stream)
        return GraphSummary(
            node_count=analysis.node_count,
            edge_count=analysis.edge_count,
            total_transitions=analysis.total_transitions,
            sources=analysis.sources,
            sinks=analysis.sinks,
            hub_count=len(analysis.hubs),
            top_hubs=analysis.hubs[: self.config.glyphweave.top_hubs],
            component_count=analysis.component_count,
            largest_component_size=analysis.largest_component_size,
            topology=self.graph_analyzer.topology(analysis),
        )

    def cluster_summary(
        self,
        stream: Sequence[TrigramToken] | Sequence[int],
        min_edge_weight: int,
    ) -> ClusterSummary:
        clusters = self.graph_analyzer.clusters(stream, min_edge_weight=min_edge_weight)
        return ClusterSummary(
            min_edge_weight=min_edge_weight,
            cluster_count=clusters.cluster_count,
            largest_cluster_size=clusters.largest_cluster_size,
            singleton_count=clusters.singleton_count,
            largest_cluster=clusters.clusters[0] if clusters.clusters else [],
        )

    def align_pair(
        self,
        message_a: int,
        values_a: Sequence[int],
        message_b: int,
        values_b: Sequence[int],
        anchor: Optional[Sequence[int]] = None,
    ) -> Optional[tuple[AlignmentResult, AlignmentSummary]]:
        """Align two value streams, anchored on the first occurrence of *anchor*.

        With an empty or missing *anchor* a plain global alignment is
        run. Returns ``None`` (and logs a warning) when the anchor does
        not occur in both streams.
        """
        anchor = list(anchor or [])
        index_a: Optional[int] = None
        index_b: Optional[int] = None

        if anchor:
            index_a = find_subsequence(values_a, anchor)
            index_b = find_subsequence(values_b, anchor)
            if index_a < 0 or index_b < 0:
                logger.warning(
                    f"Anchor {anchor} missing from message "
                    f"{message_a if index_a < 0 else message_b}; "
                    f"skipping pair {message_a}/{message_b}"
                )
                return None
            result = self.aligner.align_anchored(
                values_a, values_b, index_a, index_b, len(anchor)
            )
        else:
            result = self.aligner.align(values_a, values_b)

        mapping = substitution_mapping(result)
        summary = AlignmentSummary(
            message_a=message_a,
            message_b=message_b,
            anchor=anchor,
            anchor_index_a=index_a,
            anchor_index_b=index_b,
            score=result.score,
            match_count=result.match_count,
            mismatch_count=result.mismatch_count,
            gap_count=result.gap_count,
            mappings=len(mapping),
            conflicts=conflict_count(mapping),
        )
        return result, summary

    # ================================================================== #
    #  Full pipeline
    # ================================================================== #

    def analyze(self, store: MessageStore) -> CorpusReport:
        """Run every phase over *store* and return the combined report.

        Raises:
            WeaveStructureError: If any message cannot be woven.
        """
        cfg = self.config.glyphweave
        start_time = time.monotonic()
        logger.info(
            f"Starting corpus analysis: {len(store)} messages, scheme {self.scheme.label}"
        )

        # ---- Phase 1: Weaving ----
        with logger.operation("weave"), logger.timed("Phase 1: Weaving"):
            streams = self.weave_corpus(store)
        values: dict[int, list[int]] = {mid: as_values(s) for mid, s in streams.items()}
        combined = as_values(concatenate(streams))

        report = CorpusReport(scheme=self.scheme.label)

        # ---- Phase 2: Sequence statistics ----
        with logger.operation("sequence"), logger.timed("Phase 2: Sequence statistics"):
            report.messages = [
                self.summarize_message(store.get(mid), tokens)
                for mid, tokens in streams.items()
            ]
            report.token_count = len(combined)
            report.unique_values = len(set(combined))
            bounds = value_range(combined)
            if bounds is not None:
                report.value_min, report.value_max = bounds
            report.contiguous = is_contiguous(combined)

        if not combined:
            logger.warning("Corpus produced no tokens; skipping structural phases")
            report.elapsed_seconds = time.monotonic() - start_time
            return report

        # ---- Phase 3: Transition graph ----
        with logger.operation("graph"), logger.timed("Phase 3: Transition graph"):
            report.graph = self.graph_summary(combined)
            report.clusters = [
                self.cluster_summary(combined, weight) for weight in cfg.cluster_weights
            ]

        # ---- Phase 4: Alignment ----
        with logger.operation("alignment"), logger.timed("Phase 4: Alignment"):
            report.alignments = self._align_configured_pairs(values)

        # ---- Phase 5: Prediction ----
        with logger.operation("markov"), logger.timed("Phase 5: Prediction"):
            report.markov = evaluate_in_sample(values)
            report.leave_one_out = evaluate_leave_one_out(values)
            report.smoothed = evaluate_leave_one_out_smoothed(
                values,
                k=cfg.smoothing_k,
                lambda2=cfg.lambda2,
                lambda1=cfg.lambda1,
                lambda0=cfg.lambda0,
            )

        report.elapsed_seconds = time.monotonic() - start_time
        logger.info(
            f"Analysis complete in {report.elapsed_seconds:.2f}s: "
            f"{report.token_count} tokens, {report.unique_values} distinct values"
        )
        return report

    def _align_configured_pairs(
        self, values: Mapping[int, Sequence[int]]
    ) -> list[AlignmentSummary]:
        summaries: list[AlignmentSummary] = []
        for pair in self.config.glyphweave.alignment_pairs:
            message_a, message_b = int(pair[0]), int(pair[1])
            if message_a not in values or message_b not in values:
                logger.warning(
                    f"Alignment pair {message_a}/{message_b} not in corpus; skipping"
                )
                continue
            aligned = self.align_pair(
                message_a,
                values[message_a],
                message_b,
                values[message_b],
                anchor=self.config.glyphweave.anchor,
            )
            if aligned is not None:
                summaries.append(aligned[1])
        return summaries
