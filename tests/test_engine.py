"""
Tests for the GlyphWeave Engine
"""

import pytest

from shared.config import GlyphConfig

from glyphweave.collectors.message_store import MessageStore
from glyphweave.core.engine import GlyphWeaveEngine
from glyphweave.core.errors import (
    AnalysisPreconditionError,
    MessageNotFoundError,
    WeaveStructureError,
)


@pytest.fixture
def store(small_corpus):
    return MessageStore.from_mapping(small_corpus)


@pytest.fixture
def config():
    config = GlyphConfig()
    config.glyphweave.anchor = [68, 21]
    config.glyphweave.alignment_pairs = [[0, 1]]
    return config


class TestGlyphWeaveEngine:
    def test_weave_corpus(self, store):
        streams = GlyphWeaveEngine().weave_corpus(store)
        assert [t.value for t in streams[0]] == [39, 68, 21]
        assert len(streams[1]) == 6

    def test_report_sequence_phase(self, store, config):
        report = GlyphWeaveEngine(config).analyze(store)
        assert report.scheme == "012/102"
        assert report.token_count == 9
        assert report.unique_values == 6
        assert (report.value_min, report.value_max) == (8, 95)
        assert not report.contiguous

        first = report.messages[0]
        assert first.token_count == 3
        assert first.value_sum == 128
        assert first.first_value == 39
        assert not first.adjacent_repeats

    def test_report_graph_phase(self, store, config):
        report = GlyphWeaveEngine(config).analyze(store)
        graph = report.graph
        assert graph.node_count == 6
        assert graph.edge_count == 6
        assert graph.total_transitions == 8
        assert graph.sources == []
        assert graph.sinks == [95]
        assert graph.component_count == 4
        assert graph.largest_component_size == 3
        assert graph.topology["weak_components"] == 1

        by_weight = {c.min_edge_weight: c for c in report.clusters}
        assert sorted(by_weight) == [2, 3, 4]
        assert by_weight[2].cluster_count == 4
        assert by_weight[2].largest_cluster == [21, 39, 68]
        assert by_weight[2].singleton_count == 3
        assert by_weight[3].cluster_count == 6

    def test_report_alignment_phase(self, store, config):
        report = GlyphWeaveEngine(config).analyze(store)
        assert len(report.alignments) == 1
        summary = report.alignments[0]
        assert (summary.anchor_index_a, summary.anchor_index_b) == (1, 1)
        assert summary.score == 3
        assert summary.match_count == 3
        assert summary.gap_count == 3
        assert (summary.mappings, summary.conflicts) == (3, 0)

    def test_report_prediction_phase(self, store, config):
        report = GlyphWeaveEngine(config).analyze(store)
        assert report.markov.order1_total == 7
        assert report.leave_one_out.order1_total == 7
        assert report.smoothed.order2_total == 5
        assert report.elapsed_seconds >= 0

    def test_missing_anchor_skips_pair(self, store, config):
        config.glyphweave.anchor = [1, 2]
        assert GlyphWeaveEngine(config).analyze(store).alignments == []

    def test_unknown_pair_skipped(self, store, config):
        config.glyphweave.alignment_pairs = [[0, 9]]
        assert GlyphWeaveEngine(config).analyze(store).alignments == []

    def test_global_alignment_without_anchor(self):
        engine = GlyphWeaveEngine()
        result, summary = engine.align_pair(0, [1, 2, 3], 1, [1, 2, 3], anchor=[])
        assert summary.anchor == []
        assert summary.anchor_index_a is None
        assert summary.score == result.score == 6

    def test_unweavable_message(self):
        store = MessageStore.from_mapping({"0": ["12304543210"]})
        with pytest.raises(WeaveStructureError):
            GlyphWeaveEngine().analyze(store)

    def test_empty_corpus(self):
        report = GlyphWeaveEngine().analyze(MessageStore({}))
        assert report.token_count == 0
        assert report.graph is None

    def test_zero_smoothing_constant(self, store, config):
        config.glyphweave.smoothing_k = 0.0
        with pytest.raises(AnalysisPreconditionError):
            GlyphWeaveEngine(config).analyze(store)

    def test_layout_uses_configured_spacing(self, store, config):
        config.glyphweave.row_offset = 0.25
        config.glyphweave.layout_trigrams = False
        layout = GlyphWeaveEngine(config).layout(store, 0)
        assert layout.cell(1, 0).x == 0.25
        assert layout.trigrams == []

    def test_layout_unknown_message(self, store):
        with pytest.raises(MessageNotFoundError):
            GlyphWeaveEngine().layout(store, 5)
