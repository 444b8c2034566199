"""
Tests for shared configuration, logging and report export
"""

import json
import logging

import pytest

from shared.config import GlyphConfig, get_config
from shared.console import GlyphConsole
from shared.logger import GlyphLogger, configure_logging

from glyphweave.core.models import AlignmentSummary, Orientation
from glyphweave.output.report import GlyphWeaveReportGenerator


class TestConfig:
    def test_defaults(self):
        config = GlyphConfig()
        assert config.glyphweave.scheme == "012/102"
        assert config.glyphweave.anchor == [66, 5]
        assert config.glyphweave.cluster_weights == [2, 3, 4]

    def test_load_partial_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[global]\nlog_level = "DEBUG"\n\n'
            "[glyphweave]\nhub_threshold = 4\nunknown_key = 1\n",
            encoding="utf-8",
        )
        config = GlyphConfig.load(path)
        assert config.global_settings.log_level == "DEBUG"
        assert config.glyphweave.hub_threshold == 4
        assert config.glyphweave.gap_score == -1

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            GlyphConfig.load(tmp_path / "nope.toml")

    def test_get_config_reloads_on_path(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[glyphweave]\nscheme = "021/120"\n', encoding="utf-8")
        config = get_config(path)
        assert config.glyphweave.scheme == "021/120"
        assert get_config() is config

    def test_to_dict(self):
        data = GlyphConfig().to_dict()
        assert data["glyphweave"]["lambda2"] == 0.6


class TestLogger:
    def test_name_is_rooted(self):
        assert GlyphLogger("graph").name == "glyphweave.graph"
        assert GlyphLogger("glyphweave.weaver").name == "glyphweave.weaver"

    def test_json_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.jsonl"
        configure_logging(log_level="DEBUG", log_file=log_file, json_logs=True, console_output=False)
        log = GlyphLogger("glyphweave.test")
        with log.operation("weave"), log.bind_message(3):
            log.info("woven", tokens=12)
        for handler in logging.getLogger("glyphweave").handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert entry["message"] == "woven"
        assert entry["component"] == "test"
        assert entry["operation"] == "weave"
        assert entry["message_id"] == 3
        assert entry["extra"] == {"tokens": 12}
        configure_logging(console_output=False)

    def test_timed_records_elapsed(self):
        configure_logging(console_output=False)
        with GlyphLogger("glyphweave.test").timed("noop") as timer:
            pass
        assert timer.elapsed >= 0


class TestReportGenerator:
    def test_envelope(self):
        text = GlyphWeaveReportGenerator().dumps(
            {"orientation": Orientation.UP, "values": {3, 1}}, report_type="custom"
        )
        payload = json.loads(text)
        assert payload["report_type"] == "custom"
        assert payload["data"] == {"orientation": "up", "values": [1, 3]}

    def test_model_payload(self, tmp_path):
        summary = AlignmentSummary(
            message_a=0, message_b=1, score=3, match_count=3,
            mismatch_count=0, gap_count=3, mappings=3, conflicts=0,
        )
        path = GlyphWeaveReportGenerator().generate_json(summary, tmp_path / "a.json", "alignment")
        payload = json.loads(open(path, encoding="utf-8").read())
        assert payload["data"]["anchor_index_a"] is None
        assert payload["data"]["score"] == 3


class TestConsole:
    def test_recorded_table(self):
        console = GlyphConsole(record=True)
        console.table("Values", ["A", "B"], [(1, 2)])
        assert "Values" in console.export_text()
