"""
Tests for the GlyphWeave CLI
"""

import json

import pytest
from click.testing import CliRunner

from glyphweave.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


def _invoke(runner, corpus_file, *args):
    return runner.invoke(
        cli,
        ["--quiet", "--corpus", str(corpus_file), "-o", "json", *args],
        obj={},
        env={"GLYPHWEAVE_CORPUS": None},
    )


def _data(result):
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["tool"] == "glyphweave"
    return payload["data"]


class TestCli:
    def test_list(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "list"))
        assert [m["message_id"] for m in data] == [0, 1]
        assert data[1]["height"] == 4

    def test_weave(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "weave", "-m", "0"))
        assert data["scheme"] == "012/102"
        glyphs = [(t["first"], t["second"], t["third"]) for t in data["tokens"]]
        assert glyphs == [(1, 2, 4), (2, 3, 3), (0, 4, 1)]
        assert data["tokens"][1]["orientation"] == "up"

    def test_weave_exports_value_and_base5(self, runner, corpus_file):
        tokens = _data(_invoke(runner, corpus_file, "weave", "-m", "0"))["tokens"]
        assert [t["value"] for t in tokens] == [39, 68, 21]
        assert [t["base5"] for t in tokens] == ["124", "233", "041"]

    def test_weave_report_file_carries_values(self, runner, corpus_file, tmp_path):
        out = tmp_path / "tokens.json"
        result = runner.invoke(
            cli,
            ["--quiet", "--corpus", str(corpus_file), "-f", str(out), "weave", "-m", "0"],
            obj={},
        )
        assert result.exit_code == 0, result.output
        tokens = json.loads(out.read_text(encoding="utf-8"))["data"]["tokens"]
        assert tokens[0]["value"] == 39

    def test_weave_with_scheme(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "weave", "-m", "0", "--scheme", "210/012"))
        assert data["scheme"] == "210/012"
        assert (data["tokens"][0]["first"], data["tokens"][0]["third"]) == (4, 1)

    def test_bad_scheme_label(self, runner, corpus_file):
        result = _invoke(runner, corpus_file, "weave", "-m", "0", "--scheme", "01/2")
        assert result.exit_code == 2

    def test_unknown_message_exits_nonzero(self, runner, corpus_file):
        result = _invoke(runner, corpus_file, "weave", "-m", "42")
        assert result.exit_code == 1

    def test_graph(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "graph", "--hub-threshold", "1"))
        assert data["node_count"] == 6
        assert data["total_transitions"] == 8
        assert data["hub_count"] == 5
        assert data["top_hubs"][0] == 21

    def test_clusters(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "clusters", "--min-weight", "2"))
        assert data["clusters"][0] == [21, 39, 68]
        assert data["cluster_count"] == 4

    def test_align_anchored(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "align", "0", "1", "--anchor", "68,21"))
        assert data["summary"]["score"] == 3
        assert data["summary"]["anchor"] == [68, 21]
        assert len(data["steps"]) == 6

    def test_align_global(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "align", "0", "1", "--global"))
        assert data["summary"]["anchor"] == []
        assert data["summary"]["match_count"] == 3

    def test_align_missing_anchor(self, runner, corpus_file):
        result = _invoke(runner, corpus_file, "align", "0", "1", "--anchor", "66,5")
        assert result.exit_code == 1

    def test_schemes(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "schemes", "--low", "0", "--high", "124"))
        assert data["schemes"] == []

    def test_report_to_file(self, runner, corpus_file, tmp_path):
        out = tmp_path / "out" / "report.json"
        result = runner.invoke(
            cli,
            ["--quiet", "--corpus", str(corpus_file), "-o", "json", "-f", str(out), "report"],
            obj={},
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["report_type"] == "corpus_report"
        assert payload["data"]["token_count"] == 9

    def test_console_output(self, runner, corpus_file):
        result = runner.invoke(cli, ["--corpus", str(corpus_file), "list"], obj={})
        assert result.exit_code == 0, result.output
        assert "Messages" in result.output

    def test_missing_corpus(self, runner):
        result = runner.invoke(cli, ["list"], obj={}, env={"GLYPHWEAVE_CORPUS": None})
        assert result.exit_code == 1
        assert "No corpus given" in result.output

    def test_layout_ascii(self, runner, corpus_file):
        result = runner.invoke(
            cli, ["--quiet", "--corpus", str(corpus_file), "layout", "-m", "1"], obj={}
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["12304", " 4321", "01234", " 3210"]

    def test_layout_trigrams(self, runner, corpus_file):
        result = runner.invoke(
            cli,
            ["--quiet", "--corpus", str(corpus_file), "layout", "-m", "0", "-f", "trigrams"],
            obj={},
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines()[1] == "0,1: 233 -> 68"

    def test_layout_json(self, runner, corpus_file):
        data = _data(_invoke(runner, corpus_file, "layout", "-m", "0"))
        assert data["message_id"] == 0
        assert data["width"] == 5.0
        assert data["cells"][5] == {"row": 1, "column": 0, "glyph": 4, "x": 0.5, "y": 1.0}
        assert [t["value"] for t in data["trigrams"]] == [39, 68, 77, 21]

    def test_layout_unknown_message(self, runner, corpus_file):
        result = _invoke(runner, corpus_file, "layout", "-m", "9")
        assert result.exit_code == 1

    def test_report_rejects_zero_smoothing(self, runner, corpus_file, tmp_path):
        config = tmp_path / "config.toml"
        config.write_text("[glyphweave]\nsmoothing_k = 0.0\n", encoding="utf-8")
        result = runner.invoke(
            cli,
            ["--config", str(config), "--corpus", str(corpus_file), "report"],
            obj={},
        )
        assert result.exit_code == 1
        assert "Smoothing constant" in result.output
