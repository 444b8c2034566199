"""
Tests for the JSON Message Store
"""

import json

import pytest

from glyphweave.collectors.message_store import MessageStore
from glyphweave.core.errors import (
    CorpusFormatError,
    GridValidationError,
    MessageNotFoundError,
)


class TestMessageStore:
    def test_load_sorted_by_id(self, corpus_file):
        store = MessageStore.from_json(corpus_file)
        assert store.ids == [0, 1]
        assert len(store) == 2
        assert [g.message_id for g in store.all()] == [0, 1]

    def test_fragments_joined_and_split(self, corpus_file):
        store = MessageStore.from_json(corpus_file)
        assert store.get(0).lines == ("12304", "4321")
        assert store.get(1).lines == ("12304", "4321", "01234", "3210")

    def test_unknown_message(self, corpus_file):
        store = MessageStore.from_json(corpus_file)
        assert 5 not in store
        with pytest.raises(MessageNotFoundError) as exc_info:
            store.get(5)
        assert str(exc_info.value) == "Message 5 not found."

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MessageStore.from_json(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorpusFormatError):
            MessageStore.from_json(path)

    @pytest.mark.parametrize(
        "raw",
        [
            ["12304"],
            {"x": ["1230"]},
            {"1": [1, 2, 3]},
        ],
    )
    def test_bad_shapes(self, raw):
        with pytest.raises(CorpusFormatError):
            MessageStore.from_mapping(raw)

    def test_bad_glyph(self, tmp_path):
        path = tmp_path / "glyph.json"
        path.write_text(json.dumps({"0": ["126"]}), encoding="utf-8")
        with pytest.raises(GridValidationError):
            MessageStore.from_json(path)

    def test_single_string_value(self):
        store = MessageStore.from_mapping({"3": "0050"})
        assert store.get(3).lines == ("00", "0")
