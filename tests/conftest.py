"""
Shared fixtures for the GlyphWeave test suite.
"""

import json
import os
from pathlib import Path

import pytest

from glyphweave.core.models import GlyphGrid

# Research corpus, only available when GLYPHWEAVE_CORPUS points at it.
CORPUS_PATH = os.environ.get("GLYPHWEAVE_CORPUS", "")

requires_corpus = pytest.mark.skipif(
    not CORPUS_PATH or not Path(CORPUS_PATH).is_file(),
    reason="GLYPHWEAVE_CORPUS does not point at the message corpus",
)


@pytest.fixture
def pair_grid():
    """One row pair weaving into tokens 39, 68, 21."""
    return GlyphGrid.from_lines(["12304", "4321"], message_id=0)


@pytest.fixture
def two_pair_grid():
    """Two row pairs weaving into 39, 68, 21, 8, 37, 95."""
    return GlyphGrid.from_lines(["12304", "4321", "01234", "3210"], message_id=1)


@pytest.fixture
def small_corpus():
    """Corpus mapping in the on-disk JSON shape."""
    return {
        "1": ["12304", "54321", "5", "01234", "53210"],
        "0": ["123045", "4321"],
    }


@pytest.fixture
def corpus_file(tmp_path, small_corpus):
    path = tmp_path / "messages.json"
    path.write_text(json.dumps(small_corpus), encoding="utf-8")
    return path
