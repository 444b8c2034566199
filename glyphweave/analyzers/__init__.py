"""
GlyphWeave Analyzers
=====================

Weaving and structural analysis of glyph messages:

- ``weaver``     -- Grid to trigram token stream (Down/Up weave)
- ``sequence``   -- Value sets, repeat gaps, subsequence search
- ``graph``      -- Transition graph, SCCs, weight-floor clusters
- ``alignment``  -- Needleman-Wunsch and anchored alignment
- ``markov``     -- Order-1/2 argmax and smoothed predictors
- ``layout``     -- Triangular display mesh and mesh trigrams
"""

from glyphweave.analyzers.alignment import SequenceAligner
from glyphweave.analyzers.graph import GraphAnalyzer
from glyphweave.analyzers.layout import LayoutBuilder
from glyphweave.analyzers.markov import NGramPredictor
from glyphweave.analyzers.weaver import weave, weave_corpus, weave_values

__all__ = [
    "SequenceAligner",
    "GraphAnalyzer",
    "LayoutBuilder",
    "NGramPredictor",
    "weave",
    "weave_corpus",
    "weave_values",
]
