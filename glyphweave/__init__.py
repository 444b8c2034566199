"""
GlyphWeave -- Trigram Weaving & Structural Analysis
=====================================================

Turns grids of base-5 glyphs into ordered trigram token streams and
studies their structure: transition graphs, strongly connected
components, weight-floor clusters, pairwise alignment and Markov
predictability.

Modules:
    - ``glyphweave.core.engine``      -- Corpus analysis pipeline
    - ``glyphweave.core.models``      -- Pydantic data models
    - ``glyphweave.core.errors``      -- Exception hierarchy
    - ``glyphweave.collectors``       -- JSON corpus loading
    - ``glyphweave.analyzers``        -- Weaving and analysis algorithms
    - ``glyphweave.output``           -- Console and report output
    - ``glyphweave.cli``              -- Click CLI entry point
"""

__version__ = "1.0.0"
__tool_name__ = "glyphweave"

__all__ = [
    "GlyphWeaveEngine",
]
