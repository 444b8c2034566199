"""
GlyphWeave Output
==================

Output rendering modules for analysis results.

- ``console`` -- Rich-based console display
- ``report``  -- JSON report generation
"""

from glyphweave.output.console import GlyphWeaveConsoleOutput
from glyphweave.output.report import GlyphWeaveReportGenerator

__all__ = [
    "GlyphWeaveConsoleOutput",
    "GlyphWeaveReportGenerator",
]
