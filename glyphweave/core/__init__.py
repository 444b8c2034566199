"""
GlyphWeave Core Module
=======================

Data models, exceptions and the corpus analysis engine
(``glyphweave.core.engine``).
"""

from glyphweave.core.errors import (
    AnalysisPreconditionError,
    AnchorBoundsError,
    CorpusFormatError,
    GlyphWeaveError,
    GridValidationError,
    MessageNotFoundError,
    WeaveStructureError,
)
from glyphweave.core.models import (
    AlignmentResult,
    AlignmentStep,
    CorpusReport,
    GlyphGrid,
    GlyphLayout,
    Orientation,
    Permutation,
    TrigramToken,
    WeaveScheme,
)

__all__ = [
    "AnalysisPreconditionError",
    "AnchorBoundsError",
    "CorpusFormatError",
    "GlyphWeaveError",
    "GridValidationError",
    "MessageNotFoundError",
    "WeaveStructureError",
    "AlignmentResult",
    "AlignmentStep",
    "CorpusReport",
    "GlyphGrid",
    "GlyphLayout",
    "Orientation",
    "Permutation",
    "TrigramToken",
    "WeaveScheme",
]
