"""
GlyphWeave Collectors
======================

Corpus loading for the analysis engine.

- ``message_store`` -- JSON message corpus (id -> digit fragments)
"""

from glyphweave.collectors.message_store import MessageStore

__all__ = ["MessageStore"]
