"""
GlyphWeave Shared Module
=========================

Configuration, structured logging and console presentation shared by
the GlyphWeave engine and its command-line interface.
"""

from shared.config import GlyphConfig, get_config

__all__ = ["GlyphConfig", "get_config"]
