"""
GlyphWeave Module Entry Point
==============================

Allows running the GlyphWeave CLI via: python -m glyphweave
"""

from glyphweave.cli import main

if __name__ == "__main__":
    main()
