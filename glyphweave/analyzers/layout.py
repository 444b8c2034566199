"""
GlyphWeave Mesh Layout
=======================

Places the glyphs of a message on a triangular mesh for display. Row
``r`` sits at ``y = r * row_spacing``; glyph ``c`` of that row sits at
``x = c * column_spacing``, shifted right by ``row_offset`` on odd rows.

Mesh trigrams are the downward triangles of that mesh: two horizontal
neighbours of a row plus the glyph directly below them. On even rows
the glyph below column ``c`` is column ``c`` of the next row; odd rows
are shifted, so it is column ``c + 1``. Triangles whose lower glyph
falls past the end of the next row are skipped.

The layout is a display aid only. Token streams for analysis come from
:mod:`glyphweave.analyzers.weaver`.
"""

from __future__ import annotations

from shared.logger import GlyphLogger

from glyphweave.core.models import GlyphCell, GlyphGrid, GlyphLayout, MeshTrigram

logger = GlyphLogger("glyphweave.layout")


class LayoutBuilder:
    """Builds :class:`GlyphLayout` geometry from glyph grids.

    Usage::

        builder = LayoutBuilder(row_offset=0.5)
        layout = builder.build(grid)
        layout.cell(1, 0).x    # 0.5
    """

    def __init__(
        self,
        column_spacing: float = 1.0,
        row_spacing: float = 1.0,
        row_offset: float = 0.5,
        with_trigrams: bool = True,
    ) -> None:
        self.column_spacing = column_spacing
        self.row_spacing = row_spacing
        self.row_offset = row_offset
        self.with_trigrams = with_trigrams

    def build(self, grid: GlyphGrid) -> GlyphLayout:
        cells = self.cells(grid)
        trigrams = self.trigrams(grid) if self.with_trigrams else []

        width = max(c.x for c in cells) + self.column_spacing if cells else 0.0
        height = max(c.y for c in cells) + self.row_spacing if cells else 0.0

        logger.debug(
            f"Layout of message {grid.message_id}: {len(cells)} cells, "
            f"{len(trigrams)} mesh trigrams, {width:g} x {height:g}"
        )
        return GlyphLayout(
            message_id=grid.message_id,
            lines=list(grid.lines),
            cells=cells,
            trigrams=trigrams,
            width=width,
            height=height,
        )

    def cells(self, grid: GlyphGrid) -> list[GlyphCell]:
        cells: list[GlyphCell] = []
        for r, row in enumerate(grid.rows):
            offset = self.row_offset if r % 2 == 1 else 0.0
            for c, glyph in enumerate(row):
                cells.append(
                    GlyphCell(
                        row=r,
                        column=c,
                        glyph=glyph,
                        x=c * self.column_spacing + offset,
                        y=r * self.row_spacing,
                    )
                )
        return cells

    @staticmethod
    def trigrams(grid: GlyphGrid) -> list[MeshTrigram]:
        """Overlapping downward triangles, row-major."""
        trigrams: list[MeshTrigram] = []
        for r in range(grid.height - 1):
            top = grid.rows[r]
            bottom = grid.rows[r + 1]
            shift = 1 if r % 2 == 1 else 0

            for c in range(len(top) - 1):
                below = c + shift
                if below >= len(bottom):
                    continue
                trigrams.append(
                    MeshTrigram(
                        row=r,
                        column=c,
                        first=top[c],
                        second=top[c + 1],
                        third=bottom[below],
                    )
                )
        return trigrams


def build_layout(
    grid: GlyphGrid,
    column_spacing: float = 1.0,
    row_spacing: float = 1.0,
    row_offset: float = 0.5,
    with_trigrams: bool = True,
) -> GlyphLayout:
    return LayoutBuilder(column_spacing, row_spacing, row_offset, with_trigrams).build(grid)
