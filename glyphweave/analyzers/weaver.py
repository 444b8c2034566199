"""
GlyphWeave Trigram Weaver
==========================

Converts a glyph grid into an ordered stream of trigram tokens.

Rows are read in consecutive pairs (2k, 2k+1). Each pair is woven with
two independent read cursors, one per row, and an orientation that
starts at the scheme's configured start and flips after every token:

    DOWN  top[t], top[t+1], bottom[b]     t += 2, b += 1
    UP    bottom[b], bottom[b+1], top[t]  b += 2, t += 1

The raw samples are reordered by the orientation's permutation before
being encoded. A row pair stops when the current orientation cannot be
satisfied; both cursors must then sit exactly on their row lengths.

The walk is a pure function of (grid, scheme): no randomness, no
hashing order, no locale dependence.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import NamedTuple, Optional

from shared.logger import GlyphLogger

from glyphweave.core.errors import WeaveStructureError
from glyphweave.core.models import (
    GlyphGrid,
    GlyphVertex,
    Orientation,
    TrigramPlacement,
    TrigramToken,
    WeaveScheme,
    trigram_value,
)

logger = GlyphLogger("glyphweave.weaver")


class _WeaveStep(NamedTuple):
    """Raw record of one trigram read, before model construction."""

    orientation: Orientation
    row_pair: int
    top_index: int
    bottom_index: int
    vertices: tuple[tuple[int, int, int], tuple[int, int, int], tuple[int, int, int]]
    order: tuple[int, int, int]


def _walk(grid: GlyphGrid, scheme: WeaveScheme) -> Iterator[_WeaveStep]:
    """Yield one step per trigram, validating every row pair.

    Raises:
        WeaveStructureError: For an odd row count (before any step is
            yielded) or a row pair with unconsumed glyphs.
    """
    if grid.height % 2 != 0:
        raise WeaveStructureError.odd_rows(grid.message_id, grid.height)

    for row in range(0, grid.height, 2):
        top = grid.rows[row]
        bottom = grid.rows[row + 1]
        t = 0
        b = 0
        orientation = scheme.start

        while t < len(top) or b < len(bottom):
            if orientation is Orientation.DOWN:
                if t + 1 >= len(top) or b >= len(bottom):
                    break
                vertices = (
                    (row, t, top[t]),
                    (row, t + 1, top[t + 1]),
                    (row + 1, b, bottom[b]),
                )
                step = _WeaveStep(orientation, row, t, b, vertices, scheme.down.indices)
                t += 2
                b += 1
            else:
                if b + 1 >= len(bottom) or t >= len(top):
                    break
                vertices = (
                    (row + 1, b, bottom[b]),
                    (row + 1, b + 1, bottom[b + 1]),
                    (row, t, top[t]),
                )
                step = _WeaveStep(orientation, row, t, b, vertices, scheme.up.indices)
                b += 2
                t += 1

            yield step
            orientation = orientation.flipped

        if t != len(top) or b != len(bottom):
            raise WeaveStructureError.unconsumed(
                grid.message_id,
                row,
                top_consumed=t,
                top_length=len(top),
                bottom_consumed=b,
                bottom_length=len(bottom),
            )


def _token_from_step(
    message_id: int,
    index: int,
    step: _WeaveStep,
    with_placement: bool,
) -> TrigramToken:
    ordered = [step.vertices[i] for i in step.order]
    placement: Optional[TrigramPlacement] = None
    if with_placement:
        a, b, c = (GlyphVertex(row=r, column=col, glyph=g) for r, col, g in step.vertices)
        lookup = (a, b, c)
        placement = TrigramPlacement(
            vertex_a=a,
            vertex_b=b,
            vertex_c=c,
            first=lookup[step.order[0]],
            second=lookup[step.order[1]],
            third=lookup[step.order[2]],
        )

    return TrigramToken(
        message_id=message_id,
        index=index,
        orientation=step.orientation,
        row_pair=step.row_pair,
        top_index=step.top_index,
        bottom_index=step.bottom_index,
        first=ordered[0][2],
        second=ordered[1][2],
        third=ordered[2][2],
        placement=placement,
    )


def weave(
    grid: GlyphGrid,
    scheme: Optional[WeaveScheme] = None,
    *,
    with_placement: bool = True,
) -> list[TrigramToken]:
    """Weave a grid into trigram tokens.

    Args:
        grid: Grid with an even number of rows.
        scheme: Weave scheme; the canonical scheme when ``None``.
        with_placement: Attach exact source coordinates to every token.

    Returns:
        Tokens in weave order, indexed from 0 across the whole message.

    Raises:
        WeaveStructureError: If the grid cannot be fully woven. No
            tokens are returned for a failing grid.
    """
    scheme = scheme or WeaveScheme.canonical()
    steps = list(_walk(grid, scheme))
    tokens = [
        _token_from_step(grid.message_id, index, step, with_placement)
        for index, step in enumerate(steps)
    ]
    logger.debug(
        f"Message {grid.message_id}: {len(tokens)} trigrams "
        f"(scheme {scheme.label})"
    )
    return tokens


def weave_values(grid: GlyphGrid, scheme: Optional[WeaveScheme] = None) -> list[int]:
    """Weave a grid straight to token values, skipping token models."""
    scheme = scheme or WeaveScheme.canonical()
    values: list[int] = []
    for step in _walk(grid, scheme):
        g = [step.vertices[i][2] for i in step.order]
        values.append(trigram_value(g[0], g[1], g[2]))
    return values


def weave_corpus(
    grids: Iterable[GlyphGrid],
    scheme: Optional[WeaveScheme] = None,
    *,
    with_placement: bool = True,
) -> dict[int, list[TrigramToken]]:
    """Weave every grid, keyed by message id in input order."""
    return {
        grid.message_id: weave(grid, scheme, with_placement=with_placement)
        for grid in grids
    }


def concatenate(streams: Mapping[int, list[TrigramToken]] | Iterable[list[TrigramToken]]) -> list[TrigramToken]:
    """Join per-message token streams into one stream, in order."""
    parts = streams.values() if isinstance(streams, Mapping) else streams
    combined: list[TrigramToken] = []
    for part in parts:
        combined.extend(part)
    return combined


def find_contiguous_schemes(
    grids: Iterable[GlyphGrid],
    low: int = 0,
    high: int = 82,
) -> list[WeaveScheme]:
    """Return every scheme whose corpus-wide value set is exactly low..high.

    Searches all 36 down x up permutation pairs.
    """
    grid_list = list(grids)
    target = set(range(low, high + 1))
    matches: list[WeaveScheme] = []

    for scheme in WeaveScheme.all_schemes():
        values: set[int] = set()
        for grid in grid_list:
            values.update(weave_values(grid, scheme))
        if values == target:
            matches.append(scheme)

    logger.info(
        f"Scheme search: {len(matches)} of 36 schemes cover {low}..{high}"
    )
    return matches
