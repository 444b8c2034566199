"""
GlyphWeave Data Models
=======================

Pydantic-based data models for the GlyphWeave trigram analysis engine:
glyph grids, weave schemes, trigram tokens with their grid placement,
transition-graph and cluster analyses, alignments, predictor statistics,
and the corpus-level report produced by the engine.

Every model that represents a computed result is frozen. Analyses
allocate fresh models per call and never mutate their inputs.

Trigram encoding:
    A trigram is three glyphs (g1, g2, g3), each in [0, 4], read as a
    three-digit base-5 number:

        value = g1 * 25 + g2 * 5 + g3        (0 <= value <= 124)

References:
    - Pydantic v2 Documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from glyphweave.core.errors import GridValidationError

GLYPH_MIN = 0
GLYPH_MAX = 4
LINE_BREAK_GLYPH = "5"


# ---------------------------------------------------------------------------
#  Trigram encoding
# ---------------------------------------------------------------------------


def trigram_value(first: int, second: int, third: int) -> int:
    """Numeric value of a trigram read as a base-5 number."""
    return first * 25 + second * 5 + third


def trigram_base5(first: int, second: int, third: int) -> str:
    """Base-5 digit string of a trigram, e.g. ``(2, 3, 3) -> "233"``."""
    return f"{first}{second}{third}"


# ---------------------------------------------------------------------------
#  Enumerations
# ---------------------------------------------------------------------------


class Orientation(str, enum.Enum):
    """Which row of a pair contributes two glyphs to a trigram.

    DOWN samples two glyphs from the top row and one from the bottom
    row; UP samples two from the bottom row and one from the top row.
    """

    DOWN = "down"
    UP = "up"

    @property
    def flipped(self) -> Orientation:
        return Orientation.UP if self is Orientation.DOWN else Orientation.DOWN


# ---------------------------------------------------------------------------
#  Glyph Grid
# ---------------------------------------------------------------------------


class GlyphGrid(BaseModel):
    """A validated, immutable grid of glyph rows for a single message.

    Rows may differ in length. Every row is non-empty and every glyph
    is an integer in [0, 4].

    Attributes:
        message_id: Identifier of the message this grid belongs to.
        rows: Glyph rows, top to bottom.
    """

    model_config = ConfigDict(frozen=True)

    message_id: int = 0
    rows: tuple[tuple[int, ...], ...]

    @model_validator(mode="after")
    def _check_rows(self) -> GlyphGrid:
        for r, row in enumerate(self.rows):
            if not row:
                raise GridValidationError(
                    "empty row", message_id=self.message_id, row=r
                )
            for c, glyph in enumerate(row):
                if glyph < GLYPH_MIN or glyph > GLYPH_MAX:
                    raise GridValidationError(
                        f"invalid glyph {glyph}",
                        message_id=self.message_id,
                        row=r,
                        column=c,
                    )
        return self

    @classmethod
    def from_lines(
        cls,
        lines: list[str] | tuple[str, ...],
        message_id: int = 0,
    ) -> GlyphGrid:
        """Build a grid from digit-string rows.

        Lines are stripped, the out-of-band line-break glyph ``'5'`` is
        removed, and lines left empty are dropped. Every remaining
        character must be a digit ``'0'``-``'4'``.

        Raises:
            GridValidationError: On any other character.
        """
        normalized = [
            line.strip().replace(LINE_BREAK_GLYPH, "") for line in lines
        ]
        normalized = [line for line in normalized if line]

        rows: list[tuple[int, ...]] = []
        for r, line in enumerate(normalized):
            glyphs: list[int] = []
            for c, ch in enumerate(line):
                if ch < "0" or ch > "4":
                    raise GridValidationError(
                        f"invalid glyph '{ch}'",
                        message_id=message_id,
                        row=r,
                        column=c,
                    )
                glyphs.append(ord(ch) - ord("0"))
            rows.append(tuple(glyphs))

        return cls(message_id=message_id, rows=tuple(rows))

    @classmethod
    def from_digit_string(
        cls,
        digits: str,
        message_id: int = 0,
        line_break: str = LINE_BREAK_GLYPH,
    ) -> GlyphGrid:
        """Build a grid from one digit string with embedded row breaks.

        Consecutive break tokens do not produce empty rows.
        """
        segments = [s for s in digits.split(line_break) if s]
        return cls.from_lines(segments, message_id=message_id)

    # -- Accessors --

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        """Length of the longest row."""
        return max((len(row) for row in self.rows), default=0)

    @property
    def glyph_count(self) -> int:
        return sum(len(row) for row in self.rows)

    @property
    def lines(self) -> tuple[str, ...]:
        """Rows rendered back to digit strings."""
        return tuple("".join(str(g) for g in row) for row in self.rows)

    def row(self, index: int) -> tuple[int, ...]:
        return self.rows[index]

    def glyph(self, row: int, column: int) -> int:
        return self.rows[row][column]


# ---------------------------------------------------------------------------
#  Weave Scheme
# ---------------------------------------------------------------------------


class Permutation(BaseModel):
    """Ordering of the three sampled source positions {0, 1, 2}.

    ``first``, ``second`` and ``third`` name which raw sample (0 = A,
    1 = B, 2 = C) lands in each component of the token.
    """

    model_config = ConfigDict(frozen=True)

    first: int = Field(..., ge=0, le=2)
    second: int = Field(..., ge=0, le=2)
    third: int = Field(..., ge=0, le=2)

    @model_validator(mode="after")
    def _check_distinct(self) -> Permutation:
        if {self.first, self.second, self.third} != {0, 1, 2}:
            raise ValueError(
                f"({self.first}, {self.second}, {self.third}) "
                f"is not a permutation of 0, 1, 2"
            )
        return self

    @classmethod
    def all(cls) -> tuple[Permutation, ...]:
        """The six permutations, in lexicographic order."""
        return _PERMUTATIONS

    @classmethod
    def from_label(cls, label: str) -> Permutation:
        """Parse a label such as ``"102"``."""
        if len(label) != 3 or not label.isdigit():
            raise ValueError(f"Invalid permutation label '{label}'")
        return cls(first=int(label[0]), second=int(label[1]), third=int(label[2]))

    @property
    def label(self) -> str:
        return f"{self.first}{self.second}{self.third}"

    @property
    def indices(self) -> tuple[int, int, int]:
        return (self.first, self.second, self.third)

    def apply(self, a: int, b: int, c: int) -> tuple[int, int, int]:
        """Reorder the raw samples ``(a, b, c)`` into token order."""
        source = (a, b, c)
        return (source[self.first], source[self.second], source[self.third])


_PERMUTATIONS: tuple[Permutation, ...] = tuple(
    Permutation(first=f, second=s, third=t)
    for f, s, t in (
        (0, 1, 2),
        (0, 2, 1),
        (1, 0, 2),
        (1, 2, 0),
        (2, 0, 1),
        (2, 1, 0),
    )
)


class WeaveScheme(BaseModel):
    """Permutation pair and starting orientation controlling a weave.

    Attributes:
        down: Permutation applied to DOWN-oriented samples.
        up: Permutation applied to UP-oriented samples.
        start: Orientation of the first trigram in every row pair.
    """

    model_config = ConfigDict(frozen=True)

    down: Permutation
    up: Permutation
    start: Orientation = Orientation.DOWN

    @classmethod
    def canonical(cls) -> WeaveScheme:
        """Down = identity, up = first two swapped, start DOWN."""
        return _CANONICAL_SCHEME

    @classmethod
    def all_schemes(cls) -> list[WeaveScheme]:
        """All 36 down x up combinations starting DOWN, down-major."""
        return [
            cls(down=down, up=up, start=Orientation.DOWN)
            for down in _PERMUTATIONS
            for up in _PERMUTATIONS
        ]

    @classmethod
    def from_label(cls, label: str) -> WeaveScheme:
        """Parse ``"012/102"`` (optionally ``"012/102/up"``)."""
        parts = label.strip().split("/")
        if len(parts) not in (2, 3):
            raise ValueError(f"Invalid scheme label '{label}'")
        start = Orientation(parts[2].lower()) if len(parts) == 3 else Orientation.DOWN
        return cls(
            down=Permutation.from_label(parts[0]),
            up=Permutation.from_label(parts[1]),
            start=start,
        )

    @property
    def label(self) -> str:
        base = f"{self.down.label}/{self.up.label}"
        if self.start is Orientation.UP:
            return f"{base}/up"
        return base

    def permutation_for(self, orientation: Orientation) -> Permutation:
        return self.down if orientation is Orientation.DOWN else self.up


_CANONICAL_SCHEME = WeaveScheme(
    down=Permutation(first=0, second=1, third=2),
    up=Permutation(first=1, second=0, third=2),
    start=Orientation.DOWN,
)


# ---------------------------------------------------------------------------
#  Trigram Tokens
# ---------------------------------------------------------------------------


class GlyphVertex(BaseModel):
    """A single glyph at an exact grid coordinate."""

    model_config = ConfigDict(frozen=True)

    row: int
    column: int
    glyph: int


class TrigramPlacement(BaseModel):
    """Grid coordinates behind a trigram token.

    ``vertex_a``/``vertex_b`` are the two glyphs read from the row
    contributing two samples (left, right) and ``vertex_c`` the single
    glyph from the other row. ``first``/``second``/``third`` are the
    same vertices in token-component order after the permutation.
    """

    model_config = ConfigDict(frozen=True)

    vertex_a: GlyphVertex
    vertex_b: GlyphVertex
    vertex_c: GlyphVertex
    first: GlyphVertex
    second: GlyphVertex
    third: GlyphVertex

    @property
    def vertices(self) -> tuple[GlyphVertex, GlyphVertex, GlyphVertex]:
        """Source vertices in geometric order (A, B, C)."""
        return (self.vertex_a, self.vertex_b, self.vertex_c)

    @property
    def coordinates(self) -> tuple[tuple[int, int], ...]:
        """``(row, column)`` of each token component, in token order."""
        return tuple((v.row, v.column) for v in (self.first, self.second, self.third))


class TrigramToken(BaseModel):
    """One woven trigram: the atomic analytical unit.

    Attributes:
        message_id: Message the token was woven from.
        index: Position within the message's token stream.
        orientation: DOWN or UP.
        row_pair: Index of the top row of the source row pair.
        top_index: Top-row cursor when the token was read.
        bottom_index: Bottom-row cursor when the token was read.
        first: First component glyph.
        second: Second component glyph.
        third: Third component glyph.
        placement: Exact source coordinates, when requested.
    """

    model_config = ConfigDict(frozen=True)

    message_id: int = 0
    index: int
    orientation: Orientation
    row_pair: int = 0
    top_index: int = 0
    bottom_index: int = 0
    first: int = Field(..., ge=GLYPH_MIN, le=GLYPH_MAX)
    second: int = Field(..., ge=GLYPH_MIN, le=GLYPH_MAX)
    third: int = Field(..., ge=GLYPH_MIN, le=GLYPH_MAX)
    placement: Optional[TrigramPlacement] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def value(self) -> int:
        return trigram_value(self.first, self.second, self.third)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def base5(self) -> str:
        return trigram_base5(self.first, self.second, self.third)

    @property
    def glyphs(self) -> tuple[int, int, int]:
        return (self.first, self.second, self.third)

    @property
    def top_row(self) -> int:
        return self.row_pair

    @property
    def bottom_row(self) -> int:
        return self.row_pair + 1


# ---------------------------------------------------------------------------
#  Mesh Layout
# ---------------------------------------------------------------------------


class GlyphCell(BaseModel):
    """A glyph positioned on the triangular display mesh."""

    model_config = ConfigDict(frozen=True)

    row: int
    column: int
    glyph: int = Field(..., ge=GLYPH_MIN, le=GLYPH_MAX)
    x: float
    y: float


class MeshTrigram(BaseModel):
    """Downward triangle read from two adjacent rows of the mesh.

    ``first`` and ``second`` are neighbouring glyphs of the top row at
    ``column`` and ``column + 1``; ``third`` is the glyph below them.
    Unlike woven tokens, mesh trigrams overlap.
    """

    model_config = ConfigDict(frozen=True)

    row: int
    column: int
    first: int = Field(..., ge=GLYPH_MIN, le=GLYPH_MAX)
    second: int = Field(..., ge=GLYPH_MIN, le=GLYPH_MAX)
    third: int = Field(..., ge=GLYPH_MIN, le=GLYPH_MAX)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def value(self) -> int:
        return trigram_value(self.first, self.second, self.third)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def base5(self) -> str:
        return trigram_base5(self.first, self.second, self.third)


class GlyphLayout(BaseModel):
    """Display geometry of one message.

    Attributes:
        message_id: Message the layout was built from.
        lines: Rows as digit strings.
        cells: Positioned glyphs, row-major.
        trigrams: Overlapping mesh trigrams, row-major (empty when
            trigram extraction is disabled).
        width: Extent along x, one column spacing past the last cell.
        height: Extent along y, one row spacing past the last row.
    """

    model_config = ConfigDict(frozen=True)

    message_id: int
    lines: list[str] = Field(default_factory=list)
    cells: list[GlyphCell] = Field(default_factory=list)
    trigrams: list[MeshTrigram] = Field(default_factory=list)
    width: float = 0.0
    height: float = 0.0

    def cell(self, row: int, column: int) -> Optional[GlyphCell]:
        """Cell at ``(row, column)``, or ``None`` outside the grid."""
        for cell in self.cells:
            if cell.row == row and cell.column == column:
                return cell
        return None


# ---------------------------------------------------------------------------
#  Graph Analyses
# ---------------------------------------------------------------------------


class TransitionGraphAnalysis(BaseModel):
    """Degree, hub and component structure of a transition graph.

    Attributes:
        graph: Source value -> destination value -> transition count.
        nodes: Every observed token value, ascending.
        sources: Nodes with in-degree 0, ascending.
        sinks: Nodes with out-degree 0, ascending.
        hubs: Nodes with out-degree >= threshold, by descending
            out-degree then ascending value.
        hub_threshold: Out-degree threshold used for ``hubs``.
        components: Strongly connected components, largest first.
        in_degrees: Distinct predecessors per node.
        out_degrees: Distinct successors per node.
    """

    model_config = ConfigDict(frozen=True)

    graph: dict[int, dict[int, int]]
    nodes: list[int]
    sources: list[int]
    sinks: list[int]
    hubs: list[int]
    hub_threshold: int
    components: list[list[int]]
    in_degrees: dict[int, int]
    out_degrees: dict[int, int]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        """Number of distinct directed edges."""
        return sum(len(edges) for edges in self.graph.values())

    @property
    def total_transitions(self) -> int:
        """Sum of all edge weights."""
        return sum(sum(edges.values()) for edges in self.graph.values())

    @property
    def component_count(self) -> int:
        return len(self.components)

    @property
    def largest_component_size(self) -> int:
        return max((len(c) for c in self.components), default=0)


class TransitionClusterAnalysis(BaseModel):
    """Undirected connectivity of a transition graph above a weight floor.

    Attributes:
        min_edge_weight: Edges lighter than this were dropped.
        adjacency: Undirected neighbour lists (ascending) for every node.
        clusters: Components with ascending members, ordered by
            descending size then ascending smallest member.
    """

    model_config = ConfigDict(frozen=True)

    min_edge_weight: int
    adjacency: dict[int, list[int]]
    clusters: list[list[int]]

    @property
    def cluster_sizes(self) -> list[int]:
        return [len(c) for c in self.clusters]

    @property
    def cluster_count(self) -> int:
        return len(self.clusters)

    @property
    def largest_cluster_size(self) -> int:
        return len(self.clusters[0]) if self.clusters else 0

    @property
    def singleton_count(self) -> int:
        return sum(1 for c in self.clusters if len(c) == 1)


# ---------------------------------------------------------------------------
#  Alignment
# ---------------------------------------------------------------------------


class AlignmentStep(BaseModel):
    """One column of an alignment; ``None`` on a side marks a gap."""

    model_config = ConfigDict(frozen=True)

    index_a: Optional[int] = None
    index_b: Optional[int] = None
    value_a: Optional[int] = None
    value_b: Optional[int] = None

    @property
    def is_gap(self) -> bool:
        return self.value_a is None or self.value_b is None

    @property
    def is_match(self) -> bool:
        return not self.is_gap and self.value_a == self.value_b

    def shifted(self, offset_a: int, offset_b: int) -> AlignmentStep:
        """Copy with present indices moved by the given offsets."""
        return AlignmentStep(
            index_a=None if self.index_a is None else self.index_a + offset_a,
            index_b=None if self.index_b is None else self.index_b + offset_b,
            value_a=self.value_a,
            value_b=self.value_b,
        )


class AlignmentResult(BaseModel):
    """Score and forward-ordered steps of an alignment."""

    model_config = ConfigDict(frozen=True)

    score: int
    steps: tuple[AlignmentStep, ...] = ()

    @property
    def match_count(self) -> int:
        return sum(1 for s in self.steps if s.is_match)

    @property
    def aligned_count(self) -> int:
        return sum(1 for s in self.steps if not s.is_gap)

    @property
    def gap_count(self) -> int:
        return sum(1 for s in self.steps if s.is_gap)

    @property
    def mismatch_count(self) -> int:
        return self.aligned_count - self.match_count


# ---------------------------------------------------------------------------
#  Predictor statistics
# ---------------------------------------------------------------------------


class MarkovStats(BaseModel):
    """In-sample accuracy of order-1/order-2 argmax prediction."""

    model_config = ConfigDict(frozen=True)

    baseline_correct: int = 0
    baseline_total: int = 0
    order1_correct: int = 0
    order1_total: int = 0
    order2_correct: int = 0
    order2_total: int = 0
    order1_contexts: int = 0
    order2_contexts: int = 0
    order2_deterministic: int = 0


class LeaveOneOutStats(BaseModel):
    """Held-out accuracy; ``seen`` counts contexts present in training."""

    model_config = ConfigDict(frozen=True)

    order1_correct: int = 0
    order1_seen: int = 0
    order1_total: int = 0
    order2_correct: int = 0
    order2_seen: int = 0
    order2_total: int = 0


class SmoothedStats(BaseModel):
    """Held-out accuracy of the interpolated add-k model."""

    model_config = ConfigDict(frozen=True)

    order1_correct: int = 0
    order1_total: int = 0
    order2_correct: int = 0
    order2_total: int = 0
    k: float
    lambda2: float
    lambda1: float
    lambda0: float


# ---------------------------------------------------------------------------
#  Corpus Report
# ---------------------------------------------------------------------------


class MessageSummary(BaseModel):
    """Per-message token statistics."""

    message_id: int
    height: int
    width: int
    glyph_count: int
    token_count: int
    unique_count: int
    value_sum: int
    first_value: Optional[int] = None
    adjacent_repeats: bool = False


class GraphSummary(BaseModel):
    """Headline metrics of the combined transition graph."""

    node_count: int
    edge_count: int
    total_transitions: int
    sources: list[int] = Field(default_factory=list)
    sinks: list[int] = Field(default_factory=list)
    hub_count: int = 0
    top_hubs: list[int] = Field(default_factory=list)
    component_count: int = 0
    largest_component_size: int = 0
    topology: dict[str, Optional[float]] = Field(default_factory=dict)


class ClusterSummary(BaseModel):
    """Cluster counts at one weight floor."""

    min_edge_weight: int
    cluster_count: int
    largest_cluster_size: int
    singleton_count: int
    largest_cluster: list[int] = Field(default_factory=list)


class AlignmentSummary(BaseModel):
    """Alignment of one message pair.

    ``anchor`` is empty and the anchor indices are ``None`` for a plain
    global alignment.
    """

    message_a: int
    message_b: int
    anchor: list[int] = Field(default_factory=list)
    anchor_index_a: Optional[int] = None
    anchor_index_b: Optional[int] = None
    score: int
    match_count: int
    mismatch_count: int
    gap_count: int
    mappings: int
    conflicts: int


class CorpusReport(BaseModel):
    """Complete result of an engine run over a message corpus.

    Attributes:
        scheme: Label of the weave scheme used.
        messages: Per-message summaries, by message id.
        token_count: Tokens across all messages.
        unique_values: Distinct token values across all messages.
        value_min: Smallest token value observed.
        value_max: Largest token value observed.
        contiguous: ``True`` when the values cover ``value_min..value_max``
            without gaps.
        graph: Combined transition-graph metrics.
        clusters: Cluster summaries per weight floor.
        alignments: Anchored alignments of the configured pairs.
        markov: In-sample predictor statistics.
        leave_one_out: Held-out predictor statistics.
        smoothed: Held-out interpolated predictor statistics.
        elapsed_seconds: Wall-clock duration of the run.
    """

    scheme: str
    messages: list[MessageSummary] = Field(default_factory=list)
    token_count: int = 0
    unique_values: int = 0
    value_min: Optional[int] = None
    value_max: Optional[int] = None
    contiguous: bool = False
    graph: Optional[GraphSummary] = None
    clusters: list[ClusterSummary] = Field(default_factory=list)
    alignments: list[AlignmentSummary] = Field(default_factory=list)
    markov: Optional[MarkovStats] = None
    leave_one_out: Optional[LeaveOneOutStats] = None
    smoothed: Optional[SmoothedStats] = None
    elapsed_seconds: float = 0.0
