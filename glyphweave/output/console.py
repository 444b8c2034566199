"""
GlyphWeave Console Output
==========================

Rich-based presentation of GlyphWeave results: message listings, token
tables, transition-graph metrics, clusters, alignments, scheme search
results and the full corpus report, all rendered through
:class:`shared.console.GlyphConsole`. Mesh layouts render as plain
text so they can be piped.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from rich.panel import Panel
from rich.text import Text

from shared.console import GlyphConsole

from glyphweave.core.models import (
    AlignmentResult,
    AlignmentSummary,
    ClusterSummary,
    CorpusReport,
    GlyphGrid,
    GlyphLayout,
    GraphSummary,
    Orientation,
    TransitionClusterAnalysis,
    TrigramToken,
    WeaveScheme,
)

_MAX_TOKEN_ROWS = 200
_MAX_CLUSTERS = 15


def _ratio(correct: int, total: int) -> str:
    if total == 0:
        return "0/0"
    return f"{correct}/{total} ({100.0 * correct / total:.1f}%)"


def _fmt_metric(value: Optional[float]) -> str:
    if value is None:
        return "-"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}"


def layout_ascii(layout: GlyphLayout) -> str:
    """Rows as digit strings, odd rows indented one space."""
    return "\n".join(
        (" " if r % 2 == 1 else "") + line for r, line in enumerate(layout.lines)
    )


def layout_trigram_lines(layout: GlyphLayout) -> str:
    """One ``row,column: base5 -> value`` line per mesh trigram."""
    return "\n".join(
        f"{t.row},{t.column}: {t.base5} -> {t.value}" for t in layout.trigrams
    )


class GlyphWeaveConsoleOutput:
    """Console renderer for GlyphWeave analysis results.

    Usage::

        output = GlyphWeaveConsoleOutput()
        output.display_report(report)
    """

    def __init__(self, console: GlyphConsole | None = None) -> None:
        self.console = console or GlyphConsole()

    # ================================================================== #
    #  Messages & tokens
    # ================================================================== #

    def display_messages(self, grids: Sequence[GlyphGrid]) -> None:
        self.console.section("Messages")
        self.console.table(
            f"{len(grids)} messages",
            ["ID", "Rows", "Width", "Glyphs"],
            [(g.message_id, g.height, g.width, g.glyph_count) for g in grids],
            justify=["right", "right", "right", "right"],
        )

    def display_tokens(
        self,
        message_id: int,
        tokens: Sequence[TrigramToken],
        scheme: WeaveScheme,
    ) -> None:
        """Token table: index, orientation, row pair, base-5 and value."""
        self.console.section(f"Message {message_id} -- scheme {scheme.label}")

        rows = []
        for token in tokens[:_MAX_TOKEN_ROWS]:
            style = "glyph.down" if token.orientation is Orientation.DOWN else "glyph.up"
            rows.append(
                (
                    token.index,
                    f"[{style}]{token.orientation.value}[/{style}]",
                    f"{token.top_row}/{token.bottom_row}",
                    token.base5,
                    token.value,
                )
            )

        caption = None
        if len(tokens) > _MAX_TOKEN_ROWS:
            caption = f"showing {_MAX_TOKEN_ROWS} of {len(tokens)} tokens"

        self.console.table(
            f"{len(tokens)} trigrams",
            ["#", "Orientation", "Rows", "Base-5", "Value"],
            rows,
            caption=caption,
            justify=["right", "left", "center", "center", "right"],
        )

    # ================================================================== #
    #  Graph & clusters
    # ================================================================== #

    def display_graph(self, summary: GraphSummary) -> None:
        self.console.section("Transition Graph")
        pairs: list[tuple[str, object]] = [
            ("Nodes", summary.node_count),
            ("Edges", summary.edge_count),
            ("Transitions", summary.total_transitions),
            ("Sources", len(summary.sources)),
            ("Sinks", len(summary.sinks)),
            ("Hubs", summary.hub_count),
            ("Top hubs", ", ".join(str(h) for h in summary.top_hubs) or "-"),
            ("SCCs", summary.component_count),
            ("Largest SCC", summary.largest_component_size),
        ]
        for name, value in summary.topology.items():
            pairs.append((name.replace("_", " ").capitalize(), _fmt_metric(value)))
        self.console.key_values("Graph metrics", pairs)

    def display_clusters(self, analysis: TransitionClusterAnalysis) -> None:
        self.console.section(f"Clusters (edge weight >= {analysis.min_edge_weight})")
        rows = [
            (rank, len(members), " ".join(str(m) for m in members))
            for rank, members in enumerate(analysis.clusters[:_MAX_CLUSTERS], start=1)
        ]
        self.console.table(
            f"{analysis.cluster_count} clusters, "
            f"{analysis.singleton_count} singletons",
            ["#", "Size", "Members"],
            rows,
            justify=["right", "right", "left"],
        )

    def display_cluster_summaries(self, summaries: Sequence[ClusterSummary]) -> None:
        self.console.table(
            "Clusters by weight floor",
            ["Min weight", "Clusters", "Largest", "Singletons"],
            [
                (s.min_edge_weight, s.cluster_count, s.largest_cluster_size, s.singleton_count)
                for s in summaries
            ],
            justify=["right", "right", "right", "right"],
        )

    # ================================================================== #
    #  Alignment
    # ================================================================== #

    def display_alignment(
        self,
        summary: AlignmentSummary,
        result: Optional[AlignmentResult] = None,
    ) -> None:
        title = f"Alignment {summary.message_a} / {summary.message_b}"
        if summary.anchor:
            title += (
                f" -- anchor {summary.anchor} at "
                f"{summary.anchor_index_a}/{summary.anchor_index_b}"
            )
        self.console.section(title)
        self.console.key_values(
            "Alignment metrics",
            [
                ("Score", summary.score),
                ("Matches", summary.match_count),
                ("Mismatches", summary.mismatch_count),
                ("Gaps", summary.gap_count),
                ("Mappings", summary.mappings),
                ("Conflicts", summary.conflicts),
            ],
        )
        if result is not None:
            self.console.print(self._alignment_strip(result))

    @staticmethod
    def _alignment_strip(result: AlignmentResult) -> Panel:
        top = Text()
        bottom = Text()
        for step in result.steps:
            a = "--" if step.value_a is None else f"{step.value_a:>2}"
            b = "--" if step.value_b is None else f"{step.value_b:>2}"
            style = "green" if step.is_match else ("dim" if step.is_gap else "yellow")
            top.append(f"{a} ", style=style)
            bottom.append(f"{b} ", style=style)
        return Panel(Text.assemble(top, "\n", bottom), title="A / B", border_style="bright_cyan")

    def display_alignments(self, summaries: Sequence[AlignmentSummary]) -> None:
        self.console.table(
            "Anchored alignments",
            ["Pair", "Score", "Matches", "Gaps", "Mappings", "Conflicts"],
            [
                (
                    f"{s.message_a}/{s.message_b}",
                    s.score,
                    s.match_count,
                    s.gap_count,
                    s.mappings,
                    s.conflicts,
                )
                for s in summaries
            ],
            justify=["left", "right", "right", "right", "right", "right"],
        )

    # ================================================================== #
    #  Schemes
    # ================================================================== #

    def display_schemes(self, matches: Sequence[WeaveScheme], low: int, high: int) -> None:
        self.console.section("Scheme Search")
        if not matches:
            self.console.warning(f"No scheme yields exactly the values {low}..{high}")
            return
        self.console.table(
            f"{len(matches)} of 36 schemes cover {low}..{high}",
            ["Scheme", "Down", "Up", "Start"],
            [(s.label, s.down.label, s.up.label, s.start.value) for s in matches],
        )

    # ================================================================== #
    #  Full report
    # ================================================================== #

    def display_report(self, report: CorpusReport) -> None:
        self.console.section("Corpus")
        self.console.print(
            Panel(
                f"[bright_white]Scheme:[/bright_white] {report.scheme}\n"
                f"[bright_white]Messages:[/bright_white] {len(report.messages)}\n"
                f"[bright_white]Tokens:[/bright_white] {report.token_count}\n"
                f"[bright_white]Distinct values:[/bright_white] {report.unique_values}\n"
                f"[bright_white]Range:[/bright_white] "
                f"{report.value_min}..{report.value_max} "
                f"({'contiguous' if report.contiguous else 'with gaps'})",
                title="Summary",
                border_style="bright_cyan",
            )
        )

        self.console.table(
            "Messages",
            ["ID", "Rows", "Tokens", "Unique", "Sum", "First", "Repeats"],
            [
                (
                    m.message_id,
                    m.height,
                    m.token_count,
                    m.unique_count,
                    m.value_sum,
                    "-" if m.first_value is None else m.first_value,
                    "yes" if m.adjacent_repeats else "no",
                )
                for m in report.messages
            ],
            justify=["right"] * 6 + ["center"],
        )

        if report.graph is not None:
            self.display_graph(report.graph)
        if report.clusters:
            self.display_cluster_summaries(report.clusters)
        if report.alignments:
            self.console.section("Alignment")
            self.display_alignments(report.alignments)

        if report.markov is not None:
            self.console.section("Predictability")
            rows = [
                ("Baseline", _ratio(report.markov.baseline_correct, report.markov.baseline_total)),
                ("Order-1 in-sample", _ratio(report.markov.order1_correct, report.markov.order1_total)),
                ("Order-2 in-sample", _ratio(report.markov.order2_correct, report.markov.order2_total)),
                ("Order-2 contexts", report.markov.order2_contexts),
                ("Deterministic order-2", report.markov.order2_deterministic),
            ]
            if report.leave_one_out is not None:
                loo = report.leave_one_out
                rows.append(("Order-1 held-out", _ratio(loo.order1_correct, loo.order1_total)))
                rows.append(("Order-2 held-out", _ratio(loo.order2_correct, loo.order2_total)))
            if report.smoothed is not None:
                sm = report.smoothed
                rows.append(("Order-1 smoothed", _ratio(sm.order1_correct, sm.order1_total)))
                rows.append(("Order-2 smoothed", _ratio(sm.order2_correct, sm.order2_total)))
            self.console.key_values("Markov prediction", rows)

        self.console.blank()
        self.console.success(f"Analysis complete in {report.elapsed_seconds:.2f}s")
