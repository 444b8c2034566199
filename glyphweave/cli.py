"""
GlyphWeave CLI
===============

Click-based command-line interface for the GlyphWeave trigram analysis
engine. Every subcommand reads the message corpus named by ``--corpus``
(or ``GLYPHWEAVE_CORPUS``, or ``corpus_path`` in the configuration).

Usage::

    glyphweave --corpus data/messages.json list
    glyphweave weave -m 0
    glyphweave weave -m 0 --scheme 021/120
    glyphweave layout -m 0 --format trigrams
    glyphweave graph --hub-threshold 12
    glyphweave clusters --min-weight 3
    glyphweave align 0 1 --anchor 66,5
    glyphweave schemes
    glyphweave -o json -f report.json report

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import functools
import sys
from typing import Any, Callable, Optional

import click

from shared.config import GlyphConfig
from shared.console import GlyphConsole
from shared.logger import GlyphLogger, configure_logging

from glyphweave import __version__
from glyphweave.analyzers.sequence import as_values
from glyphweave.analyzers.weaver import concatenate, find_contiguous_schemes, weave
from glyphweave.collectors.message_store import MessageStore
from glyphweave.core.engine import GlyphWeaveEngine
from glyphweave.core.errors import GlyphWeaveError
from glyphweave.core.models import WeaveScheme
from glyphweave.output.console import (
    GlyphWeaveConsoleOutput,
    layout_ascii,
    layout_trigram_lines,
)
from glyphweave.output.report import GlyphWeaveReportGenerator

logger = GlyphLogger("glyphweave.cli")


# ===================================================================== #
#  Helpers
# ===================================================================== #


def _handles_errors(func: Callable[..., None]) -> Callable[..., None]:
    """Print GlyphWeave and file errors through the console and exit 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        ctx = click.get_current_context()
        try:
            func(*args, **kwargs)
        except (GlyphWeaveError, FileNotFoundError) as exc:
            logger.debug(f"{type(exc).__name__}: {exc}")
            ctx.obj["console"].error(str(exc))
            sys.exit(1)

    return wrapper


def _load_store(ctx: click.Context) -> MessageStore:
    if "store" not in ctx.obj:
        path = ctx.obj["corpus"] or ctx.obj["config"].glyphweave.corpus_path
        if not path:
            raise FileNotFoundError(
                "No corpus given. Use --corpus, GLYPHWEAVE_CORPUS or "
                "corpus_path in config.toml."
            )
        ctx.obj["store"] = MessageStore.from_json(path)
    return ctx.obj["store"]


def _parse_scheme(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[WeaveScheme]:
    if value is None:
        return None
    try:
        return WeaveScheme.from_label(value)
    except ValueError as exc:
        raise click.BadParameter(f"'{value}' is not a scheme label like 012/102") from exc


def _parse_anchor(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[list[int]]:
    if value is None:
        return None
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise click.BadParameter(f"'{value}' is not a comma-separated value list") from exc


def _emit(ctx: click.Context, payload: Any, report_type: str, render: Callable[[], None]) -> None:
    """Render to the console or emit JSON, and save to --output-file if set."""
    reporter: GlyphWeaveReportGenerator = ctx.obj["reporter"]
    console: GlyphConsole = ctx.obj["console"]
    output_file = ctx.obj["output_file"]

    if ctx.obj["output_format"] == "json" and not output_file:
        click.echo(reporter.dumps(payload, report_type))
        return

    if ctx.obj["output_format"] == "console":
        render()

    if output_file:
        path = reporter.generate_json(payload, output_file, report_type)
        console.success(f"JSON report saved to: {path}")


# ===================================================================== #
#  CLI Group
# ===================================================================== #


@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to GlyphWeave configuration file (TOML).",
)
@click.option(
    "--corpus",
    type=click.Path(dir_okay=False),
    envvar="GLYPHWEAVE_CORPUS",
    default=None,
    help="Message corpus JSON (id -> digit fragments).",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["console", "json"]),
    default="console",
    help="Output format.",
)
@click.option(
    "--output-file", "-f",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the result as a JSON report to this file.",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Suppress banner and informational output.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(__version__, prog_name="glyphweave")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[str],
    corpus: Optional[str],
    output: str,
    output_file: Optional[str],
    quiet: bool,
    verbose: bool,
) -> None:
    """GlyphWeave -- Trigram Weaving & Structural Analysis.

    Weave glyph grids into trigram streams and analyse their transition
    graphs, clusters, alignments and predictability.
    """
    ctx.ensure_object(dict)

    glyph_config = GlyphConfig.load(config)
    settings = glyph_config.global_settings

    configure_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
        console_output=not quiet,
    )

    ctx.obj["config"] = glyph_config
    ctx.obj["corpus"] = corpus
    ctx.obj["output_format"] = output
    ctx.obj["output_file"] = output_file
    ctx.obj["quiet"] = quiet

    console = GlyphConsole(quiet=quiet)
    ctx.obj["console"] = console
    ctx.obj["engine"] = GlyphWeaveEngine(glyph_config)
    ctx.obj["display"] = GlyphWeaveConsoleOutput(console)
    ctx.obj["reporter"] = GlyphWeaveReportGenerator()

    if not quiet and output == "console":
        console.banner(version=__version__)


# ===================================================================== #
#  Subcommands
# ===================================================================== #


@cli.command("list")
@click.pass_context
@_handles_errors
def list_messages(ctx: click.Context) -> None:
    """List corpus messages with their grid dimensions."""
    store = _load_store(ctx)
    grids = store.all()
    payload = [
        {
            "message_id": g.message_id,
            "height": g.height,
            "width": g.width,
            "glyph_count": g.glyph_count,
        }
        for g in grids
    ]
    _emit(ctx, payload, "messages", lambda: ctx.obj["display"].display_messages(grids))


@cli.command("weave")
@click.option("--message", "-m", "message_id", type=int, required=True, help="Message id.")
@click.option(
    "--scheme", "-s",
    callback=_parse_scheme,
    default=None,
    help="Weave scheme label, e.g. 012/102 (default from config).",
)
@click.pass_context
@_handles_errors
def weave_message(ctx: click.Context, message_id: int, scheme: Optional[WeaveScheme]) -> None:
    """Weave one message and show its trigram tokens."""
    engine: GlyphWeaveEngine = ctx.obj["engine"]
    scheme = scheme or engine.scheme
    grid = _load_store(ctx).get(message_id)
    tokens = weave(grid, scheme)

    _emit(
        ctx,
        {"message_id": message_id, "scheme": scheme.label, "tokens": tokens},
        "tokens",
        lambda: ctx.obj["display"].display_tokens(message_id, tokens, scheme),
    )


@cli.command("layout")
@click.option("--message", "-m", "message_id", type=int, required=True, help="Message id.")
@click.option(
    "--format", "-f", "fmt",
    type=click.Choice(["ascii", "json", "trigrams"], case_sensitive=False),
    default="ascii",
    show_default=True,
    help="Mesh rendering.",
)
@click.pass_context
@_handles_errors
def layout_command(ctx: click.Context, message_id: int, fmt: str) -> None:
    """Show one message on the triangular display mesh."""
    engine: GlyphWeaveEngine = ctx.obj["engine"]
    reporter: GlyphWeaveReportGenerator = ctx.obj["reporter"]
    layout = engine.layout(_load_store(ctx), message_id)

    renderers: dict[str, Callable[[], str]] = {
        "ascii": lambda: layout_ascii(layout),
        "trigrams": lambda: layout_trigram_lines(layout),
        "json": lambda: reporter.dumps(layout, "layout"),
    }
    _emit(ctx, layout, "layout", lambda: click.echo(renderers[fmt.lower()]()))


@cli.command("graph")
@click.option(
    "--hub-threshold",
    type=click.IntRange(min=0),
    default=None,
    help="Minimum out-degree for a hub (default from config).",
)
@click.pass_context
@_handles_errors
def graph_command(ctx: click.Context, hub_threshold: Optional[int]) -> None:
    """Transition-graph metrics of the whole corpus stream."""
    engine: GlyphWeaveEngine = ctx.obj["engine"]
    if hub_threshold is not None:
        engine.graph_analyzer.hub_threshold = hub_threshold

    stream = concatenate(engine.weave_corpus(_load_store(ctx)))
    summary = engine.graph_summary(stream)
    _emit(ctx, summary, "transition_graph", lambda: ctx.obj["display"].display_graph(summary))


@cli.command("clusters")
@click.option(
    "--min-weight",
    type=int,
    default=2,
    show_default=True,
    help="Drop transitions lighter than this weight.",
)
@click.pass_context
@_handles_errors
def clusters_command(ctx: click.Context, min_weight: int) -> None:
    """Undirected clusters of the corpus transition graph."""
    engine: GlyphWeaveEngine = ctx.obj["engine"]
    stream = concatenate(engine.weave_corpus(_load_store(ctx)))
    analysis = engine.graph_analyzer.clusters(stream, min_edge_weight=min_weight)
    payload = {
        "min_edge_weight": analysis.min_edge_weight,
        "cluster_count": analysis.cluster_count,
        "singleton_count": analysis.singleton_count,
        "clusters": analysis.clusters,
    }
    _emit(ctx, payload, "clusters", lambda: ctx.obj["display"].display_clusters(analysis))


@cli.command("align")
@click.argument("message_a", type=int)
@click.argument("message_b", type=int)
@click.option(
    "--anchor",
    callback=_parse_anchor,
    default=None,
    help="Comma-separated anchor values, e.g. 66,5 (default from config).",
)
@click.option(
    "--global", "global_only",
    is_flag=True,
    default=False,
    help="Plain global alignment without an anchor.",
)
@click.pass_context
@_handles_errors
def align_command(
    ctx: click.Context,
    message_a: int,
    message_b: int,
    anchor: Optional[list[int]],
    global_only: bool,
) -> None:
    """Align the token values of two messages."""
    engine: GlyphWeaveEngine = ctx.obj["engine"]
    store = _load_store(ctx)
    values_a = as_values(weave(store.get(message_a), engine.scheme, with_placement=False))
    values_b = as_values(weave(store.get(message_b), engine.scheme, with_placement=False))

    if global_only:
        anchor = []
    elif anchor is None:
        anchor = list(ctx.obj["config"].glyphweave.anchor)

    aligned = engine.align_pair(message_a, values_a, message_b, values_b, anchor=anchor)
    if aligned is None:
        ctx.obj["console"].error(
            f"Anchor {anchor} does not occur in both messages {message_a} and {message_b}."
        )
        sys.exit(1)

    result, summary = aligned
    _emit(
        ctx,
        {"summary": summary, "steps": result.steps},
        "alignment",
        lambda: ctx.obj["display"].display_alignment(summary, result),
    )


@cli.command("schemes")
@click.option("--low", type=int, default=None, help="Lowest value (default from config).")
@click.option("--high", type=int, default=None, help="Highest value (default from config).")
@click.pass_context
@_handles_errors
def schemes_command(ctx: click.Context, low: Optional[int], high: Optional[int]) -> None:
    """Search all 36 schemes for one yielding exactly low..high."""
    cfg = ctx.obj["config"].glyphweave
    low = cfg.value_low if low is None else low
    high = cfg.value_high if high is None else high

    matches = find_contiguous_schemes(_load_store(ctx).all(), low=low, high=high)
    payload = {"low": low, "high": high, "schemes": [s.label for s in matches]}
    _emit(
        ctx,
        payload,
        "schemes",
        lambda: ctx.obj["display"].display_schemes(matches, low, high),
    )


@cli.command("report")
@click.pass_context
@_handles_errors
def report_command(ctx: click.Context) -> None:
    """Run the full analysis pipeline over the corpus."""
    engine: GlyphWeaveEngine = ctx.obj["engine"]
    console: GlyphConsole = ctx.obj["console"]
    store = _load_store(ctx)

    with console.status("Analysing corpus..."):
        report = engine.analyze(store)

    _emit(ctx, report, "corpus_report", lambda: ctx.obj["display"].display_report(report))


def main() -> None:
    """Console-script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
