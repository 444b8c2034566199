"""
GlyphWeave Console Interface
=============================

Rich-powered console abstraction giving every GlyphWeave command the
same presentation: banner, section rules, status-coloured messages,
tables and status spinners.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

import datetime as _dt
from contextlib import contextmanager
from typing import Any, Generator, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_GLYPH_THEME = Theme(
    {
        "glyph.banner": "bold bright_cyan",
        "glyph.section": "bold bright_magenta",
        "glyph.success": "bold green",
        "glyph.warning": "bold yellow",
        "glyph.error": "bold red",
        "glyph.info": "bold bright_blue",
        "glyph.dim": "dim white",
        "glyph.highlight": "bold bright_white",
        "glyph.down": "bold bright_cyan",
        "glyph.up": "bold bright_magenta",
    }
)

_BANNER_ART = r"""[bright_cyan]
   _____ _             _   __        __
  / ____| |_   _ _ __ | |__\ \      / /__  __ ___   _____
 | |  __| | | | | '_ \| '_ \\ \ /\ / / _ \/ _` \ \ / / _ \
 | |_| || | |_| | |_) | | | |\ V  V /  __/ (_| |\ V /  __/
  \____|_|\__, | .__/|_| |_| \_/\_/ \___|\__,_| \_/ \___|
          |___/|_|
[/bright_cyan]"""

_TAGLINE = "Trigram weaving & structural analysis"


class GlyphConsole:
    """Unified console interface for GlyphWeave commands.

    Usage::

        con = GlyphConsole()
        con.banner()
        con.section("Transition Graph")
        con.success("Corpus loaded")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (library / test mode).
            record: Enable Rich recording for text export.
        """
        self._console = Console(
            theme=_GLYPH_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner & sections
    # ------------------------------------------------------------------ #

    def banner(self, version: str = "1.0.0") -> None:
        """Display the GlyphWeave banner."""
        now = _dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        subtitle = (
            f"[glyph.highlight]{_TAGLINE}[/glyph.highlight]\n"
            f"[glyph.dim]Version: {version}  |  {now}[/glyph.dim]"
        )
        self._console.print(
            Panel(
                Align.center(Text.from_markup(_BANNER_ART + "\n" + subtitle)),
                border_style="bright_cyan",
                padding=(0, 2),
            )
        )

    def section(self, title: str) -> None:
        """Print a section header rule."""
        self._console.rule(f"  {title}  ", style="glyph.section", characters="─")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Messages
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(f"[glyph.success][✔] SUCCESS:[/glyph.success] {message}")

    def warning(self, message: str) -> None:
        self._console.print(f"[glyph.warning][⚠] WARNING:[/glyph.warning] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[glyph.error][✘] ERROR:[/glyph.error] {message}")

    def info(self, message: str) -> None:
        self._console.print(f"[glyph.info][ℹ] INFO:[/glyph.info] {message}")

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
        justify: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Row tuples; each cell is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
            justify:  Optional per-column justification.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            just = justify[idx] if justify and idx < len(justify) else "left"
            tbl.add_column(col_name, style=style, justify=just)  # type: ignore[arg-type]

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    def key_values(self, title: str, pairs: Sequence[tuple[str, Any]]) -> None:
        """Render a two-column metric table."""
        self.table(title, ["Metric", "Value"], pairs, styles=["glyph.dim", "glyph.highlight"])

    # ------------------------------------------------------------------ #
    #  Status spinner
    # ------------------------------------------------------------------ #

    @contextmanager
    def status(self, message: str = "Working...") -> Generator[Any, None, None]:
        """Context manager showing a spinner while a block runs."""
        with self._console.status(
            f"[glyph.info]{message}[/glyph.info]",
            spinner="dots",
            spinner_style="bright_cyan",
        ) as status_obj:
            yield status_obj

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Export recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
