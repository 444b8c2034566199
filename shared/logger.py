"""
GlyphWeave Structured Logger
=============================

Provides :class:`GlyphLogger`, a logging facade that emits human-friendly
Rich console output on stderr and, optionally, machine-parseable JSON
lines to a rotating log file.

Every record carries the component name (``"glyphweave.graph"``), the
active operation (``"weave"``, ``"clusters"``...) and, when bound, the
message id being processed.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_ROOT_NAME = "glyphweave"


# ========================== JSON Formatter =================================


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object.

    Output fields::

        {
          "timestamp": "...",
          "level": "INFO",
          "logger": "glyphweave.graph",
          "message": "...",
          "component": "graph",
          "operation": "clusters",
          "message_id": 3,
          "extra": { ... }
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in ("component", "operation", "message_id"):
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val

        extra = getattr(record, "glyph_extra", None)
        if extra:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


# ========================== Configuration ==================================


def configure_logging(
    *,
    log_level: str = "INFO",
    log_file: str | Path | None = None,
    json_logs: bool = False,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
    console_output: bool = True,
) -> logging.Logger:
    """Install handlers on the ``glyphweave`` root logger.

    Component loggers created by :class:`GlyphLogger` propagate to this
    root, so handlers are configured once per process (normally by the
    CLI) rather than per module.

    Args:
        log_level:       Minimum severity (DEBUG, INFO, WARNING, ERROR).
        log_file:        Rotating log file path; ``None`` disables it.
        json_logs:       Emit JSON lines to the file instead of text.
        max_bytes:       File size before rotation (default 10 MiB).
        backup_count:    Rotated files to keep.
        console_output:  Attach the Rich stderr handler.

    Returns:
        The configured root logger.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(level)
    root.propagate = False
    root.handlers.clear()

    if console_output:
        handler = RichHandler(
            console=Console(theme=_LOG_THEME, stderr=True),
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            markup=False,
            level=level,
        )
        root.addHandler(handler)

    if log_file is not None:
        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(file_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        fh.setLevel(level)
        if json_logs:
            fh.setFormatter(_JSONFormatter())
        else:
            fh.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%dT%H:%M:%S%z",
                )
            )
        root.addHandler(fh)

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    return root


# ========================== GlyphLogger ====================================


class GlyphLogger:
    """Context-aware logger bound to one GlyphWeave component.

    Usage::

        log = GlyphLogger("glyphweave.graph")
        log.info("Graph built")
        with log.operation("clusters"):
            log.debug("Floor %d", 2)
        with log.bind_message(3):
            log.warning("Anchor missing")

    Extra keyword arguments become structured ``extra`` fields in JSON
    output.

    Args:
        name: Dotted logger name under the ``glyphweave`` root.
    """

    def __init__(self, name: str) -> None:
        if not name.startswith(_ROOT_NAME):
            name = f"{_ROOT_NAME}.{name}"
        self._name = name
        self._component = name.rsplit(".", 1)[-1]
        self._operation: Optional[str] = None
        self._message_id: Optional[int] = None
        self._logger = logging.getLogger(name)

    # ------------------------------------------------------------------ #
    #  Context scopes
    # ------------------------------------------------------------------ #

    class _Scope:
        """Temporarily set one context attribute on the parent logger."""

        def __init__(self, parent: GlyphLogger, attr: str, value: Any) -> None:
            self._parent = parent
            self._attr = attr
            self._value = value
            self._prev: Any = None

        def __enter__(self) -> GlyphLogger:
            self._prev = getattr(self._parent, self._attr)
            setattr(self._parent, self._attr, self._value)
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            setattr(self._parent, self._attr, self._prev)

    def operation(self, name: str) -> _Scope:
        """Tag every record inside the ``with`` block with *name*."""
        return self._Scope(self, "_operation", name)

    def bind_message(self, message_id: int) -> _Scope:
        """Tag every record inside the ``with`` block with a message id."""
        return self._Scope(self, "_message_id", message_id)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        extra = kwargs.pop("extra", {}) or {}
        standard_keys = {"exc_info", "stack_info", "stacklevel"}
        glyph_extra = {
            key: kwargs.pop(key) for key in list(kwargs) if key not in standard_keys
        }

        extra["component"] = self._component
        extra["operation"] = self._operation
        extra["message_id"] = self._message_id
        if glyph_extra:
            extra["glyph_extra"] = glyph_extra

        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **self._enrich(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._enrich(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._enrich(kwargs))

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **self._enrich(kwargs))

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an ERROR-level message with the active traceback."""
        kwargs.setdefault("exc_info", True)
        self._logger.error(msg, *args, **self._enrich(kwargs))

    # ------------------------------------------------------------------ #
    #  Timing helper
    # ------------------------------------------------------------------ #

    class _TimingContext:
        """Log start and elapsed time of a block."""

        def __init__(self, parent: GlyphLogger, label: str) -> None:
            self._parent = parent
            self._label = label
            self._start: float = 0.0
            self.elapsed: float = 0.0

        def __enter__(self) -> GlyphLogger._TimingContext:
            self._start = time.perf_counter()
            self._parent.debug(f"Started: {self._label}")
            return self

        def __exit__(self, *exc: Any) -> None:
            self.elapsed = time.perf_counter() - self._start
            self._parent.info(f"Completed: {self._label} ({self.elapsed:.3f} sec)")

    def timed(self, label: str) -> _TimingContext:
        """Context manager logging how long *label* took.

        Usage::

            with log.timed("transition graph"):
                analysis = analyze_transition_graph(stream)
        """
        return self._TimingContext(self, label)

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._name

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger
