"""The logging sink: records to stdout, diagnostics to stderr.

Everything the client and fetch engine have to say goes through one
:class:`LogSink` at one of four :class:`Level` values. A sink built with
``quiet=True`` only lets warnings and errors through; ``verbose=True``
opens it down to debug. Retry notices and backoff sleeps are warnings,
terminal failures are errors, so both survive ``--quiet``.

Records are rendered in one of three :class:`OutputFormat` values. ``AUTO``
picks ``RICH`` for an interactive, colour-capable terminal and ``PLAIN``
otherwise. Colour is off when ``NO_COLOR`` is set or ``TERM=dumb``.

The CLI installs its sink with :func:`set_output`; library code calls
:func:`get_output`, which falls back to a default sink.
"""

from __future__ import annotations

import enum
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax


class OutputFormat(str, enum.Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class Level(enum.IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


# (prefix, rich style of the prefix, rich style of the message)
_DECORATION: dict[Level, tuple[str, str, str]] = {
    Level.DEBUG: ("[debug]", "dim", "dim"),
    Level.INFO: ("", "", ""),
    Level.WARNING: ("Warning:", "yellow", ""),
    Level.ERROR: ("Error:", "bold red", ""),
}


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_line(item: Any) -> str:
    """``id<TAB>type<TAB>attributes-json`` for a record, ``str()`` otherwise."""
    if not isinstance(item, dict):
        return str(item)
    attributes = json.dumps(item.get("attributes", {}), ensure_ascii=False, default=str)
    return f"{item.get('id', '')}\t{item.get('type', '')}\t{attributes}"


class LogSink:
    """Writes records and leveled diagnostics for one CLI run or library session.

    Args:
        format: How :meth:`print_records` renders data.
        no_color: Force colourless output.
        quiet: Only emit warnings and errors.
        verbose: Also emit debug messages. ``quiet`` takes precedence.
        timestamps: Prefix each diagnostic with an ISO-8601 UTC time.
        output_file: Write records to this path as JSON instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        timestamps: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        if quiet:
            self._threshold = Level.WARNING
        elif verbose:
            self._threshold = Level.DEBUG
        else:
            self._threshold = Level.INFO
        self._timestamps = timestamps
        self._output_file = Path(output_file) if output_file else None

        if format == OutputFormat.AUTO:
            interactive = _is_tty() and not self._no_color
            format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        self._format = format
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

        self._renderers: dict[OutputFormat, Callable[[Any], None]] = {
            OutputFormat.JSON: self._render_json,
            OutputFormat.PLAIN: self._render_plain,
            OutputFormat.RICH: self._render_rich,
        }

    @property
    def format(self) -> OutputFormat:
        return self._format

    def enabled(self, level: Level) -> bool:
        return level >= self._threshold

    # -- records ---------------------------------------------------------

    def print_records(self, data: Any) -> None:
        """Render one record or a list of records. ``None`` prints nothing."""
        if data is None:
            return
        if self._output_file is not None:
            self._output_file.write_text(_to_json(data) + "\n", encoding="utf-8")
            return
        self._renderers[self._format](data)

    def _render_json(self, data: Any) -> None:
        print(_to_json(data), flush=True)

    def _render_plain(self, data: Any) -> None:
        for item in data if isinstance(data, list) else [data]:
            print(_plain_line(item), flush=True)

    def _render_rich(self, data: Any) -> None:
        console = Console(file=sys.stdout, no_color=self._no_color, force_terminal=True)
        console.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))

    # -- diagnostics -----------------------------------------------------

    def log(self, level: Level, message: str) -> None:
        if not self.enabled(level):
            return
        prefix, prefix_style, style = _DECORATION[level]
        stamp = ""
        if self._timestamps:
            stamp = datetime.now(timezone.utc).isoformat(timespec="seconds") + " "

        if self._no_color:
            head = f"{prefix} " if prefix else ""
            print(f"{stamp}{head}{message}", file=sys.stderr, flush=True)
            return

        # Server text may contain square brackets.
        line = escape(message)
        if style:
            line = f"[{style}]{line}[/{style}]"
        if prefix:
            line = f"[{prefix_style}]{escape(prefix)}[/{prefix_style}] {line}"
        self._stderr.print(escape(stamp) + line, highlight=False)

    def debug(self, message: str) -> None:
        self.log(Level.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(Level.INFO, message)

    def warning(self, message: str) -> None:
        self.log(Level.WARNING, message)

    def error(self, message: str) -> None:
        self.log(Level.ERROR, message)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_sink: Optional[LogSink] = None


def get_output() -> LogSink:
    """Return the installed sink, creating a default one on first use."""
    global _sink
    if _sink is None:
        _sink = LogSink()
    return _sink


def set_output(sink: LogSink) -> None:
    global _sink
    _sink = sink


def reset_output() -> None:
    global _sink
    _sink = None


def print_records(data: Any) -> None:
    get_output().print_records(data)


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
