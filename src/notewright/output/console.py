"""Rich Console factory, theme, and terminal-backed user surfaces.

Result rendering goes through StringIO-backed consoles so renderers
keep a ``str`` return contract; in non-TTY environments (tests, pipes)
Rich drops color codes on its own. :class:`ConsoleNotifier` and
:class:`ConsoleClipboard` write straight to stderr.
"""

from __future__ import annotations

import sys
from io import StringIO

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

NW_THEME = Theme(
    {
        "nw.ok": "bold green",
        "nw.error": "bold red",
        "nw.warning": "bold yellow",
        "nw.op": "bold cyan",
        "nw.key": "dim",
        "nw.id": "bold blue",
        "nw.path": "dim",
        "nw.title": "bold",
        "nw.score": "magenta",
        "nw.status.success": "green",
        "nw.status.empty": "yellow",
        "nw.status.error": "red",
        "nw.status.loading": "cyan",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=NW_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def create_stderr_console() -> Console:
    return Console(file=sys.stderr, theme=NW_THEME, highlight=False)


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    return f"nw.status.{status}" if status in {"success", "empty", "error", "loading"} else ""


class ConsoleNotifier:
    """Notifier that prints one styled line per message."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or create_stderr_console()

    def success(self, message: str) -> None:
        self._console.print(Text("OK", style="nw.ok"), message)

    def warning(self, message: str) -> None:
        self._console.print(Text("WARNING", style="nw.warning"), message)

    def error(self, message: str) -> None:
        self._console.print(Text("ERROR", style="nw.error"), message)


class ConsoleClipboard:
    """Clipboard for headless use: the copied text is shown in a panel.

    ``text`` keeps the last copy so callers can still pick it up.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or create_stderr_console()
        self.text: str | None = None

    def copy(self, text: str) -> None:
        self.text = text
        self._console.print(Panel(Text(text), title="copied", border_style="nw.warning", expand=False))
