"""Fire-and-forget user surfaces: notifications and the clipboard.

Callers never consume a return value from either surface. The terminal
notifier lives in :mod:`notewright.output.console`.
"""

from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class Clipboard(Protocol):
    def copy(self, text: str) -> None: ...


class NullNotifier:
    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class MemoryClipboard:
    """Keeps copied text in memory; ``history`` holds every copy in order."""

    def __init__(self) -> None:
        self.history: list[str] = []

    @property
    def text(self) -> str | None:
        return self.history[-1] if self.history else None

    def copy(self, text: str) -> None:
        self.history.append(text)
