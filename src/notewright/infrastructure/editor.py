"""Active note access — metadata lookup and in-memory text editing.

:class:`ActiveDocument` and :class:`EditorSurface` are the collaborators
the insertion service writes through. :class:`MarkdownNoteEditor`
implements both over one Markdown file: edits happen on an in-memory
buffer and :meth:`MarkdownNoteEditor.save` writes it back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from notewright.domain.content import parse_frontmatter


@dataclass(frozen=True)
class Position:
    """Zero-based line and character offset."""

    line: int
    ch: int = 0


@dataclass(frozen=True)
class FrontmatterSpan:
    """Lines of a note's frontmatter block, delimiters included."""

    start_line: int
    end_line: int


@dataclass(frozen=True)
class NoteMetadata:
    """The active note's parsed frontmatter and where it sits in the text."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    position: FrontmatterSpan | None = None


class ActiveDocument(Protocol):
    def get_note_metadata(self) -> NoteMetadata: ...


class EditorSurface(Protocol):
    def replace_range(self, text: str, start: Position, end: Position | None = None) -> None: ...

    def replace_selection(self, text: str) -> None: ...

    def get_cursor(self) -> Position: ...

    def set_cursor(self, position: Position) -> None: ...

    def has_selection(self) -> bool: ...


class NoActiveDocument:
    """Stand-in used when no note is open: no metadata at all."""

    def get_note_metadata(self) -> NoteMetadata:
        return NoteMetadata()


class MarkdownNoteEditor:
    """Editable buffer over a Markdown note on disk.

    The cursor starts at the end of the note. A selection is a pair of
    offsets; ``replace_selection`` replaces it (or inserts at the cursor)
    and leaves the cursor after the inserted text.
    """

    def __init__(self, path: Path, *, text: str | None = None) -> None:
        self.path = Path(path)
        if text is None:
            text = self.path.read_text(encoding="utf-8") if self.path.exists() else ""
        self._text = text.replace("\r\n", "\n")
        self._anchor = len(self._text)
        self._head = len(self._text)

    @property
    def text(self) -> str:
        return self._text

    # -- ActiveDocument -----------------------------------------------------

    def get_note_metadata(self) -> NoteMetadata:
        parsed = parse_frontmatter(self._text)
        if not parsed.has_frontmatter or parsed.end_line is None:
            return NoteMetadata()
        return NoteMetadata(
            frontmatter=parsed.frontmatter,
            position=FrontmatterSpan(start_line=0, end_line=parsed.end_line),
        )

    # -- EditorSurface ------------------------------------------------------

    def replace_range(self, text: str, start: Position, end: Position | None = None) -> None:
        start_offset = self._offset(start)
        end_offset = start_offset if end is None else max(self._offset(end), start_offset)
        self._splice(start_offset, end_offset, text)

    def replace_selection(self, text: str) -> None:
        start, end = sorted((self._anchor, self._head))
        self._splice(start, end, text)
        self._anchor = self._head = start + len(text)

    def get_cursor(self) -> Position:
        return self._position(self._head)

    def set_cursor(self, position: Position) -> None:
        self._anchor = self._head = self._offset(position)

    def set_selection(self, anchor: Position, head: Position) -> None:
        self._anchor = self._offset(anchor)
        self._head = self._offset(head)

    def has_selection(self) -> bool:
        return self._anchor != self._head

    def line_count(self) -> int:
        return self._text.count("\n") + 1

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self._text, encoding="utf-8")

    # -- Internal -----------------------------------------------------------

    def _offset(self, position: Position) -> int:
        """Text offset of *position*, clamped to the buffer."""
        lines = self._text.split("\n")
        if position.line >= len(lines):
            return len(self._text)
        line = max(position.line, 0)
        offset = sum(len(text) + 1 for text in lines[:line])
        return offset + min(max(position.ch, 0), len(lines[line]))

    def _position(self, offset: int) -> Position:
        before = self._text[:offset]
        line = before.count("\n")
        return Position(line=line, ch=offset - (before.rfind("\n") + 1))

    def _splice(self, start: int, end: int, text: str) -> None:
        self._text = self._text[:start] + text + self._text[end:]
        delta = len(text) - (end - start)
        self._anchor = self._shift(self._anchor, start, end, delta)
        self._head = self._shift(self._head, start, end, delta)

    @staticmethod
    def _shift(offset: int, start: int, end: int, delta: int) -> int:
        if offset >= end:
            return offset + delta
        if offset > start:
            return start
        return offset
