"""Vault file-system access — folder lookup, listing, reads, change events.

All paths crossing this boundary are vault-relative POSIX strings
(``Templates/daily.md``). :class:`VaultFileSystem` is the contract the
template index depends on; :class:`LocalVaultFileSystem` implements it
over a directory on disk, reading with aiofiles and watching with
watchdog.

Watchdog delivers events on its observer thread. They are handed to the
subscriber through ``loop.call_soon_threadsafe`` so subscribers only ever
run on the event loop thread.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Protocol

import aiofiles
import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from notewright.domain.errors import FileReadFailure
from notewright.domain.paths import normalize_path

logger = structlog.get_logger(__name__)

# Directories never listed or reported.
_SKIP_DIRS = frozenset({".obsidian", ".git", ".trash"})


class EventKind(StrEnum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class FolderEntry:
    """A file or folder inside the vault."""

    path: str
    name: str
    is_folder: bool

    @property
    def extension(self) -> str:
        """Lower-cased suffix without the dot; empty for folders."""
        if self.is_folder:
            return ""
        head, dot, ext = self.name.rpartition(".")
        return ext.lower() if dot and head else ""

    @property
    def stem(self) -> str:
        if self.is_folder or not self.extension:
            return self.name
        return self.name[: -(len(self.extension) + 1)]


@dataclass(frozen=True)
class VaultEvent:
    """A change under the vault. ``old_path`` is set for renames only."""

    kind: EventKind
    path: str
    is_folder: bool = False
    old_path: str | None = None


EventCallback = Callable[[VaultEvent], None]


class VaultFileSystem(Protocol):
    """File-system collaborator consumed by the template index."""

    async def get_folder(self, path: str) -> FolderEntry | None:
        """Resolve *path* to a folder, or None if it is not one."""
        ...

    async def list_children(self, folder: FolderEntry) -> list[FolderEntry]:
        """Immediate children of *folder*. Raises ``OSError`` if unreadable.

        Symlinked directories are not reported, so a walk over the
        listing always terminates.
        """
        ...

    async def read_text(self, entry: FolderEntry) -> str:
        """Full text of a file. Raises :class:`FileReadFailure`."""
        ...

    def subscribe(self, callback: EventCallback) -> object:
        """Deliver change events to *callback*; returns a subscription handle."""
        ...

    def unsubscribe(self, subscription: object) -> None: ...


# ---------------------------------------------------------------------------
# Local implementation
# ---------------------------------------------------------------------------


class _EventForwarder(FileSystemEventHandler):
    """Translate watchdog events to :class:`VaultEvent` on the loop thread."""

    def __init__(
        self,
        vault: LocalVaultFileSystem,
        callback: EventCallback,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._vault = vault
        self._callback = callback
        self._loop = loop

    def on_any_event(self, event: FileSystemEvent) -> None:
        translated = self._translate(event)
        if translated is None:
            return
        try:
            self._loop.call_soon_threadsafe(self._callback, translated)
        except RuntimeError:
            logger.debug("watch.loop_closed", path=translated.path)

    def _translate(self, event: FileSystemEvent) -> VaultEvent | None:
        is_folder = bool(event.is_directory)
        src = self._vault.to_vault_path(os.fsdecode(event.src_path))
        if event.event_type == "moved":
            dest = self._vault.to_vault_path(os.fsdecode(event.dest_path))
            if dest is None and src is None:
                return None
            if dest is None:
                return VaultEvent(EventKind.DELETED, src or "", is_folder)
            return VaultEvent(EventKind.RENAMED, dest, is_folder, old_path=src or "")

        kind = {
            "created": EventKind.CREATED,
            "modified": EventKind.MODIFIED,
            "deleted": EventKind.DELETED,
        }.get(event.event_type)
        if kind is None or src is None:
            return None
        if kind == EventKind.MODIFIED and is_folder:
            return None
        return VaultEvent(kind, src, is_folder)


@dataclass
class _Subscription:
    observer: Observer


class LocalVaultFileSystem:
    """:class:`VaultFileSystem` over a directory on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def to_vault_path(self, absolute: str) -> str | None:
        """Vault-relative POSIX path of *absolute*, or None if outside the vault."""
        try:
            relative = Path(absolute).relative_to(self.root)
        except ValueError:
            try:
                relative = Path(absolute).resolve().relative_to(self.root.resolve())
            except ValueError:
                return None
        if any(part in _SKIP_DIRS for part in relative.parts):
            return None
        return normalize_path(relative.as_posix())

    def _absolute(self, path: str) -> Path:
        return self.root / normalize_path(path)

    async def get_folder(self, path: str) -> FolderEntry | None:
        normalized = normalize_path(path)
        if not normalized:
            return None
        target = self._absolute(normalized)
        is_dir = await asyncio.to_thread(target.is_dir)
        if not is_dir:
            return None
        return FolderEntry(path=normalized, name=target.name, is_folder=True)

    async def list_children(self, folder: FolderEntry) -> list[FolderEntry]:
        return await asyncio.to_thread(self._scan, folder)

    def _scan(self, folder: FolderEntry) -> list[FolderEntry]:
        base = self._absolute(folder.path)
        children: list[FolderEntry] = []
        for child in sorted(base.iterdir()):
            if child.name in _SKIP_DIRS:
                continue
            is_folder = child.is_dir()
            if is_folder and child.is_symlink():
                logger.debug("vault.symlink_skipped", path=str(child))
                continue
            children.append(
                FolderEntry(
                    path=f"{folder.path}/{child.name}" if folder.path else child.name,
                    name=child.name,
                    is_folder=is_folder,
                )
            )
        return children

    async def read_text(self, entry: FolderEntry) -> str:
        try:
            async with aiofiles.open(self._absolute(entry.path), encoding="utf-8") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadFailure(entry.path, str(exc)) from exc

    def subscribe(self, callback: EventCallback) -> _Subscription:
        """Watch the whole vault recursively. Requires a running event loop."""
        loop = asyncio.get_running_loop()
        observer = Observer()
        observer.schedule(_EventForwarder(self, callback, loop), str(self.root), recursive=True)
        observer.daemon = True
        observer.start()
        logger.debug("watch.started", root=str(self.root))
        return _Subscription(observer=observer)

    def unsubscribe(self, subscription: object) -> None:
        if not isinstance(subscription, _Subscription):
            return
        subscription.observer.stop()
        subscription.observer.join(timeout=5)
        logger.debug("watch.stopped", root=str(self.root))
