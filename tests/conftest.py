"""Shared pytest fixtures and test doubles for notewright tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from click.testing import CliRunner

from notewright.domain.errors import FileReadFailure
from notewright.domain.paths import normalize_path
from notewright.domain.presets import FrontmatterField, FrontmatterPreset
from notewright.domain.types import FieldType
from notewright.infrastructure.filesystem import EventCallback, FolderEntry, VaultEvent


class FakeVaultFileSystem:
    """In-memory :class:`VaultFileSystem` with hooks for ordering tests.

    * ``block_read(path)`` returns an ``asyncio.Event``; reading *path*
      waits until it is set.
    * ``fail_read`` / ``fail_list`` make reads or listings raise.
    * ``emit(event)`` delivers an event to every subscriber synchronously.
    """

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.folders: set[str] = set()
        self.read_blockers: dict[str, asyncio.Event] = {}
        self.read_failures: set[str] = set()
        self.list_failures: set[str] = set()
        self.listeners: list[EventCallback] = []
        self.read_log: list[str] = []

    # -- setup helpers ------------------------------------------------------

    def add_folder(self, path: str) -> None:
        path = normalize_path(path)
        while path:
            self.folders.add(path)
            path = path.rpartition("/")[0]

    def add_file(self, path: str, content: str = "") -> None:
        path = normalize_path(path)
        self.files[path] = content
        parent = path.rpartition("/")[0]
        if parent:
            self.add_folder(parent)

    def rename_folder(self, old: str, new: str) -> None:
        old, new = normalize_path(old), normalize_path(new)

        def moved(path: str) -> str:
            return new + path[len(old) :] if path == old or path.startswith(f"{old}/") else path

        self.files = {moved(path): content for path, content in self.files.items()}
        self.folders = {moved(path) for path in self.folders}

    def block_read(self, path: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.read_blockers[normalize_path(path)] = gate
        return gate

    def fail_read(self, path: str) -> None:
        self.read_failures.add(normalize_path(path))

    def fail_list(self, path: str) -> None:
        self.list_failures.add(normalize_path(path))

    def emit(self, event: VaultEvent) -> None:
        for listener in list(self.listeners):
            listener(event)

    # -- VaultFileSystem ----------------------------------------------------

    async def get_folder(self, path: str) -> FolderEntry | None:
        await asyncio.sleep(0)
        path = normalize_path(path)
        if path not in self.folders:
            return None
        return FolderEntry(path=path, name=path.rpartition("/")[2], is_folder=True)

    async def list_children(self, folder: FolderEntry) -> list[FolderEntry]:
        await asyncio.sleep(0)
        if folder.path in self.list_failures:
            raise PermissionError(f"cannot list {folder.path}")
        prefix = f"{folder.path}/"
        children: list[FolderEntry] = []
        for path in sorted(self.folders):
            if path.startswith(prefix) and "/" not in path[len(prefix) :]:
                children.append(FolderEntry(path=path, name=path[len(prefix) :], is_folder=True))
        for path in sorted(self.files):
            if path.startswith(prefix) and "/" not in path[len(prefix) :]:
                children.append(FolderEntry(path=path, name=path[len(prefix) :], is_folder=False))
        return children

    async def read_text(self, entry: FolderEntry) -> str:
        self.read_log.append(entry.path)
        gate = self.read_blockers.get(entry.path)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if entry.path in self.read_failures or entry.path not in self.files:
            raise FileReadFailure(entry.path, "unreadable")
        return self.files[entry.path]

    def subscribe(self, callback: EventCallback) -> object:
        self.listeners.append(callback)
        return callback

    def unsubscribe(self, subscription: object) -> None:
        if subscription in self.listeners:
            self.listeners.remove(subscription)  # type: ignore[arg-type]


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_fs() -> FakeVaultFileSystem:
    fs = FakeVaultFileSystem()
    fs.add_folder("Templates")
    return fs


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def meeting_preset() -> FrontmatterPreset:
    return FrontmatterPreset(
        id="meeting",
        name="Meeting",
        fields=[
            FrontmatterField(
                key="status",
                label="Status",
                type=FieldType.SELECT,
                default="draft",
                options=["draft", "done"],
            ),
            FrontmatterField(key="priority", label="Priority"),
            FrontmatterField(key="tags", label="Tags", type=FieldType.MULTI_SELECT, default=["meeting"]),
        ],
    )


@pytest.fixture
def vault_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary vault with a Templates folder, a config file and CWD inside it."""
    monkeypatch.delenv("NOTEWRIGHT_CONFIG", raising=False)
    templates = tmp_path / "Templates"
    templates.mkdir()
    (templates / "Meeting Notes.md").write_text(
        "---\nnote-architect-config: meeting\ntags: [work]\n---\n\n## Agenda\n- {{topic}}\n",
        encoding="utf-8",
    )
    (templates / "Recipe.md").write_text("# Ingredients\n", encoding="utf-8")
    (tmp_path / "notewright.toml").write_text(
        """\
[templates]
folder = "Templates"

[templater]
enabled = false

[[presets]]
id = "meeting"
name = "Meeting"

[[presets.fields]]
key = "status"
label = "Status"
type = "select"
default = "draft"
options = ["draft", "done"]

[[presets.fields]]
key = "date"
label = "Date"
type = "date"
""",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path

