"""TemplateIndex — the live, in-memory list of template documents.

Loads are stamped with a generation token. Every resumption after an
``await`` re-reads the latest token and abandons its work if a newer
load has started, so only the most recently started scan ever publishes.
Superseded loads are never cancelled; they stop at their next check
and return whatever snapshot is current.

State lives in one immutable :class:`TemplateIndexSnapshot` that is
replaced wholesale. Documents are collected into a local list and only
published at the end of a scan, never mid-traversal.

Watching: change events under the watched folder schedule a debounced
reload. Renaming the watched folder itself moves the watch to the new
path before reloading.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Any

import structlog
from pydantic import BaseModel, Field

from notewright.domain.errors import (
    FileReadFailure,
    NotewrightError,
    PathInaccessible,
    PathInvalid,
    PathNotConfigured,
)
from notewright.domain.models import TemplateDocument, template_sort_key
from notewright.domain.paths import is_inside_folder, normalize_path
from notewright.domain.types import LoadStatus
from notewright.infrastructure.filesystem import (
    EventKind,
    FolderEntry,
    VaultEvent,
    VaultFileSystem,
)
from notewright.infrastructure.notify import Notifier, NullNotifier
from notewright.services.debounce import Debouncer
from notewright.services.result import ServiceError, ServiceResult

logger = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_DELAY = 0.3


class TemplateIndexSnapshot(BaseModel):
    """Published index state. Never mutated once created."""

    model_config = {"frozen": True}

    documents: tuple[TemplateDocument, ...] = ()
    status: LoadStatus = LoadStatus.IDLE
    message: str = ""
    error: ServiceError | None = None
    read_failures: int = 0

    @property
    def count(self) -> int:
        return len(self.documents)

    def to_result(self, op: str = "load_templates") -> ServiceResult:
        """Express the snapshot as a ServiceResult for the CLI."""
        data: dict[str, Any] = {
            "status": self.status.value,
            "count": self.count,
            "message": self.message,
            "items": [{"id": doc.id, "name": doc.name} for doc in self.documents],
        }
        warnings: list[str] = []
        if self.read_failures:
            warnings.append(f"{self.read_failures} template file(s) could not be read")
        if self.status == LoadStatus.EMPTY:
            warnings.append(self.message)
        if self.status == LoadStatus.ERROR:
            return ServiceResult(ok=False, op=op, data=data, warnings=warnings, error=self.error)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)


class TemplateIndex:
    """Scans, caches and watches the template folder.

    Args:
        file_system: Vault file-system collaborator.
        folder_provider: Returns the configured template folder on each load,
            so configuration changes apply to the next scan.
        extensions: File extensions (without dot) that mark a template.
        debounce_delay: Seconds of quiet before a watched change reloads.
        notifier: Receives the outcome of ``reload_templates(notify=True)``.
        notify_reloads: Also notify for reloads triggered by watched changes.
    """

    def __init__(
        self,
        file_system: VaultFileSystem,
        folder_provider: Callable[[], str | None],
        *,
        extensions: Iterable[str] = ("md",),
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
        notifier: Notifier | None = None,
        notify_reloads: bool = False,
    ) -> None:
        self._fs = file_system
        self._folder_provider = folder_provider
        self._extensions = frozenset(ext.lower().lstrip(".") for ext in extensions)
        self._debounce_delay = debounce_delay
        self._notifier = notifier or NullNotifier()
        self._notify_reloads = notify_reloads

        self._snapshot = TemplateIndexSnapshot()
        self._generation = 0
        self._watched_folder_path: str | None = None
        self._subscription: object | None = None
        self._debouncer: Debouncer | None = None
        self._reload_tasks: set[asyncio.Task[TemplateIndexSnapshot]] = set()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> TemplateIndexSnapshot:
        return self._snapshot

    @property
    def watched_folder_path(self) -> str | None:
        return self._watched_folder_path

    @property
    def is_watching(self) -> bool:
        return self._subscription is not None

    @property
    def reload_pending(self) -> bool:
        return self._debouncer is not None and self._debouncer.pending

    def get_templates(self) -> list[TemplateDocument]:
        return list(self._snapshot.documents)

    def get_template_by_id(self, template_id: str) -> TemplateDocument | None:
        for document in self._snapshot.documents:
            if document.id == template_id:
                return document
        return None

    def find_template(self, query: str) -> TemplateDocument | None:
        """Look a template up by id, then by name (case-insensitive)."""
        document = self.get_template_by_id(normalize_path(query))
        if document is not None:
            return document
        wanted = query.strip().casefold()
        for document in self._snapshot.documents:
            if document.name.casefold() == wanted:
                return document
        return None

    def get_load_status(self) -> TemplateIndexSnapshot:
        return self._snapshot

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def validate_template_path(self, path: str | None) -> bool:
        if not path or not path.strip():
            return False
        return await self._fs.get_folder(path) is not None

    async def load(self) -> TemplateIndexSnapshot:
        """Scan the configured folder and publish a new snapshot.

        Returns the snapshot current when this call finishes, which is
        a newer call's snapshot if this one was superseded.
        """
        self._generation += 1
        token = self._generation

        self._publish(
            documents=self._snapshot.documents,
            status=LoadStatus.LOADING,
            message="Loading templates...",
        )
        self._watched_folder_path = None

        try:
            return await self._load(token)
        except Exception as exc:
            logger.exception("templates.load.failed", token=token)
            if self._is_current(token):
                self._publish(
                    documents=self._snapshot.documents,
                    status=LoadStatus.ERROR,
                    message="Failed to load templates, check the template folder setting",
                    error=ServiceError(code="LOAD_FAILED", message=str(exc)),
                )
            return self._snapshot

    async def reload_templates(self, notify: bool = False) -> TemplateIndexSnapshot:
        snapshot = await self.load()
        if notify:
            if snapshot.status == LoadStatus.SUCCESS:
                self._notifier.success(snapshot.message or "Templates loaded")
            elif snapshot.status == LoadStatus.ERROR:
                self._notifier.error(snapshot.message or "Template loading failed")
            else:
                self._notifier.warning(snapshot.message or "Template status updated")
        return snapshot

    async def _load(self, token: int) -> TemplateIndexSnapshot:
        folder_path = (self._folder_provider() or "").strip()
        if not folder_path:
            return self._fail(token, PathNotConfigured())

        exists = await self.validate_template_path(folder_path)
        if not self._is_current(token):
            return self._abandon(token, "validate")
        if not exists:
            return self._fail(token, PathInvalid(folder_path))

        folder = await self._fs.get_folder(folder_path)
        if not self._is_current(token):
            return self._abandon(token, "resolve")
        if folder is None:
            return self._fail(token, PathInaccessible(folder_path))

        try:
            children = await self._fs.list_children(folder)
        except OSError as exc:
            if not self._is_current(token):
                return self._abandon(token, "list")
            return self._fail(token, PathInaccessible(folder_path, str(exc)))
        if not self._is_current(token):
            return self._abandon(token, "list")

        self._watched_folder_path = normalize_path(folder.path)
        files, failures = await self._collect_template_files(token, children)
        if not self._is_current(token):
            return self._abandon(token, "walk")

        loaded: list[TemplateDocument] = []
        for entry in files:
            if not self._is_current(token):
                return self._abandon(token, "read")
            try:
                content = await self._fs.read_text(entry)
            except (FileReadFailure, OSError, UnicodeDecodeError) as exc:
                failures += 1
                logger.warning("templates.read_failed", path=entry.path, error=str(exc))
                continue
            if not self._is_current(token):
                return self._abandon(token, "read")
            loaded.append(TemplateDocument.from_file(entry.path, entry.stem, content))

        if not self._is_current(token):
            return self._abandon(token, "publish")

        loaded.sort(key=template_sort_key)
        if loaded:
            status = LoadStatus.SUCCESS
            message = f"Loaded {len(loaded)} template(s)"
        else:
            status = LoadStatus.EMPTY
            suffixes = ", ".join(f".{ext}" for ext in sorted(self._extensions))
            message = f'No {suffixes} templates found in "{folder_path}"'

        self._publish(
            documents=tuple(loaded),
            status=status,
            message=message,
            read_failures=failures,
        )
        logger.info("templates.loaded", count=len(loaded), read_failures=failures, token=token)
        return self._snapshot

    async def _collect_template_files(
        self, token: int, children: list[FolderEntry]
    ) -> tuple[list[FolderEntry], int]:
        """Depth-first walk with an explicit stack; returns files and listing failures.

        Stops early once *token* is superseded; the caller then abandons the load.
        """
        stack = list(children)
        files: list[FolderEntry] = []
        failures = 0
        while stack and self._is_current(token):
            current = stack.pop()
            if current.is_folder:
                try:
                    stack.extend(await self._fs.list_children(current))
                except OSError as exc:
                    failures += 1
                    logger.warning("templates.list_failed", path=current.path, error=str(exc))
                continue
            if current.extension in self._extensions:
                files.append(current)
        return files, failures

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _abandon(self, token: int, stage: str) -> TemplateIndexSnapshot:
        logger.debug("templates.load.superseded", token=token, latest=self._generation, stage=stage)
        return self._snapshot

    def _fail(self, token: int, error: NotewrightError) -> TemplateIndexSnapshot:
        if not self._is_current(token):
            return self._abandon(token, "fail")
        self._publish(
            documents=self._snapshot.documents,
            status=LoadStatus.ERROR,
            message=error.message,
            error=ServiceError.from_exception(error),
        )
        logger.warning("templates.load.error", code=error.code, message=error.message)
        return self._snapshot

    def _publish(self, **fields: Any) -> None:
        self._snapshot = TemplateIndexSnapshot(**fields)

    # ------------------------------------------------------------------
    # Watching
    # ------------------------------------------------------------------

    def start_watching(self) -> None:
        """Subscribe to vault changes. Must be called with a running loop."""
        if self._subscription is not None:
            return
        loop = asyncio.get_running_loop()
        self._debouncer = Debouncer(self._debounce_delay, self._on_debounced_reload, loop=loop)
        self._subscription = self._fs.subscribe(self._handle_event)

    def stop_watching(self) -> None:
        if self._debouncer is not None:
            self._debouncer.cancel()
        if self._subscription is not None:
            self._fs.unsubscribe(self._subscription)
            self._subscription = None

    def dispose(self) -> None:
        self.stop_watching()

    def handles_path(self, path: str | None) -> bool:
        """True when *path* is the watched folder or anything beneath it."""
        if not self._watched_folder_path or not path:
            return False
        return is_inside_folder(path, self._watched_folder_path)

    def _handle_event(self, event: VaultEvent) -> None:
        if event.kind == EventKind.RENAMED:
            self._handle_rename(event)
        else:
            self._handle_change(event)

    def _handle_change(self, event: VaultEvent) -> None:
        if self.handles_path(event.path):
            self._schedule_reload()

    def _handle_rename(self, event: VaultEvent) -> None:
        old_path = normalize_path(event.old_path)
        if self._watched_folder_path and old_path == self._watched_folder_path and event.is_folder:
            self._watched_folder_path = normalize_path(event.path)
            logger.info("templates.folder_moved", old=old_path, new=self._watched_folder_path)
            self._schedule_reload()
            return

        if not self.handles_path(event.path) and not self.handles_path(event.old_path):
            return
        self._schedule_reload()

    def _schedule_reload(self) -> None:
        if self._debouncer is not None:
            self._debouncer.schedule()

    def _on_debounced_reload(self) -> None:
        task = asyncio.get_running_loop().create_task(self.reload_templates(notify=self._notify_reloads))
        self._reload_tasks.add(task)
        task.add_done_callback(self._reload_tasks.discard)
