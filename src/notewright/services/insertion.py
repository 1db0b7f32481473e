"""InsertionService — writes prepared templates and presets into a note.

Insertion order is frontmatter first (it always sits at the top, so
writing it first keeps later line numbers valid), then the body at the
cursor. If the normal path fails, the body alone is inserted and the
intended frontmatter block goes to the clipboard for manual recovery.
If that fails too the operation fails and nothing is retried.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from notewright.domain.content import dump_yaml, serialize_frontmatter_block
from notewright.domain.errors import InsertionFailed, NotewrightError
from notewright.domain.merge import merge_frontmatters
from notewright.domain.models import TemplateDocument
from notewright.domain.presets import FrontmatterPreset
from notewright.domain.types import UpdateMode
from notewright.infrastructure.editor import EditorSurface, FrontmatterSpan, Position
from notewright.infrastructure.notify import Clipboard, Notifier, NullNotifier
from notewright.services.engine import TemplateEngine
from notewright.services.result import ServiceResult

logger = structlog.get_logger(__name__)


def write_note_frontmatter(
    editor: EditorSurface,
    record: Mapping[str, Any],
    position: FrontmatterSpan | None,
) -> None:
    """Replace the note's frontmatter block (or add one at the top).

    A replaced block keeps whatever followed the old closing delimiter,
    so repeated writes never stack up blank lines.
    """
    block = serialize_frontmatter_block(record)
    if position is not None:
        editor.replace_range(
            block.rstrip("\n") + "\n",
            Position(position.start_line),
            Position(position.end_line + 1),
        )
    else:
        editor.replace_range(block, Position(0))


def frontmatter_clipboard_text(record: Mapping[str, Any]) -> str:
    """The ``---`` delimited block placed on the clipboard after a fallback."""
    yaml_text = dump_yaml(record)
    if not yaml_text.endswith("\n"):
        yaml_text = f"{yaml_text}\n"
    return f"---\n{yaml_text}---"


class InsertionService:
    """Applies templates and presets to the note behind *editor*."""

    def __init__(
        self,
        engine: TemplateEngine,
        editor: EditorSurface,
        clipboard: Clipboard,
        notifier: Notifier | None = None,
    ) -> None:
        self._engine = engine
        self._editor = editor
        self._clipboard = clipboard
        self._notifier = notifier or NullNotifier()

    def insert_template(
        self,
        template: TemplateDocument,
        preset: FrontmatterPreset,
        user_input: Mapping[str, Any],
    ) -> ServiceResult:
        op = "insert_template"
        preparation = self._engine.prepare(template, preset, user_input)
        warnings = list(preparation.warnings)
        data: dict[str, Any] = {
            "template": template.id,
            "preset": preset.id,
            "frontmatter": preparation.merged_frontmatter,
            "merge_count": preparation.merge_count,
            "used_templater": preparation.used_templater,
        }
        body_inserted = False

        try:
            write_note_frontmatter(
                self._editor,
                preparation.merged_frontmatter,
                preparation.note_metadata.position,
            )
            if preparation.has_template_body:
                self._editor.replace_selection(preparation.template_body)
                body_inserted = True
        except Exception as exc:
            logger.error("insert.failed", template=template.id, error=str(exc))
        else:
            self._notify_success(template, preparation.used_templater, preparation.merge_count)
            for warning in warnings:
                self._notifier.warning(warning)
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    **data,
                    "frontmatter_updated": True,
                    "body_inserted": body_inserted,
                    "fallback": False,
                },
                warnings=warnings,
            )

        try:
            if preparation.has_template_body and not body_inserted:
                self._editor.replace_selection(preparation.template_body)
                body_inserted = True
        except Exception as exc:
            logger.error("insert.fallback_failed", template=template.id, error=str(exc))
            failure = InsertionFailed(
                "Template insertion failed completely, please copy the template content manually",
                template=template.id,
            )
            self._notifier.error(failure.message)
            return ServiceResult.failure(op, failure, warnings=warnings)

        # The body is in the note from here on; a clipboard error only costs the copy.
        try:
            self._clipboard.copy(frontmatter_clipboard_text(preparation.merged_frontmatter))
        except Exception as exc:
            logger.warning("insert.clipboard_failed", template=template.id, error=str(exc))
            warnings.append(
                "Frontmatter update failed and the frontmatter could not be copied to the "
                "clipboard; the template body was inserted"
            )
        else:
            warnings.append(
                "Frontmatter update failed; the template body was inserted and the "
                "frontmatter was copied to the clipboard"
            )
        for warning in warnings:
            self._notifier.warning(warning)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **data,
                "frontmatter_updated": False,
                "body_inserted": body_inserted,
                "fallback": True,
            },
            warnings=warnings,
        )

    def update_frontmatter(
        self,
        preset: FrontmatterPreset,
        user_input: Mapping[str, Any],
        mode: UpdateMode = UpdateMode.MERGE,
    ) -> ServiceResult:
        """Apply *user_input* to the note's frontmatter, merging or replacing it."""
        op = "update_frontmatter"
        metadata = self._engine.get_note_metadata()
        if mode == UpdateMode.OVERWRITE:
            record = dict(user_input)
        else:
            record = merge_frontmatters(metadata.frontmatter, user_input)

        try:
            write_note_frontmatter(self._editor, record, metadata.position)
        except NotewrightError as exc:
            return ServiceResult.failure(op, exc)

        verb = "merged" if mode == UpdateMode.MERGE else "overwritten"
        self._notifier.success(f'Note frontmatter {verb} using preset "{preset.name}"')
        return ServiceResult(
            ok=True,
            op=op,
            data={"preset": preset.id, "mode": mode.value, "frontmatter": record},
        )

    def _notify_success(self, template: TemplateDocument, used_templater: bool, merge_count: int) -> None:
        details: list[str] = []
        if used_templater:
            details.append("processed with Templater")
        if merge_count > 0:
            details.append(f"{merge_count} frontmatter field(s) merged")
        suffix = f" ({', '.join(details)})" if details else ""
        self._notifier.success(f'Template "{template.name}" inserted{suffix}.')
