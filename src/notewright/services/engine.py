"""TemplateEngine — prepares a template for insertion into the active note.

Preparation runs the optional Templater pass, splits the result into
embedded frontmatter and body, and merges that frontmatter with the
note's metadata, the preset defaults and the user's input.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from notewright.domain.content import parse_template_content
from notewright.domain.errors import TemplaterExpansionFailure
from notewright.domain.merge import resolve_frontmatter
from notewright.domain.models import TemplateDocument
from notewright.domain.presets import FrontmatterPreset
from notewright.infrastructure.editor import ActiveDocument, NoteMetadata
from notewright.services.templater import TemplaterPort

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProcessedTemplate:
    content: str
    used_templater: bool = False
    error: str | None = None


@dataclass(frozen=True)
class TemplatePreparation:
    """Everything an insertion needs, computed before touching the editor."""

    merged_frontmatter: dict[str, Any]
    template_body: str
    note_metadata: NoteMetadata
    used_templater: bool = False
    templater_error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def has_template_body(self) -> bool:
        return bool(self.template_body.strip())

    @property
    def merge_count(self) -> int:
        return len(self.merged_frontmatter)


class TemplateEngine:
    """Combines a template, a preset and user input against the active note.

    Args:
        active_document: Source of the note's current metadata.
        templater: Optional pre-processor; skipped when None or unavailable.
    """

    def __init__(
        self,
        active_document: ActiveDocument,
        templater: TemplaterPort | None = None,
    ) -> None:
        self._document = active_document
        self._templater = templater

    def process_template_content(self, template: TemplateDocument) -> ProcessedTemplate:
        """Run the Templater pass, falling back to the raw text on failure."""
        if self._templater is None or not self._templater.is_available():
            return ProcessedTemplate(content=template.content)
        try:
            content = self._templater.process_template(template)
        except TemplaterExpansionFailure as exc:
            logger.warning("templater.failed", template=template.id, error=str(exc))
            return ProcessedTemplate(
                content=template.content,
                error="Templater processing failed, using the unprocessed template",
            )
        return ProcessedTemplate(content=content, used_templater=True)

    def get_note_metadata(self) -> NoteMetadata:
        return self._document.get_note_metadata()

    def merge_frontmatter_with_user_input(
        self,
        preset: FrontmatterPreset,
        template_metadata: Mapping[str, Any],
        user_input: Mapping[str, Any],
    ) -> dict[str, Any]:
        note = self.get_note_metadata()
        return resolve_frontmatter(preset, note.frontmatter, template_metadata, user_input)

    def prepare(
        self,
        template: TemplateDocument,
        preset: FrontmatterPreset,
        user_input: Mapping[str, Any],
    ) -> TemplatePreparation:
        processed = self.process_template_content(template)
        template_metadata, body = parse_template_content(processed.content)
        merged = self.merge_frontmatter_with_user_input(preset, template_metadata, user_input)
        warnings = [processed.error] if processed.error else []
        return TemplatePreparation(
            merged_frontmatter=merged,
            template_body=body,
            note_metadata=self.get_note_metadata(),
            used_templater=processed.used_templater,
            templater_error=processed.error,
            warnings=warnings,
        )
