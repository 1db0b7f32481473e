"""Tests for TemplateEngine preparation."""

from __future__ import annotations

from pathlib import Path

from notewright.domain.errors import TemplaterExpansionFailure
from notewright.domain.models import TemplateDocument
from notewright.domain.presets import FrontmatterPreset
from notewright.infrastructure.editor import MarkdownNoteEditor, NoActiveDocument
from notewright.services.engine import TemplateEngine

TEMPLATE = TemplateDocument.from_file(
    "Templates/Meeting.md",
    "Meeting",
    "---\nnote-architect-config: meeting\ntags: [work]\n---\n\n## Agenda\n- <% tp.file.title %>\n",
)


class _TitleTemplater:
    def is_available(self) -> bool:
        return True

    def process_template(self, template: TemplateDocument) -> str:
        return template.content.replace("<% tp.file.title %>", "Standup")

    def process_string(self, content: str) -> str:
        return content


class _BrokenTemplater(_TitleTemplater):
    def process_template(self, template: TemplateDocument) -> str:
        raise TemplaterExpansionFailure("boom")


class _UnavailableTemplater(_BrokenTemplater):
    def is_available(self) -> bool:
        return False


def _note(text: str) -> MarkdownNoteEditor:
    return MarkdownNoteEditor(Path("note.md"), text=text)


class TestProcessTemplateContent:
    def test_without_templater(self) -> None:
        processed = TemplateEngine(NoActiveDocument()).process_template_content(TEMPLATE)
        assert processed.content == TEMPLATE.content
        assert processed.used_templater is False
        assert processed.error is None

    def test_with_templater(self) -> None:
        engine = TemplateEngine(NoActiveDocument(), _TitleTemplater())
        processed = engine.process_template_content(TEMPLATE)
        assert "- Standup" in processed.content
        assert processed.used_templater is True

    def test_failure_falls_back_to_raw(self) -> None:
        engine = TemplateEngine(NoActiveDocument(), _BrokenTemplater())
        processed = engine.process_template_content(TEMPLATE)
        assert processed.content == TEMPLATE.content
        assert processed.used_templater is False
        assert processed.error is not None

    def test_unavailable_is_skipped(self) -> None:
        processed = TemplateEngine(NoActiveDocument(), _UnavailableTemplater()).process_template_content(TEMPLATE)
        assert processed.error is None
        assert processed.used_templater is False


class TestPrepare:
    def test_merges_all_sources(self, meeting_preset: FrontmatterPreset) -> None:
        note = _note("---\nstatus: done\ntags: [inbox]\n---\n\nBody\n")
        engine = TemplateEngine(note, _TitleTemplater())
        prep = engine.prepare(TEMPLATE, meeting_preset, {"priority": "high", "tags": ["work", "urgent"]})

        assert prep.merged_frontmatter == {
            "status": "done",
            "priority": "high",
            "tags": ["meeting", "inbox", "work", "urgent"],
        }
        assert list(prep.merged_frontmatter) == ["status", "priority", "tags"]
        assert "note-architect-config" not in prep.merged_frontmatter
        assert prep.template_body == "## Agenda\n- Standup"
        assert prep.has_template_body is True
        assert prep.merge_count == 3
        assert prep.used_templater is True
        assert prep.warnings == []
        assert prep.note_metadata.position is not None
        assert prep.note_metadata.position.end_line == 3

    def test_user_input_wins(self, meeting_preset: FrontmatterPreset) -> None:
        engine = TemplateEngine(_note("---\nstatus: done\n---\n"))
        prep = engine.prepare(TEMPLATE, meeting_preset, {"status": "draft"})
        assert prep.merged_frontmatter["status"] == "draft"

    def test_templater_failure_becomes_warning(self, meeting_preset: FrontmatterPreset) -> None:
        engine = TemplateEngine(NoActiveDocument(), _BrokenTemplater())
        prep = engine.prepare(TEMPLATE, meeting_preset, {})
        assert prep.used_templater is False
        assert prep.templater_error is not None
        assert prep.warnings == [prep.templater_error]
        assert prep.template_body == "## Agenda\n- <% tp.file.title %>"

    def test_template_without_frontmatter(self) -> None:
        plain = TemplateDocument.from_file("Templates/Plain.md", "Plain", "  \n")
        prep = TemplateEngine(NoActiveDocument()).prepare(plain, FrontmatterPreset(id="none", name="None"), {})
        assert prep.merged_frontmatter == {}
        assert prep.has_template_body is False
        assert prep.merge_count == 0
        assert prep.note_metadata.position is None
