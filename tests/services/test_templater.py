"""Tests for the Jinja-backed Templater."""

from __future__ import annotations

from datetime import datetime

import pytest

from notewright.domain.errors import TemplaterExpansionFailure
from notewright.domain.models import TemplateDocument
from notewright.services.templater import JinjaTemplater

FIXED = datetime(2024, 5, 17, 9, 30)


@pytest.fixture
def templater() -> JinjaTemplater:
    return JinjaTemplater(note_title="Standup", note_path="notes/Standup.md", clock=lambda: FIXED)


class TestJinjaTemplater:
    def test_available(self, templater: JinjaTemplater) -> None:
        assert templater.is_available() is True

    def test_date_helpers(self, templater: JinjaTemplater) -> None:
        assert templater.process_string("<% tp.date.now() %>") == "2024-05-17"
        assert templater.process_string("<% tp.date.today %>") == "2024-05-17"
        assert templater.process_string('<% tp.date.now("%d/%m", 1) %>') == "18/05"
        assert templater.process_string('<% tp.date.now("%Y-%m-%d", -17) %>') == "2024-04-30"

    def test_file_helpers(self, templater: JinjaTemplater) -> None:
        assert templater.process_string("# <% tp.file.title %>") == "# Standup"
        assert templater.process_string("<% tp.file.path %>") == "notes/Standup.md"

    def test_custom_default_format(self) -> None:
        templater = JinjaTemplater(date_format="%B %d", clock=lambda: FIXED)
        assert templater.process_string("<% tp.date.now() %>") == "May 17"

    def test_placeholders_untouched(self, templater: JinjaTemplater) -> None:
        text = "Topic: {{topic}}\n{% raw %}\n"
        assert templater.process_string(text) == text

    def test_statements_and_trailing_newline(self, templater: JinjaTemplater) -> None:
        text = "<%* for i in range(2) *%>x<%* endfor *%>\n"
        assert templater.process_string(text) == "xx\n"

    def test_process_template(self, templater: JinjaTemplater) -> None:
        doc = TemplateDocument.from_file("T/a.md", "a", "---\ndate: <% tp.date.now() %>\n---\n")
        assert templater.process_template(doc) == "---\ndate: 2024-05-17\n---\n"

    @pytest.mark.parametrize("text", ["<% missing %>", "<% tp.date.now( %>", "<%* if *%>"])
    def test_errors_wrapped(self, templater: JinjaTemplater, text: str) -> None:
        with pytest.raises(TemplaterExpansionFailure) as excinfo:
            templater.process_string(text)
        assert excinfo.value.code == "TEMPLATER_FAILED"

    def test_python_internals_unreachable(self, templater: JinjaTemplater) -> None:
        with pytest.raises(TemplaterExpansionFailure):
            templater.process_string("<% tp.__class__.__init__.__globals__ %>")
