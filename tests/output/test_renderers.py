"""Tests for operation-specific Rich renderers."""

from notewright.output.renderers import render_quiet, render_result
from notewright.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("list_templates", "PATH_INVALID", 'Template folder "X" does not exist'))
        assert "ERROR" in output
        assert "list_templates" in output
        assert "does not exist" in output
        assert "PATH_INVALID" in output

    def test_verbose_shows_detail(self) -> None:
        output = render_result(_err("list_templates", "PATH_INVALID", "Bad", path="X"), verbose=True)
        assert "detail" in output
        assert "path: X" in output

    def test_no_error_object(self) -> None:
        assert "Unknown error" in render_result(ServiceResult(ok=False, op="test"))


# ── Templates ─────────────────────────────────────────────────────────


class TestTemplateRenderers:
    def test_template_list(self) -> None:
        result = _ok(
            "list_templates",
            status="success",
            count=2,
            message="Loaded 2 templates",
            items=[
                {"id": "Templates/Meeting.md", "name": "Meeting"},
                {"id": "Templates/Recipe.md", "name": "Recipe"},
            ],
        )
        output = render_result(result)
        assert "Meeting" in output
        assert "Templates/Recipe.md" in output
        assert "Loaded 2 templates" in output

    def test_empty_list_has_no_table(self) -> None:
        output = render_result(_ok("reload_templates", status="empty", count=0, message="No templates", items=[]))
        assert "Name" not in output
        assert "No templates" in output

    def test_show_template(self) -> None:
        result = _ok(
            "show_template",
            id="Templates/Meeting.md",
            name="Meeting",
            path="Templates/Meeting.md",
            presets=["meeting"],
            frontmatter={"tags": ["work"]},
            body="## Agenda",
        )
        output = render_result(result)
        assert "Meeting" in output
        assert "presets: meeting" in output
        assert "## Agenda" in output

    def test_watch(self) -> None:
        output = render_result(_ok("watch_templates", folder="Templates", duration=1.0, count=3, status="success"))
        assert "watch_templates" in output
        assert "folder: Templates" in output
        assert "count: 3" in output


# ── Presets ───────────────────────────────────────────────────────────


class TestPresetRenderers:
    def test_preset_list(self) -> None:
        result = _ok("list_presets", count=1, items=[{"id": "meeting", "name": "Meeting", "fields": ["status"]}])
        output = render_result(result)
        assert "meeting" in output
        assert "status" in output
        assert "1 presets" in output

    def test_matches(self) -> None:
        result = _ok(
            "match_presets",
            template="Templates/Meeting.md",
            count=1,
            best="meeting",
            items=[
                {
                    "id": "meeting",
                    "name": "Meeting",
                    "score": 0.7,
                    "reasons": ["Filename match"],
                    "recommendation": "Recommended: Meeting (good match)",
                }
            ],
        )
        output = render_result(result)
        assert "0.70" in output
        assert "Best match: meeting" in output
        assert "Filename match" not in output
        assert "Filename match" in render_result(result, verbose=True)


# ── Notes ─────────────────────────────────────────────────────────────


class TestNoteRenderers:
    def test_insert(self) -> None:
        result = _ok(
            "insert_template",
            path="note.md",
            template="Templates/Meeting.md",
            preset="meeting",
            merge_count=2,
            fallback=False,
            frontmatter={"status": "draft"},
        )
        output = render_result(result)
        assert "insert_template" in output
        assert "path: note.md" in output
        assert "merge_count: 2" in output
        assert "frontmatter" not in output
        assert '"status":"draft"' in render_result(result, verbose=True)

    def test_generic_fallback(self) -> None:
        output = render_result(_ok("something_else", answer=42))
        assert "something_else" in output
        assert "answer: 42" in output


# ── Quiet ─────────────────────────────────────────────────────────────


class TestQuiet:
    def test_lists_print_ids(self) -> None:
        result = _ok("list_presets", items=[{"id": "a"}, {"id": "b"}])
        assert render_quiet(result) == "a\nb"

    def test_status_line(self) -> None:
        assert render_quiet(_ok("update_frontmatter")) == "OK: update_frontmatter"

    def test_error(self) -> None:
        assert render_quiet(_err("show_template", "X", "nope")) == "ERROR: show_template - nope"
