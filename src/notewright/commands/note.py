"""Command group: apply templates and presets to a note file."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from notewright.domain.content import parse_template_content
from notewright.domain.convert import convert_form_data
from notewright.domain.errors import NotewrightError, PresetNotFound, TemplateNotFound
from notewright.domain.merge import extract_preset_defaults
from notewright.domain.presets import FrontmatterPreset
from notewright.domain.types import LoadStatus, UpdateMode
from notewright.infrastructure.editor import MarkdownNoteEditor
from notewright.output.console import ConsoleClipboard
from notewright.services.engine import TemplateEngine
from notewright.services.insertion import InsertionService
from notewright.services.result import ServiceResult
from notewright.services.templater import JinjaTemplater

if TYPE_CHECKING:
    from notewright.commands._context import AppContext
    from notewright.domain.models import TemplateDocument

# Used when no preset is given, bound, or matched: only note, template
# and user values are merged.
NO_PRESET = FrontmatterPreset(id="none", name="No preset")

_SET_HELP = "Field value as KEY=VALUE (repeatable)."


def parse_assignments(pairs: tuple[str, ...]) -> dict[str, Any]:
    """``("status=done", "tags=a")`` to ``{"status": "done", "tags": "a"}``.

    A repeated key collects its values into a list.
    """
    values: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got {pair!r}"
            raise click.BadParameter(msg, param_hint="--set")
        if key in values:
            existing = values[key]
            values[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            values[key] = value
    return values


def user_input_for(
    preset: FrontmatterPreset,
    form_data: Mapping[str, Any],
    resolved_defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Typed user input: preset fields converted, other keys kept as given.

    Without *resolved_defaults* only the fields the user supplied are
    returned, so lower-precedence sources keep their values.
    """
    converted = convert_form_data(preset, form_data, resolved_defaults)
    if resolved_defaults is None:
        converted = {key: value for key, value in converted.items() if key in form_data}
    extras = {key: value for key, value in form_data.items() if key not in converted}
    return {**converted, **extras}


def _build_engine(app: AppContext, editor: MarkdownNoteEditor) -> TemplateEngine:
    templater = None
    if app.settings.templater.enabled:
        templater = JinjaTemplater(
            date_format=app.settings.templater.date_format,
            note_title=editor.path.stem,
            note_path=str(editor.path),
        )
    return TemplateEngine(editor, templater)


def _select_preset(app: AppContext, template: TemplateDocument, preset_id: str | None) -> FrontmatterPreset:
    """Explicit id, else the template's bound preset, else the best match."""
    registry = app.presets
    if preset_id:
        preset = registry.get_preset_by_id(preset_id)
        if preset is None:
            raise PresetNotFound(preset_id)
        return preset

    frontmatter, _body = parse_template_content(template.content)
    bound = registry.presets_for_template(frontmatter)
    if bound:
        return bound[0]

    best = app.matcher().get_best_match(template, registry.get_presets())
    return best.preset if best is not None else NO_PRESET


@click.group()
@click.pass_obj
def note(app: AppContext) -> None:
    """Write templates and frontmatter into notes."""


@note.command()
@click.argument("note_path", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("template_id")
@click.option("--preset", "preset_id", default=None, help="Preset id (default: bound or best match).")
@click.option("--set", "assignments", multiple=True, help=_SET_HELP)
@click.pass_obj
def insert(
    app: AppContext,
    note_path: Path,
    template_id: str,
    preset_id: str | None,
    assignments: tuple[str, ...],
) -> None:
    """Insert TEMPLATE_ID into NOTE_PATH, merging frontmatter."""
    op = "insert_template"
    form_data = parse_assignments(assignments)
    index = app.template_index
    snapshot = app.run(index.load())
    if snapshot.status == LoadStatus.ERROR:
        app.emit(snapshot.to_result(op))
        return

    template = index.find_template(template_id)
    if template is None:
        app.emit(ServiceResult.failure(op, TemplateNotFound(template_id)))
        return

    try:
        preset = _select_preset(app, template, preset_id)
        user_input = user_input_for(preset, form_data)
    except NotewrightError as exc:
        app.emit(ServiceResult.failure(op, exc))
        return

    editor = MarkdownNoteEditor(note_path)
    service = InsertionService(_build_engine(app, editor), editor, ConsoleClipboard())
    result = service.insert_template(template, preset, user_input)
    if result.ok:
        editor.save()
        result = result.model_copy(update={"data": {**result.data, "path": str(note_path)}})
    app.emit(result)


@note.command()
@click.argument("note_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("preset_id")
@click.option("--set", "assignments", multiple=True, help=_SET_HELP)
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in UpdateMode]),
    default=UpdateMode.MERGE.value,
    show_default=True,
    help="Merge into the existing frontmatter or replace it.",
)
@click.pass_obj
def update(
    app: AppContext,
    note_path: Path,
    preset_id: str,
    assignments: tuple[str, ...],
    mode: str,
) -> None:
    """Fill NOTE_PATH's frontmatter from PRESET_ID's fields."""
    op = "update_frontmatter"
    form_data = parse_assignments(assignments)
    preset = app.presets.get_preset_by_id(preset_id)
    if preset is None:
        app.emit(ServiceResult.failure(op, PresetNotFound(preset_id)))
        return

    editor = MarkdownNoteEditor(note_path)
    engine = TemplateEngine(editor)
    current = engine.get_note_metadata().frontmatter
    # The note's own values outrank preset defaults for unsupplied fields.
    resolved = {**extract_preset_defaults(preset), **{k: current[k] for k in preset.field_keys if k in current}}
    try:
        user_input = user_input_for(preset, form_data, resolved)
    except NotewrightError as exc:
        app.emit(ServiceResult.failure(op, exc))
        return

    service = InsertionService(engine, editor, ConsoleClipboard())
    result = service.update_frontmatter(preset, user_input, UpdateMode(mode))
    if result.ok:
        editor.save()
        result = result.model_copy(update={"data": {**result.data, "path": str(note_path)}})
    app.emit(result)
