"""Command group: list, inspect, reload and watch the template folder."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from notewright.domain.content import parse_template_content
from notewright.domain.errors import TemplateNotFound
from notewright.domain.presets import resolve_preset_config_ids, strip_preset_config_keys
from notewright.domain.types import LoadStatus
from notewright.services.result import ServiceResult

if TYPE_CHECKING:
    from notewright.commands._context import AppContext
    from notewright.services.template_index import TemplateIndex, TemplateIndexSnapshot


@click.group()
@click.pass_obj
def templates(app: AppContext) -> None:
    """Browse the template folder."""


@templates.command(name="list")
@click.pass_obj
def list_templates(app: AppContext) -> None:
    """List every template in the configured folder."""
    snapshot = app.run(app.template_index.load())
    app.emit(snapshot.to_result("list_templates"))


@templates.command()
@click.argument("template_id")
@click.pass_obj
def show(app: AppContext, template_id: str) -> None:
    """Show one template's frontmatter, bound presets and body."""
    op = "show_template"
    index = app.template_index
    snapshot = app.run(index.load())
    if snapshot.status == LoadStatus.ERROR:
        app.emit(snapshot.to_result(op))
        return

    document = index.find_template(template_id)
    if document is None:
        app.emit(ServiceResult.failure(op, TemplateNotFound(template_id)))
        return

    frontmatter, body = parse_template_content(document.content)
    app.emit(
        ServiceResult(
            ok=True,
            op=op,
            data={
                "id": document.id,
                "name": document.name,
                "path": document.path,
                "presets": resolve_preset_config_ids(frontmatter),
                "frontmatter": strip_preset_config_keys(frontmatter),
                "body": body,
            },
        )
    )


@templates.command()
@click.pass_obj
def reload(app: AppContext) -> None:
    """Rescan the template folder and report the outcome."""
    snapshot = app.run(app.template_index.reload_templates(notify=False))
    app.emit(snapshot.to_result("reload_templates"))


@templates.command()
@click.option(
    "--duration",
    type=float,
    default=None,
    help="Stop after this many seconds (default: until interrupted).",
)
@click.pass_obj
def watch(app: AppContext, duration: float | None) -> None:
    """Keep the template list current while files change."""
    index = app.template_index
    try:
        snapshot = app.run(_watch(index, duration))
    except KeyboardInterrupt:
        snapshot = index.snapshot
    app.emit(
        ServiceResult(
            ok=snapshot.status != LoadStatus.ERROR,
            op="watch_templates",
            data={
                "folder": index.watched_folder_path or app.settings.templates.folder,
                "duration": duration,
                "count": snapshot.count,
                "status": snapshot.status.value,
            },
            error=snapshot.error,
        )
    )


async def _watch(index: TemplateIndex, duration: float | None) -> TemplateIndexSnapshot:
    await index.reload_templates(notify=True)
    index.start_watching()
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        index.dispose()
    return index.snapshot
