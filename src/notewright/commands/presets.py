"""Command group: configured presets and preset recommendations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from notewright.domain.errors import TemplateNotFound
from notewright.domain.matching import recommendation_text
from notewright.domain.types import LoadStatus
from notewright.services.result import ServiceResult

if TYPE_CHECKING:
    from notewright.commands._context import AppContext


@click.group()
@click.pass_obj
def presets(app: AppContext) -> None:
    """Inspect frontmatter presets."""


@presets.command(name="list")
@click.pass_obj
def list_presets(app: AppContext) -> None:
    """List the presets defined in configuration."""
    items = [
        {
            "id": preset.id,
            "name": preset.name,
            "fields": preset.field_keys,
            "description": preset.description,
        }
        for preset in app.presets.get_presets()
    ]
    app.emit(ServiceResult(ok=True, op="list_presets", data={"count": len(items), "items": items}))


@presets.command()
@click.argument("template_id")
@click.pass_obj
def match(app: AppContext, template_id: str) -> None:
    """Rank presets by how well they fit TEMPLATE_ID."""
    op = "match_presets"
    index = app.template_index
    snapshot = app.run(index.load())
    if snapshot.status == LoadStatus.ERROR:
        app.emit(snapshot.to_result(op))
        return

    document = index.find_template(template_id)
    if document is None:
        app.emit(ServiceResult.failure(op, TemplateNotFound(template_id)))
        return

    matcher = app.matcher()
    results = matcher.match_presets(document, app.presets.get_presets())
    best = results[0] if results and results[0].score > 0 else None
    items = [
        {
            "id": result.preset.id,
            "name": result.preset.name,
            "score": round(result.score, 4),
            "reasons": result.reasons,
            "recommendation": recommendation_text(result),
        }
        for result in results
    ]
    app.emit(
        ServiceResult(
            ok=True,
            op=op,
            data={
                "template": document.id,
                "count": len(items),
                "items": items,
                "best": best.preset.id if best else None,
            },
        )
    )
