"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from notewright.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from notewright.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids for lists, a status line otherwise."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if isinstance(item, dict) and "id" in item)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="nw.ok"), Text(f"  {result.op}", style="nw.op"), end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="nw.key")
    if key in ("id", "template", "preset"):
        v = Text(str(value), style="nw.id")
    elif key in ("path", "folder"):
        v = Text(str(value), style="nw.path")
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":"), default=str))
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text("ERROR", style="nw.error"), Text(f"  {result.op}", style="nw.op"), Text(" - "), msg)
    if err:
        console.print(Text(f"  code: {err.code}", style="dim"))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Templates ─────────────────────────────────────────────────────────


def _render_template_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_templates / reload_templates as a table."""
    data = result.data
    status = str(data.get("status", ""))
    items = data.get("items", [])

    if items:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Name", style="nw.title")
        table.add_column("ID", style="nw.path", no_wrap=True)
        for item in items:
            table.add_row(str(item.get("name", "")), str(item.get("id", "")))
        console.print(table)
        console.print()

    console.print(Text(status, style=style_for_status(status)), Text(f" {data.get('message', '')}"))


def _render_template(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render show_template as a panel."""
    d = result.data
    lines: list[str] = [f"path: {d.get('path', '')}"]
    presets = d.get("presets") or []
    if presets:
        lines.append(f"presets: {', '.join(presets)}")
    frontmatter = d.get("frontmatter") or {}
    for key, value in frontmatter.items():
        lines.append(f"{key}: {value}")
    body = str(d.get("body", "")).strip()
    content = "\n".join(lines)
    if body:
        content += f"\n\n{body}"
    console.print(Panel(Text(content), title=str(d.get("name", "?")), border_style="dim", expand=False))


def _render_watch(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("folder", "duration", "count", "status"):
        if key in result.data:
            _field(console, key, result.data[key])


# ── Presets ───────────────────────────────────────────────────────────


def _render_preset_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="nw.id", no_wrap=True)
    table.add_column("Name", style="nw.title")
    table.add_column("Fields")
    for item in items:
        table.add_row(str(item.get("id", "")), str(item.get("name", "")), ", ".join(item.get("fields", [])))
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} presets")


def _render_matches(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Preset", style="nw.id", no_wrap=True)
    table.add_column("Score", style="nw.score", justify="right")
    table.add_column("Recommendation")
    if verbose:
        table.add_column("Reasons", style="dim")
    for item in items:
        row = [str(item.get("id", "")), f"{float(item.get('score', 0.0)):.2f}", str(item.get("recommendation", ""))]
        if verbose:
            row.append("; ".join(item.get("reasons", [])))
        table.add_row(*row)
    console.print(table)
    best = result.data.get("best")
    if best:
        console.print(f"\nBest match: [nw.id]{best}[/nw.id]")


# ── Notes ─────────────────────────────────────────────────────────────


def _render_note_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render insert_template / update_frontmatter results."""
    _status_line(console, result)
    for key in ("path", "template", "preset", "mode", "merge_count", "used_templater", "fallback"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose and "frontmatter" in result.data:
        _field(console, "frontmatter", result.data["frontmatter"])


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "list_templates": _render_template_list,
    "reload_templates": _render_template_list,
    "show_template": _render_template,
    "watch_templates": _render_watch,
    "list_presets": _render_preset_list,
    "match_presets": _render_matches,
    "insert_template": _render_note_mutation,
    "update_frontmatter": _render_note_mutation,
}
