"""Frontmatter text handling — parsing and serializing notes.

A frontmatter block is a line containing exactly ``---``, a YAML mapping,
and a closing ``---`` line. Serialized blocks are followed by one blank
line before the body.

Parsing is lenient: broken YAML yields an empty mapping and the body is
kept, so a bad header never costs the user their note text.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

FRONTMATTER_DELIMITER = "---"


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML instance.

    ruamel's YAML object keeps emitter state between calls, so each parse
    or dump gets its own instance.
    """
    y = YAML()
    y.preserve_quotes = True
    y.default_flow_style = False
    y.indent(mapping=2, sequence=4, offset=2)
    y.width = sys.maxsize
    y.representer.ignore_aliases = lambda *_args: True
    return y


@dataclass(frozen=True)
class ParsedFrontmatter:
    """Result of splitting a document into frontmatter and body."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    has_frontmatter: bool = False
    end_line: int | None = None


def parse_frontmatter(content: str) -> ParsedFrontmatter:
    """Split *content* into its frontmatter mapping and body.

    ``end_line`` is the zero-based line index of the closing delimiter.
    Handles both ``\\n`` and ``\\r\\n`` line endings.
    """
    normalized = content.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return ParsedFrontmatter(body=content)

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONTMATTER_DELIMITER:
            end_idx = i
            break

    if end_idx is None:
        return ParsedFrontmatter(body=content)

    yaml_block = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])
    if body.startswith("\n"):
        body = body[1:]

    try:
        loaded = _new_yaml().load(yaml_block)
    except YAMLError:
        loaded = None

    frontmatter = dict(loaded) if isinstance(loaded, Mapping) else {}
    return ParsedFrontmatter(
        frontmatter=frontmatter,
        body=body,
        has_frontmatter=True,
        end_line=end_idx,
    )


def parse_template_content(content: str) -> tuple[dict[str, Any], str]:
    """Return a template's ``(embedded_frontmatter, body)``.

    The body is stripped when the template carries a frontmatter block.
    """
    parsed = parse_frontmatter(content)
    if parsed.has_frontmatter:
        return parsed.frontmatter, parsed.body.strip()
    return {}, parsed.body


def dump_yaml(record: Mapping[str, Any]) -> str:
    """Serialize *record* as a YAML mapping (no delimiters)."""
    if not record:
        return ""
    buf = StringIO()
    _new_yaml().dump(dict(record), buf)
    return buf.getvalue()


def serialize_frontmatter_block(record: Mapping[str, Any]) -> str:
    """Render *record* as ``---`` / YAML / ``---`` followed by a blank line."""
    return f"{FRONTMATTER_DELIMITER}\n{dump_yaml(record)}{FRONTMATTER_DELIMITER}\n\n"
