"""Form input to frontmatter conversion.

Turns raw user input (one value per preset field) into typed frontmatter
values: dates become ``YYYY-MM-DD``, multi-selects become filtered lists,
text is trimmed. Every preset field appears in the output.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from notewright.domain.errors import DateFieldInvalid
from notewright.domain.presets import (
    FrontmatterField,
    FrontmatterPreset,
    allowed_options,
    normalize_string_list,
)
from notewright.domain.types import FieldType


def coerce_date(field: FrontmatterField, raw: Any) -> str:
    """Normalize *raw* to an ISO date for a date-typed *field*.

    Fields that take a Templater timestamp keep string input verbatim.
    Numbers are epoch milliseconds. Aware datetimes are converted to UTC
    first.

    Raises:
        DateFieldInvalid: If *raw* cannot be read as a date.
    """
    if field.use_templater_timestamp:
        return raw if isinstance(raw, str) else ""

    if isinstance(raw, datetime):
        moment = raw.astimezone(UTC) if raw.tzinfo else raw
        return moment.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    if isinstance(raw, bool):
        raise DateFieldInvalid(field.label, raw)
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw / 1000, tz=UTC).date().isoformat()
        except (OverflowError, OSError, ValueError) as exc:
            raise DateFieldInvalid(field.label, raw) from exc
    if isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw.strip())
        except ValueError as exc:
            raise DateFieldInvalid(field.label, raw) from exc
        return coerce_date(field, parsed)

    raise DateFieldInvalid(field.label, raw)


def _text_value(raw: Any) -> Any:
    return raw.strip() if isinstance(raw, str) else raw


def convert_form_data(
    preset: FrontmatterPreset,
    form_data: Mapping[str, Any],
    resolved_defaults: Mapping[str, str | list[str]] | None = None,
) -> dict[str, Any]:
    """Typed frontmatter for every field of *preset*.

    A field's value comes from *form_data* when present and not None,
    otherwise from *resolved_defaults*. Missing or blank values become
    ``""`` (or ``[]`` for multi-select).
    """
    frontmatter: dict[str, Any] = {}
    for field in preset.fields:
        raw = form_data.get(field.key)
        if raw is None and resolved_defaults is not None:
            raw = resolved_defaults.get(field.key)

        if raw is None or raw == "":
            frontmatter[field.key] = [] if field.type == FieldType.MULTI_SELECT else ""
            continue

        if field.type == FieldType.DATE:
            frontmatter[field.key] = coerce_date(field, raw)
        elif field.type == FieldType.MULTI_SELECT:
            frontmatter[field.key] = normalize_string_list(raw, allowed_options(field))
        else:
            frontmatter[field.key] = _text_value(raw)
    return frontmatter
