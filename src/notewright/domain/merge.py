"""Frontmatter merge pipeline.

Four sources are combined, lowest to highest precedence::

    preset defaults < note metadata < template metadata < user input

Each step is one :func:`merge_frontmatters` call. ``tags`` is the only
key that accumulates instead of being replaced. The result is then
stripped of preset-binding keys and re-ordered so the preset's fields
come first, in field order.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from notewright.domain.presets import (
    LEGACY_PRESET_CONFIG_KEYS,
    PRESET_CONFIG_KEY,
    FrontmatterPreset,
    allowed_options,
    normalize_string_list,
)
from notewright.domain.types import FieldType

TAGS_KEY = "tags"


def _as_tag_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value] if value else []


def _union(values: list[Any]) -> list[Any]:
    """Deduplicate *values*, keeping first-seen order."""
    result: list[Any] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


def merge_frontmatters(
    base: Mapping[str, Any] | None,
    override: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Return *base* overridden key-by-key by *override*.

    ``tags`` is the union of both sides (scalars are wrapped, missing or
    empty values count as no tags), in first-seen order. Neither input is
    modified.
    """
    merged: dict[str, Any] = dict(base or {})
    for key, value in (override or {}).items():
        if key == TAGS_KEY:
            merged[key] = _union(_as_tag_list(merged.get(key)) + _as_tag_list(value))
            continue
        merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Preset defaults
# ---------------------------------------------------------------------------


def coerce_default_to_string(value: Any) -> str:
    """Reduce a configured default to one trimmed string.

    Examples:
        >>> coerce_default_to_string(["  first ", "second"])
        'first'
        >>> coerce_default_to_string(None)
        ''
    """
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        first = value[0] if value else None
        return first.strip() if isinstance(first, str) else ""
    if value is None:
        return ""
    return str(value).strip()


def extract_preset_defaults(preset: FrontmatterPreset) -> dict[str, Any]:
    """Base record of the preset's non-empty defaults.

    Empty defaults are omitted entirely: an explicit ``""`` would outrank
    a value the note already carries.
    """
    defaults: dict[str, Any] = {}
    for field in preset.fields:
        if field.type == FieldType.MULTI_SELECT:
            values = normalize_string_list(field.default, allowed_options(field))
            if values:
                defaults[field.key] = values
            continue

        value = coerce_default_to_string(field.default)
        if value:
            defaults[field.key] = value
    return defaults


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def order_by_preset(preset: FrontmatterPreset, record: Mapping[str, Any]) -> dict[str, Any]:
    """Preset field keys first (field order), then the rest in existing order."""
    preset_keys = preset.field_keys
    ordered = {key: record[key] for key in preset_keys if key in record}
    for key, value in record.items():
        if key not in ordered:
            ordered[key] = value
    return ordered


def resolve_frontmatter(
    preset: FrontmatterPreset,
    note_metadata: Mapping[str, Any] | None,
    template_metadata: Mapping[str, Any] | None,
    user_input: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Combine all four sources into one ordered record ready for output."""
    result = merge_frontmatters(extract_preset_defaults(preset), note_metadata)
    result = merge_frontmatters(result, template_metadata)
    result = merge_frontmatters(result, user_input)

    for key in (PRESET_CONFIG_KEY, *LEGACY_PRESET_CONFIG_KEYS):
        result.pop(key, None)

    return order_by_preset(preset, result)
