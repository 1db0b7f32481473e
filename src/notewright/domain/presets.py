"""Frontmatter presets — field definitions, sanitizing, and a read-only registry.

Presets are owned by configuration. Everything handed back to callers is
a deep copy so mutating a returned ``default`` list or ``options`` list
never reaches the configured preset.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from notewright.domain.types import FieldType

# Frontmatter key a template uses to bind itself to one or more presets.
PRESET_CONFIG_KEY = "note-architect-config"

# Older spellings of the binding key, still read but never written.
LEGACY_PRESET_CONFIG_KEYS: tuple[str, ...] = ("note-architect-preset", "note_architect_config")


class FrontmatterField(BaseModel):
    """One field of a preset. ``default`` is kept exactly as configured."""

    model_config = {"frozen": True, "populate_by_name": True}

    key: str
    label: str
    type: FieldType = FieldType.TEXT
    default: Any = ""
    options: list[str] | None = None
    use_templater_timestamp: bool = Field(default=False, alias="useTemplaterTimestamp")
    description: str | None = None


class FrontmatterPreset(BaseModel):
    """A named, ordered set of fields. Field order defines output key order."""

    model_config = {"frozen": True}

    id: str
    name: str
    fields: list[FrontmatterField] = Field(default_factory=list)
    description: str | None = None

    @field_validator("fields")
    @classmethod
    def _unique_keys(cls, fields: list[FrontmatterField]) -> list[FrontmatterField]:
        seen: set[str] = set()
        for item in fields:
            if item.key in seen:
                msg = f"Duplicate field key: {item.key!r}"
                raise ValueError(msg)
            seen.add(item.key)
        return fields

    @property
    def field_keys(self) -> list[str]:
        return [item.key for item in self.fields]


# ---------------------------------------------------------------------------
# Value normalization
# ---------------------------------------------------------------------------


def normalize_string_list(raw: Any, allowed: Iterable[str] | None = None) -> list[str]:
    """Coerce *raw* into a trimmed, deduplicated list of strings.

    Lists keep their order; a bare string becomes a one-item list; any
    other value yields ``[]``. When *allowed* is non-empty, values not in
    it are dropped.

    Examples:
        >>> normalize_string_list([" a", "b", "a", ""])
        ['a', 'b']
        >>> normalize_string_list(["a", "x"], allowed={"a", "b"})
        ['a']
    """
    allowed_set = set(allowed) if allowed else None

    if isinstance(raw, (list, tuple)):
        candidates = list(raw)
    elif isinstance(raw, str):
        candidates = [raw]
    else:
        return []

    result: list[str] = []
    for candidate in candidates:
        value = str(candidate).strip()
        if not value or value in result:
            continue
        if allowed_set is not None and value not in allowed_set:
            continue
        result.append(value)
    return result


def allowed_options(field: FrontmatterField) -> set[str] | None:
    """Trimmed, non-empty options of *field*, or None when it has none."""
    if not field.options:
        return None
    options = {option.strip() for option in field.options if option and option.strip()}
    return options or None


def normalize_field_default(field_type: FieldType, raw: Any) -> str | list[str]:
    """Shape a raw default to what *field_type* stores.

    Single-value fields given a list keep its first entry.

    Examples:
        >>> normalize_field_default(FieldType.SELECT, ["draft", "done"])
        'draft'
    """
    if field_type == FieldType.MULTI_SELECT:
        return normalize_string_list(raw)
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if isinstance(raw, str):
        return raw
    if raw is None:
        return ""
    return str(raw)


# ---------------------------------------------------------------------------
# Copies and sanitizing
# ---------------------------------------------------------------------------


def clone_preset(preset: FrontmatterPreset) -> FrontmatterPreset:
    """Deep copy of *preset* and all of its fields."""
    return preset.model_copy(deep=True)


def sanitize_field(raw: Any, *, strict: bool = False) -> FrontmatterField | None:
    """Build a clean :class:`FrontmatterField` from loosely-typed data.

    Keys and labels are trimmed, unknown types fall back to ``text``,
    defaults are normalized for the type and options are trimmed.

    Returns None for unusable input, or raises ``ValueError`` when
    *strict* is set.
    """

    def reject(reason: str) -> None:
        if strict:
            msg = f"Invalid field: {reason}"
            raise ValueError(msg)

    if not isinstance(raw, Mapping):
        reject("a field must be a mapping")
        return None

    key = str(raw.get("key") or "").strip()
    label = str(raw.get("label") or "").strip()
    if not key:
        reject("missing key")
        return None
    if not label:
        reject("missing label")
        return None

    raw_type = raw.get("type") or FieldType.TEXT.value
    try:
        field_type = FieldType(raw_type)
    except ValueError:
        reject(f"unsupported type {raw_type!r}")
        field_type = FieldType.TEXT

    data: dict[str, Any] = {
        "key": key,
        "label": label,
        "type": field_type,
        "default": normalize_field_default(field_type, raw.get("default")),
    }

    options = raw.get("options")
    if isinstance(options, (list, tuple)) and options:
        data["options"] = [str(option).strip() for option in options if str(option).strip()]

    if raw.get("use_templater_timestamp") is True or raw.get("useTemplaterTimestamp") is True:
        data["use_templater_timestamp"] = True

    description = raw.get("description")
    if isinstance(description, str) and description.strip():
        data["description"] = description.strip()

    return FrontmatterField(**data)


# ---------------------------------------------------------------------------
# Template binding
# ---------------------------------------------------------------------------


def resolve_preset_config_ids(frontmatter: Mapping[str, Any]) -> list[str]:
    """Preset ids a template binds itself to, current key first then legacy keys."""
    ids: list[str] = []
    for key in (PRESET_CONFIG_KEY, *LEGACY_PRESET_CONFIG_KEYS):
        for value in normalize_string_list(frontmatter.get(key)):
            if value not in ids:
                ids.append(value)
    return ids


def strip_preset_config_keys(frontmatter: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of *frontmatter* without the binding key or its legacy aliases."""
    hidden = {PRESET_CONFIG_KEY, *LEGACY_PRESET_CONFIG_KEYS}
    return {key: value for key, value in frontmatter.items() if key not in hidden}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class PresetRegistry:
    """Read-only view over the configured presets.

    Lookups return deep copies; the registry's own presets are never
    exposed to callers.
    """

    def __init__(self, presets: Iterable[FrontmatterPreset]) -> None:
        self._presets = [clone_preset(preset) for preset in presets]

    def __len__(self) -> int:
        return len(self._presets)

    def get_presets(self) -> list[FrontmatterPreset]:
        return [clone_preset(preset) for preset in self._presets]

    def get_preset_by_id(self, preset_id: str) -> FrontmatterPreset | None:
        for preset in self._presets:
            if preset.id == preset_id:
                return clone_preset(preset)
        return None

    def presets_for_template(self, frontmatter: Mapping[str, Any]) -> list[FrontmatterPreset]:
        """Presets a template's frontmatter binds to, in binding order."""
        bound: list[FrontmatterPreset] = []
        for preset_id in resolve_preset_config_ids(frontmatter):
            preset = self.get_preset_by_id(preset_id)
            if preset is not None:
                bound.append(preset)
        return bound
