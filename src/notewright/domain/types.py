"""Classification enums shared across layers."""

from __future__ import annotations

from enum import StrEnum


class FieldType(StrEnum):
    """Input kinds a preset field can declare."""

    TEXT = "text"
    DATE = "date"
    SELECT = "select"
    MULTI_SELECT = "multi-select"


class LoadStatus(StrEnum):
    """Lifecycle states of a template index snapshot."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


class UpdateMode(StrEnum):
    """How user input is applied to a note's existing frontmatter."""

    MERGE = "merge"
    OVERWRITE = "overwrite"
