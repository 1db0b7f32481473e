"""Error taxonomy.

Every error carries a stable ``code`` so service results and index
snapshots can report it without leaking exception types to callers.
"""

from __future__ import annotations

from typing import Any


class NotewrightError(Exception):
    """Base class for all notewright errors."""

    code = "NOTEWRIGHT_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class PathNotConfigured(NotewrightError):
    """No template folder is configured."""

    code = "PATH_NOT_CONFIGURED"

    def __init__(self) -> None:
        super().__init__("Template folder path is not set")


class PathInvalid(NotewrightError):
    """The configured path does not resolve to an existing folder."""

    code = "PATH_INVALID"

    def __init__(self, path: str) -> None:
        super().__init__(f'Template folder "{path}" does not exist or is not a folder', path=path)


class PathInaccessible(NotewrightError):
    """The folder exists but cannot be listed."""

    code = "PATH_INACCESSIBLE"

    def __init__(self, path: str, reason: str | None = None) -> None:
        message = f'Template folder "{path}" cannot be accessed'
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path=path)


class FileReadFailure(NotewrightError):
    """A single template file could not be read. Never fatal for a scan."""

    code = "FILE_READ_FAILED"

    def __init__(self, path: str, reason: str | None = None) -> None:
        message = f"Cannot read {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path=path)


class DateFieldInvalid(NotewrightError):
    """A date field received a value that cannot be parsed."""

    code = "DATE_FIELD_INVALID"

    def __init__(self, label: str, value: Any) -> None:
        super().__init__(f'Invalid date for field "{label}": {value!r}', field=label)


class TemplaterExpansionFailure(NotewrightError):
    """Template pre-processing failed; callers fall back to the raw text."""

    code = "TEMPLATER_FAILED"


class InsertionFailed(NotewrightError):
    """Both the normal and the body-only insertion paths failed."""

    code = "INSERTION_FAILED"


class TemplateNotFound(NotewrightError):
    code = "TEMPLATE_NOT_FOUND"

    def __init__(self, template_id: str) -> None:
        super().__init__(f'No template with id or name "{template_id}"', template=template_id)


class PresetNotFound(NotewrightError):
    code = "PRESET_NOT_FOUND"

    def __init__(self, preset_id: str) -> None:
        super().__init__(f'No preset with id "{preset_id}"', preset=preset_id)
