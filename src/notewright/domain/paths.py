"""Vault-relative path normalization and containment checks.

Vault paths are always POSIX-style and relative to the vault root, so
``Templates``, ``/Templates/`` and ``Templates\\`` all name one folder.
"""

from __future__ import annotations

import re

_EDGE_SLASHES = re.compile(r"^/+|/+$")


def normalize_path(path: str | None) -> str:
    """Return *path* with forward slashes and no leading/trailing slashes.

    Examples:
        >>> normalize_path("\\\\Templates\\\\daily\\\\")
        'Templates/daily'
        >>> normalize_path("  /notes/  ")
        'notes'
    """
    if not path:
        return ""
    return _EDGE_SLASHES.sub("", path.replace("\\", "/").strip())


def is_inside_folder(path: str | None, folder: str | None) -> bool:
    """True when *path* is *folder* itself or lives anywhere beneath it."""
    normalized_folder = normalize_path(folder)
    if not normalized_folder:
        return False
    normalized = normalize_path(path)
    return normalized == normalized_folder or normalized.startswith(f"{normalized_folder}/")
