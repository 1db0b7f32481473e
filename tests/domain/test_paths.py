"""Tests for vault path normalization."""

from __future__ import annotations

import pytest

from notewright.domain.paths import is_inside_folder, normalize_path


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Templates", "Templates"),
            ("/Templates/", "Templates"),
            ("Templates\\daily\\", "Templates/daily"),
            ("  notes/x.md  ", "notes/x.md"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize(self, raw: str | None, expected: str) -> None:
        assert normalize_path(raw) == expected


class TestIsInsideFolder:
    def test_folder_itself(self) -> None:
        assert is_inside_folder("Templates", "Templates/")

    def test_descendant(self) -> None:
        assert is_inside_folder("Templates/a/b.md", "Templates")

    def test_sibling_with_shared_prefix(self) -> None:
        assert not is_inside_folder("TemplatesOld/a.md", "Templates")

    def test_empty_folder_matches_nothing(self) -> None:
        assert not is_inside_folder("a.md", "")
