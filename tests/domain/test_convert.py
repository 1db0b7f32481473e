"""Tests for form input conversion."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from notewright.domain.convert import coerce_date, convert_form_data
from notewright.domain.errors import DateFieldInvalid
from notewright.domain.presets import FrontmatterField, FrontmatterPreset
from notewright.domain.types import FieldType

DATE_FIELD = FrontmatterField(key="due", label="Due", type=FieldType.DATE)


class TestCoerceDate:
    def test_iso_string(self) -> None:
        assert coerce_date(DATE_FIELD, "2024-03-05") == "2024-03-05"
        assert coerce_date(DATE_FIELD, " 2024-03-05T10:30:00 ") == "2024-03-05"

    def test_date_and_datetime(self) -> None:
        assert coerce_date(DATE_FIELD, date(2024, 1, 2)) == "2024-01-02"
        assert coerce_date(DATE_FIELD, datetime(2024, 1, 2, 23, 0)) == "2024-01-02"

    def test_aware_datetime_converted_to_utc(self) -> None:
        moment = datetime(2024, 1, 2, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert coerce_date(DATE_FIELD, moment) == "2024-01-03"

    def test_epoch_milliseconds(self) -> None:
        millis = datetime(2024, 6, 1, 12, tzinfo=UTC).timestamp() * 1000
        assert coerce_date(DATE_FIELD, millis) == "2024-06-01"

    @pytest.mark.parametrize("raw", ["not a date", True, object(), "2024-13-45"])
    def test_invalid(self, raw: object) -> None:
        with pytest.raises(DateFieldInvalid) as excinfo:
            coerce_date(DATE_FIELD, raw)
        assert excinfo.value.code == "DATE_FIELD_INVALID"
        assert excinfo.value.detail == {"field": "Due"}

    def test_templater_timestamp_kept_verbatim(self) -> None:
        field = DATE_FIELD.model_copy(update={"use_templater_timestamp": True})
        assert coerce_date(field, "<% tp.date.now() %>") == "<% tp.date.now() %>"
        assert coerce_date(field, 123) == ""


class TestConvertFormData:
    @pytest.fixture
    def preset(self) -> FrontmatterPreset:
        return FrontmatterPreset(
            id="p",
            name="P",
            fields=[
                FrontmatterField(key="title", label="Title"),
                FrontmatterField(key="due", label="Due", type=FieldType.DATE),
                FrontmatterField(key="tags", label="Tags", type=FieldType.MULTI_SELECT, options=["a", "b"]),
                FrontmatterField(key="status", label="Status", type=FieldType.SELECT),
            ],
        )

    def test_every_field_present(self, preset: FrontmatterPreset) -> None:
        assert convert_form_data(preset, {}) == {"title": "", "due": "", "tags": [], "status": ""}

    def test_values_converted(self, preset: FrontmatterPreset) -> None:
        result = convert_form_data(
            preset,
            {"title": "  Hello ", "due": "2024-02-03", "tags": ["a", "x", "b", "a"], "status": " done "},
        )
        assert result == {"title": "Hello", "due": "2024-02-03", "tags": ["a", "b"], "status": "done"}

    def test_resolved_defaults_fill_gaps(self, preset: FrontmatterPreset) -> None:
        result = convert_form_data(preset, {"title": "T"}, {"title": "ignored", "status": "draft"})
        assert result["title"] == "T"
        assert result["status"] == "draft"

    def test_blank_string_becomes_empty(self, preset: FrontmatterPreset) -> None:
        assert convert_form_data(preset, {"due": "", "tags": ""})["tags"] == []

    def test_bad_date_raises(self, preset: FrontmatterPreset) -> None:
        with pytest.raises(DateFieldInvalid):
            convert_form_data(preset, {"due": "tomorrow-ish"})

    def test_extra_keys_ignored(self, preset: FrontmatterPreset) -> None:
        assert "other" not in convert_form_data(preset, {"other": 1})
