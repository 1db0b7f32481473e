"""Tests for frontmatter parsing and serializing."""

from __future__ import annotations

from notewright.domain.content import (
    dump_yaml,
    parse_frontmatter,
    parse_template_content,
    serialize_frontmatter_block,
)


class TestParseFrontmatter:
    def test_basic(self) -> None:
        parsed = parse_frontmatter("---\ntitle: Hello\ntags:\n  - a\n---\n\nBody text\n")
        assert parsed.has_frontmatter is True
        assert parsed.frontmatter == {"title": "Hello", "tags": ["a"]}
        assert parsed.body == "Body text\n"
        assert parsed.end_line == 4

    def test_no_frontmatter(self) -> None:
        parsed = parse_frontmatter("Just text")
        assert parsed.has_frontmatter is False
        assert parsed.frontmatter == {}
        assert parsed.body == "Just text"
        assert parsed.end_line is None

    def test_unclosed_block_is_body(self) -> None:
        parsed = parse_frontmatter("---\ntitle: x\nno end")
        assert parsed.has_frontmatter is False
        assert parsed.body == "---\ntitle: x\nno end"

    def test_invalid_yaml_keeps_body(self) -> None:
        parsed = parse_frontmatter("---\na: [1, 2\n---\nbody")
        assert parsed.has_frontmatter is True
        assert parsed.frontmatter == {}
        assert parsed.body == "body"

    def test_crlf(self) -> None:
        parsed = parse_frontmatter("---\r\na: 1\r\n---\r\nbody")
        assert parsed.frontmatter == {"a": 1}
        assert parsed.body == "body"

    def test_non_mapping_yaml(self) -> None:
        parsed = parse_frontmatter("---\n- a\n- b\n---\nbody")
        assert parsed.has_frontmatter is True
        assert parsed.frontmatter == {}


class TestParseTemplateContent:
    def test_body_stripped_with_frontmatter(self) -> None:
        frontmatter, body = parse_template_content("---\na: 1\n---\n\n  # Heading\n\n")
        assert frontmatter == {"a": 1}
        assert body == "# Heading"

    def test_body_untouched_without_frontmatter(self) -> None:
        assert parse_template_content("  # Heading\n") == ({}, "  # Heading\n")


class TestSerialize:
    def test_block_shape(self) -> None:
        block = serialize_frontmatter_block({"title": "Hi", "tags": ["a", "b"]})
        assert block == "---\ntitle: Hi\ntags:\n  - a\n  - b\n---\n\n"

    def test_empty_record(self) -> None:
        assert serialize_frontmatter_block({}) == "---\n---\n\n"
        assert dump_yaml({}) == ""

    def test_long_values_are_not_wrapped(self) -> None:
        text = "word " * 60
        assert "\n" not in dump_yaml({"summary": text.strip()}).rstrip("\n")

    def test_shared_objects_have_no_anchors(self) -> None:
        shared = ["x"]
        dumped = dump_yaml({"a": shared, "b": shared})
        assert "&" not in dumped
        assert "*" not in dumped
