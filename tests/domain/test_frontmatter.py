"""Tests for frontmatter block parsing."""

from __future__ import annotations

from datetime import date

import pytest

from fmctl.domain.frontmatter import (
    Position,
    find_block,
    is_delimiter,
    load_yaml_mapping,
    parse_frontmatter,
)
from fmctl.domain.mutation import render_block, serialize_frontmatter


class TestParseFrontmatter:
    def test_basic_block(self) -> None:
        doc = parse_frontmatter("---\ntitle: A\ntags: [x, y]\n---\n\nBody")
        assert doc.has_frontmatter is True
        assert doc.frontmatter == {"title": "A", "tags": ["x", "y"]}
        assert doc.body == "Body"
        assert doc.position == Position(start=0, end=3)

    def test_no_block_keeps_content_as_body(self) -> None:
        doc = parse_frontmatter("# Title\nBody section")
        assert doc.has_frontmatter is False
        assert doc.frontmatter == {}
        assert doc.body == "# Title\nBody section"
        assert doc.position is None

    def test_unclosed_block_is_not_frontmatter(self) -> None:
        doc = parse_frontmatter("---\ntitle: A\n")
        assert doc.has_frontmatter is False
        assert doc.position is None

    def test_block_must_start_on_first_line(self) -> None:
        doc = parse_frontmatter("\n---\ntitle: A\n---\n")
        assert doc.has_frontmatter is False

    def test_invalid_yaml_yields_empty_map(self) -> None:
        doc = parse_frontmatter('---\ntitle: "unterminated\n---\n\nBody content')
        assert doc.frontmatter == {}
        assert doc.has_frontmatter is True
        assert doc.body.strip() == "Body content"
        assert doc.position == Position(start=0, end=2)

    def test_non_mapping_yaml_yields_empty_map(self) -> None:
        doc = parse_frontmatter("---\n- a\n- b\n---\nBody")
        assert doc.frontmatter == {}
        assert doc.has_frontmatter is True

    def test_deeply_nested_yaml_yields_empty_map(self) -> None:
        nested = "[" * 3000 + "]" * 3000
        doc = parse_frontmatter(f"---\na: {nested}\n---\nbody")
        assert doc.frontmatter == {}
        assert doc.has_frontmatter is True
        assert doc.body == "body"

    def test_empty_block(self) -> None:
        doc = parse_frontmatter("---\n---\nBody")
        assert doc.frontmatter == {}
        assert doc.has_frontmatter is True
        assert doc.position == Position(start=0, end=1)
        assert doc.body == "Body"

    def test_crlf_line_endings(self) -> None:
        doc = parse_frontmatter("---\r\ntitle: A\r\n---\r\nBody")
        assert doc.frontmatter == {"title": "A"}
        assert doc.body == "Body"
        assert doc.position == Position(start=0, end=2)

    def test_dates_decode_to_date_objects(self) -> None:
        doc = parse_frontmatter("---\ndue: 2024-05-01\n---\n")
        assert doc.frontmatter["due"] == date(2024, 5, 1)

    def test_only_one_separator_line_is_dropped(self) -> None:
        doc = parse_frontmatter("---\na: 1\n---\n\n\nBody")
        assert doc.body == "\nBody"

    def test_round_trip(self) -> None:
        meta = {"title": "A", "tags": ["x", "y"], "count": 3, "due": date(2024, 5, 1)}
        content = render_block(serialize_frontmatter(meta)) + "Body\n"
        doc = parse_frontmatter(content)
        assert doc.frontmatter == meta
        assert doc.body == "Body\n"


class TestHelpers:
    @pytest.mark.parametrize("line", ["---", "---  ", "  ---", "---\r"])
    def test_delimiters(self, line: str) -> None:
        assert is_delimiter(line)

    @pytest.mark.parametrize("line", ["----", "--", "--- x", ""])
    def test_non_delimiters(self, line: str) -> None:
        assert not is_delimiter(line)

    def test_find_block_uses_first_closing_delimiter(self) -> None:
        lines = ["---", "a: 1", "---", "text", "---"]
        assert find_block(lines) == Position(start=0, end=2)

    def test_find_block_empty_input(self) -> None:
        assert find_block([]) is None

    def test_load_yaml_mapping_blank(self) -> None:
        assert load_yaml_mapping("") == {}

    def test_position_line_count(self) -> None:
        assert Position(start=0, end=3).line_count == 4
