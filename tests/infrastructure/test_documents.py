"""Tests for reading and writing Markdown documents."""

from __future__ import annotations

from pathlib import Path

import pytest

from fmctl.domain.frontmatter import Position
from fmctl.infrastructure.documents import FileDocumentWriter, load_document, read_document
from tests.conftest import make_context


class TestLoadDocument:
    def test_parses_frontmatter(self, tmp_path: Path) -> None:
        path = tmp_path / "note.md"
        path.write_text("---\ntitle: A\n---\n\nBody", encoding="utf-8")
        context = load_document(path)
        assert context.path == path
        assert context.frontmatter == {"title": "A"}
        assert context.position == Position(start=0, end=2)

    def test_crlf_preserved(self, tmp_path: Path) -> None:
        path = tmp_path / "note.md"
        path.write_bytes(b"---\r\ntitle: A\r\n---\r\n\r\nBody")
        assert read_document(path) == "---\r\ntitle: A\r\n---\r\n\r\nBody"
        assert load_document(path).frontmatter == {"title": "A"}


class TestFileDocumentWriter:
    def test_writes_context_path(self, tmp_path: Path) -> None:
        path = tmp_path / "note.md"
        FileDocumentWriter().write(make_context("Body", path), "---\nx: 1\n---\n\nBody")
        assert path.read_text(encoding="utf-8") == "---\nx: 1\n---\n\nBody"

    def test_fallback_path(self, tmp_path: Path) -> None:
        target = tmp_path / "out" / "note.md"
        FileDocumentWriter(fallback_path=target).write(make_context("Body"), "Body")
        assert target.read_text(encoding="utf-8") == "Body"

    def test_no_path(self) -> None:
        with pytest.raises(ValueError, match="no path"):
            FileDocumentWriter().write(make_context("Body"), "Body")
