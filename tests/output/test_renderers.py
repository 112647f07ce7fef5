"""Tests for the rich renderers."""

from __future__ import annotations

from fmctl.output.renderers import render_quiet, render_result
from fmctl.services.result import ServiceError, ServiceResult, failure


class TestRenderQuiet:
    def test_items(self) -> None:
        result = ServiceResult(
            ok=True, op="list_presets", data={"items": [{"id": "a"}, {"id": "b"}], "count": 2}
        )
        assert render_quiet(result) == "a\nb"

    def test_ok(self) -> None:
        assert render_quiet(ServiceResult(ok=True, op="bind_preset")) == "OK: bind_preset"

    def test_error(self) -> None:
        result = failure("apply", "NO_PRESET", "No preset given")
        assert render_quiet(result) == "ERROR: apply — No preset given"


class TestRenderResult:
    def test_field_lines_single_spaced(self) -> None:
        result = ServiceResult(ok=True, op="rename", data={"path": "a.md", "changed": True})
        lines = render_result(result).splitlines()
        assert lines[0] == "OK  rename"
        assert "  path: a.md" in lines
        assert "  changed: True" in lines

    def test_apply_shows_table_when_not_written(self) -> None:
        result = ServiceResult(
            ok=True,
            op="prepare",
            data={
                "preset_id": "meeting",
                "mode": "merge",
                "changed": True,
                "written": False,
                "frontmatter": {"status": "done", "tags": ["x", "y"], "empty": []},
                "skipped_defaults": ["created"],
            },
        )
        output = render_result(result)
        assert "preset_id: meeting" in output
        assert "skipped_defaults: created" in output
        assert "x, y" in output
        assert "[]" in output

    def test_apply_hides_table_once_written(self) -> None:
        result = ServiceResult(
            ok=True,
            op="apply",
            data={"preset_id": "meeting", "written": True, "frontmatter": {"status": "done"}},
        )
        assert "status" not in render_result(result)
        assert "status" in render_result(result, verbose=True)

    def test_bind_false_values_shown(self) -> None:
        result = ServiceResult(
            ok=True,
            op="bind_preset",
            data={"preset_id": "meeting", "changed": False, "written": False, "path": None},
        )
        output = render_result(result)
        assert "changed: False" in output
        assert "path" not in output

    def test_markup_in_values_is_literal(self) -> None:
        result = ServiceResult(
            ok=True,
            op="show",
            data={"has_frontmatter": True, "frontmatter": {"title": "[red]x[/red]"}},
        )
        assert "[red]x[/red]" in render_result(result)

    def test_export_content_printed_verbatim(self) -> None:
        content = '{\n  "presets": []\n}\n'
        result = ServiceResult(ok=True, op="export_presets", data={"content": content, "count": 0})
        assert render_result(result) == content.rstrip("\n")

    def test_generic_fallback(self) -> None:
        output = render_result(ServiceResult(ok=True, op="custom", data={"k": [1, 2]}))
        assert "custom" in output
        assert "k: 1, 2" in output


class TestRenderError:
    def test_lists_each_error(self) -> None:
        result = failure(
            "validate_preset",
            "VALIDATION_FAILED",
            "Preset 'p' has 2 problem(s)",
            errors=["first problem", "second problem"],
        )
        output = render_result(result)
        assert "ERROR" in output
        assert "- first problem" in output
        assert "- second problem" in output

    def test_detail_only_when_verbose(self) -> None:
        result = ServiceResult(
            ok=False,
            op="apply",
            error=ServiceError(code="X", message="bad", detail={"source": "a.json"}),
        )
        assert "source" not in render_result(result)
        assert "source: a.json" in render_result(result, verbose=True)
