"""Tests for the presets command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from fmctl.cli import cli
from tests.conftest import MEETING_PRESET_JSON, write_presets


@pytest.mark.usefixtures("workspace")
class TestListAndShow:
    def test_default_lists(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["presets"])
        assert result.exit_code == 0
        assert "meeting" in result.output
        assert "1 presets" in result.output

    def test_quiet_list_prints_ids(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "presets", "list"])
        assert result.exit_code == 0
        assert result.output == "meeting\n"

    def test_show_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "presets", "show", "meeting"])
        assert result.exit_code == 0
        preset = json.loads(result.output)["data"]["preset"]
        assert [f["key"] for f in preset["fields"]] == ["status", "tags", "due"]

    def test_show_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["presets", "show", "meeting"])
        assert result.exit_code == 0
        assert "multi-select" in result.output
        assert "todo, done" in result.output

    def test_show_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "presets", "show", "nope"])
        assert result.exit_code == 1
        assert "ERROR: get_preset" in result.output

    def test_broken_presets_file(self, cli_runner: CliRunner, workspace: Path) -> None:
        (workspace / "presets.json").write_text("{broken")
        result = cli_runner.invoke(cli, ["presets", "list"])
        assert result.exit_code == 1
        assert "Cannot load presets" in result.output


class TestImportExport:
    def test_import_merge(self, cli_runner: CliRunner, workspace: Path) -> None:
        source = write_presets(
            workspace / "shared.json",
            [MEETING_PRESET_JSON, {"id": "daily", "name": "Daily", "fields": []}],
        )
        result = cli_runner.invoke(cli, ["--json", "presets", "import", str(source)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)["data"]
        assert data["applied"] == ["meeting-2", "daily"]
        assert data["renamed"] == [["meeting", "meeting-2"]]

        saved = json.loads((workspace / "presets.json").read_text())
        assert saved["type"] == "note-architect-presets"
        assert [p["id"] for p in saved["presets"]] == ["meeting", "meeting-2", "daily"]

    def test_import_replace(self, cli_runner: CliRunner, workspace: Path) -> None:
        source = write_presets(
            workspace / "shared.json", [{"id": "daily", "name": "Daily", "fields": []}]
        )
        result = cli_runner.invoke(cli, ["presets", "import", str(source), "--replace"])
        assert result.exit_code == 0, result.output
        saved = json.loads((workspace / "presets.json").read_text())
        assert [p["id"] for p in saved["presets"]] == ["daily"]

    def test_import_invalid(self, cli_runner: CliRunner, workspace: Path) -> None:
        bad = workspace / "bad.json"
        bad.write_text(json.dumps([{"name": "No id", "fields": []}]))
        before = (workspace / "presets.json").read_text()
        result = cli_runner.invoke(cli, ["--json", "presets", "import", str(bad)])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "IMPORT_FAILED"
        assert (workspace / "presets.json").read_text() == before

    def test_export_stdout(self, cli_runner: CliRunner, workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["presets", "export"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert [p["id"] for p in payload["presets"]] == ["meeting"]

    def test_export_file(self, cli_runner: CliRunner, workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["presets", "export", "-o", "out/backup.json"])
        assert result.exit_code == 0
        payload = json.loads((workspace / "out" / "backup.json").read_text())
        assert payload["version"] == 1
        assert len(payload["presets"]) == 1

    def test_import_then_apply(self, cli_runner: CliRunner, workspace: Path) -> None:
        write_presets(workspace / "presets.json", [])
        source = write_presets(workspace / "shared.json", [MEETING_PRESET_JSON])
        cli_runner.invoke(cli, ["presets", "import", str(source)])
        (workspace / "note.md").write_text("Body")
        result = cli_runner.invoke(cli, ["apply", "note.md", "--preset", "meeting"])
        assert result.exit_code == 0, result.output
        assert (workspace / "note.md").read_text() == "---\nstatus: todo\n---\n\nBody"
