"""Shared pytest fixtures for fmctl tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from fmctl.config.settings import FmSettings
from fmctl.domain.fields import FieldDefinition, FieldType, Preset
from fmctl.infrastructure.presets import PresetStore
from fmctl.services.ports import DocumentContext


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FMCTL_* variables from the developer's shell out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("FMCTL_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def meeting_preset() -> Preset:
    """Preset with one field of every type."""
    return Preset(
        id="meeting",
        name="Meeting",
        fields=[
            FieldDefinition(
                key="status",
                type=FieldType.SELECT,
                label="Status",
                default="todo",
                options=["todo", "done"],
            ),
            FieldDefinition(
                key="tags",
                type=FieldType.MULTI_SELECT,
                label="Tags",
                default=[],
                options=["x", "y", "z"],
            ),
            FieldDefinition(key="due", type=FieldType.DATE, label="Due"),
            FieldDefinition(key="owner", type=FieldType.TEXT, label="Owner"),
        ],
    )


@pytest.fixture
def status_tags_preset() -> Preset:
    """Two-field preset used by the layering scenarios."""
    return Preset(
        id="status-tags",
        name="Status and tags",
        fields=[
            FieldDefinition(
                key="status",
                type=FieldType.SELECT,
                label="Status",
                default="todo",
                options=["todo", "done"],
            ),
            FieldDefinition(
                key="tags",
                type=FieldType.MULTI_SELECT,
                label="Tags",
                default=[],
                options=["a", "b", "x", "y"],
            ),
        ],
    )


@pytest.fixture
def preset_store(meeting_preset: Preset, status_tags_preset: Preset) -> PresetStore:
    return PresetStore([meeting_preset, status_tags_preset])


@pytest.fixture
def settings(tmp_path: Path) -> FmSettings:
    """Settings rooted at an empty temp directory (no fmctl.toml)."""
    return FmSettings.from_cli(root=tmp_path)


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temp working directory with a presets.json next to an fmctl.toml."""
    (tmp_path / "fmctl.toml").write_text("", encoding="utf-8")
    write_presets(tmp_path / "presets.json", [MEETING_PRESET_JSON])
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------

MEETING_PRESET_JSON: dict[str, Any] = {
    "id": "meeting",
    "name": "Meeting",
    "fields": [
        {
            "key": "status",
            "type": "select",
            "label": "Status",
            "default": "todo",
            "options": ["todo", "done"],
        },
        {
            "key": "tags",
            "type": "multi-select",
            "label": "Tags",
            "default": [],
            "options": ["x", "y", "z"],
        },
        {"key": "due", "type": "date", "label": "Due", "default": ""},
    ],
}


def write_presets(path: Path, presets: list[dict[str, Any]]) -> Path:
    path.write_text(json.dumps(presets), encoding="utf-8")
    return path


def make_context(content: str, path: Path | None = None) -> DocumentContext:
    return DocumentContext.from_text(content, path=path)


class FakeEvaluator:
    """ExpressionEvaluator double returning canned output."""

    def __init__(
        self,
        output: str = "20240501",
        *,
        available: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.output = output
        self.available = available
        self.error = error
        self.calls: list[str] = []

    def is_available(self) -> bool:
        return self.available

    async def evaluate(self, text: str) -> str:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.output


class RecordingWriter:
    """DocumentWriter double that keeps every write in memory."""

    def __init__(self) -> None:
        self.writes: list[tuple[DocumentContext, str]] = []

    def write(self, context: DocumentContext, content: str) -> None:
        self.writes.append((context, content))
