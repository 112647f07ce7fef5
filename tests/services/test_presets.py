"""Tests for PresetService."""

from __future__ import annotations

from fmctl.config.settings import FmSettings
from fmctl.domain.fields import FieldDefinition, FieldType, Preset
from fmctl.infrastructure.presets import PresetStore
from fmctl.services.presets import PresetService


class TestListPresets:
    def test_items(self, settings: FmSettings, preset_store: PresetStore) -> None:
        result = PresetService(settings, preset_store).list_presets()
        assert result.ok
        assert result.data["count"] == 2
        assert result.data["items"][0] == {
            "id": "meeting",
            "name": "Meeting",
            "fields": 4,
            "description": None,
        }

    def test_empty_store(self, settings: FmSettings) -> None:
        result = PresetService(settings, PresetStore()).list_presets()
        assert result.data == {"items": [], "count": 0}


class TestGetPreset:
    def test_found(self, settings: FmSettings, preset_store: PresetStore) -> None:
        result = PresetService(settings, preset_store).get_preset("status-tags")
        preset = result.data["preset"]
        assert preset["id"] == "status-tags"
        assert [f["key"] for f in preset["fields"]] == ["status", "tags"]
        assert "description" not in preset

    def test_missing(self, settings: FmSettings, preset_store: PresetStore) -> None:
        result = PresetService(settings, preset_store).get_preset("nope")
        assert not result.ok
        assert result.op == "get_preset"
        assert result.error is not None
        assert result.error.code == "PRESET_NOT_FOUND"


class TestValidatePreset:
    def test_valid(self, settings: FmSettings, preset_store: PresetStore) -> None:
        result = PresetService(settings, preset_store).validate_preset("meeting", {"due": "2024-05-01"})
        assert result.ok
        assert result.data == {
            "preset_id": "meeting",
            "is_valid": True,
            "errors": [],
            "field_errors": {},
        }

    def test_multi_select_with_options_is_valid(
        self, settings: FmSettings, preset_store: PresetStore
    ) -> None:
        result = PresetService(settings, preset_store).validate_preset("status-tags")
        assert result.ok
        assert result.data["is_valid"] is True

    def test_multi_select_without_options_is_invalid(self, settings: FmSettings) -> None:
        preset = Preset(
            id="bare-tags",
            name="Bare tags",
            fields=[FieldDefinition(key="tags", type=FieldType.MULTI_SELECT, label="Tags")],
        )
        result = PresetService(settings, PresetStore([preset])).validate_preset("bare-tags")
        assert result.error is not None
        assert result.error.detail["errors"] == [
            "Field 1: multi-select fields need at least one option"
        ]

    def test_invalid_value(self, settings: FmSettings, preset_store: PresetStore) -> None:
        result = PresetService(settings, preset_store).validate_preset("meeting", {"due": "nope"})
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.message == "Preset 'meeting' has 1 problem(s)"
        assert result.error.detail["field_errors"] == {"2": {"value": ["Enter a valid date"]}}

    def test_invalid_structure(self, settings: FmSettings) -> None:
        preset = Preset(
            id="dupes",
            name="Dupes",
            fields=[
                FieldDefinition(key="status", label="Status"),
                FieldDefinition(key="status", type=FieldType.SELECT, label="State"),
            ],
        )
        result = PresetService(settings, PresetStore([preset])).validate_preset("dupes")
        assert result.error is not None
        assert result.error.detail["preset_id"] == "dupes"
        assert len(result.error.detail["errors"]) == 2
