"""Tests for preset structure and submitted-value validation."""

from __future__ import annotations

from fmctl.domain.fields import FieldDefinition, FieldType, Preset
from fmctl.domain.validation import validate, validate_structure, validate_values


def _preset(*fields: FieldDefinition) -> Preset:
    return Preset(id="p1", name="P", fields=list(fields))


class TestStructure:
    def test_valid_preset(self, meeting_preset: Preset) -> None:
        result = validate(meeting_preset)
        assert result.is_valid
        assert result.errors == []
        assert result.field_errors == {}

    def test_empty_key(self) -> None:
        result = validate(_preset(FieldDefinition(key=" ", label="Blank")))
        assert not result.is_valid
        assert result.errors == ["Field 1: key must not be empty"]
        assert result.field_errors[0].key == ["Key must not be empty"]

    def test_key_format(self) -> None:
        result = validate(_preset(FieldDefinition(key="9lives", label="Lives")))
        assert result.errors == ["Field 1: key '9lives' has an invalid format"]
        assert result.field_errors[0].key

    def test_empty_label(self) -> None:
        result = validate(_preset(FieldDefinition(key="title", label="")))
        assert result.errors == ["Field 1: label must not be empty"]
        assert result.field_errors[0].label == ["Label must not be empty"]

    def test_select_without_options(self) -> None:
        result = validate(
            _preset(FieldDefinition(key="status", type=FieldType.SELECT, label="S", options=[]))
        )
        assert not result.is_valid
        assert result.errors == ["Field 1: select fields need at least one option"]
        assert result.field_errors[0].options == ["Add at least one option"]

    def test_blank_options_count_as_missing(self) -> None:
        result = validate(
            _preset(
                FieldDefinition(
                    key="tags", type=FieldType.MULTI_SELECT, label="T", options=["  ", ""]
                )
            )
        )
        assert result.field_errors[0].options

    def test_duplicate_keys(self) -> None:
        result = validate(
            _preset(
                FieldDefinition(key="status", label="Status"),
                FieldDefinition(key="status", label="State"),
            )
        )
        assert not result.is_valid
        assert any("status" in message for message in result.errors)
        assert result.errors == ["Duplicate frontmatter key 'status' used by fields 1, 2"]
        assert result.field_errors[0].key == ["Key is used by another field"]
        assert result.field_errors[1].key == ["Key is used by another field"]

    def test_every_problem_reported(self) -> None:
        result = validate_structure(
            [
                FieldDefinition(key="", label=""),
                FieldDefinition(key="status", type=FieldType.SELECT, label="S"),
            ]
        )
        assert len(result.errors) == 3
        assert set(result.field_errors) == {0, 1}

    def test_to_dict(self) -> None:
        result = validate(_preset(FieldDefinition(key="title", label="")))
        assert result.to_dict() == {
            "is_valid": False,
            "errors": ["Field 1: label must not be empty"],
            "field_errors": {"0": {"label": ["Label must not be empty"]}},
        }


class TestValues:
    def test_valid_date(self, meeting_preset: Preset) -> None:
        assert validate(meeting_preset, {"due": "2024-05-01"}).is_valid

    def test_blank_date_is_fine(self, meeting_preset: Preset) -> None:
        assert validate(meeting_preset, {"due": "  "}).is_valid

    def test_invalid_date(self, meeting_preset: Preset) -> None:
        result = validate(meeting_preset, {"due": "2024-13-45"})
        assert result.errors == ["invalid date format for field Due"]
        assert result.field_errors[2].value == ["Enter a valid date"]

    def test_expression_dates_are_not_checked(self) -> None:
        preset = _preset(
            FieldDefinition(
                key="created", type=FieldType.DATE, label="Created", use_expression_default=True
            )
        )
        assert validate_values(preset, {"created": "<% tp.date.now() %>"}).is_valid

    def test_values_skipped_when_not_submitted(self, meeting_preset: Preset) -> None:
        assert validate(meeting_preset, None).is_valid
