"""Preset and submitted-value validation.

Two passes produce one :class:`ValidationResult`:

- Structural checks over the field definitions themselves (key format,
  blank labels, choice fields without options, duplicate keys).
- Value checks over submitted form data (date fields must parse).

Validation never raises. Every problem becomes a summary message in
``errors`` and an inline message in ``field_errors``, which is keyed by
field *index* (keys may be blank or duplicated) and split into
``key``/``label``/``options``/``value`` buckets so a caller can place a
message next to the input that caused it.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from fmctl.domain.dates import parse_calendar_date
from fmctl.domain.fields import CHOICE_FIELD_TYPES, FieldType

if TYPE_CHECKING:
    from fmctl.domain.fields import FieldDefinition, Preset

KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

ErrorCategory = Literal["key", "label", "options", "value"]


@dataclass
class FieldErrors:
    """Inline error messages for one field, bucketed by the rule that fired."""

    key: list[str] = field(default_factory=list)
    label: list[str] = field(default_factory=list)
    options: list[str] = field(default_factory=list)
    value: list[str] = field(default_factory=list)

    def add(self, category: ErrorCategory, message: str) -> None:
        getattr(self, category).append(message)

    def is_empty(self) -> bool:
        return not (self.key or self.label or self.options or self.value)

    def to_dict(self) -> dict[str, list[str]]:
        """Non-empty buckets only."""
        buckets = {
            "key": self.key,
            "label": self.label,
            "options": self.options,
            "value": self.value,
        }
        return {name: list(msgs) for name, msgs in buckets.items() if msgs}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate`."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    field_errors: dict[int, FieldErrors] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "field_errors": {str(i): fe.to_dict() for i, fe in self.field_errors.items()},
        }


class _Collector:
    """Accumulates summary + inline messages in discovery order."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.field_errors: dict[int, FieldErrors] = {}

    def entry(self, index: int) -> FieldErrors:
        if index not in self.field_errors:
            self.field_errors[index] = FieldErrors()
        return self.field_errors[index]

    def add(self, index: int, category: ErrorCategory, inline: str, summary: str) -> None:
        self.errors.append(summary)
        self.entry(index).add(category, inline)

    def result(self) -> ValidationResult:
        return ValidationResult(
            is_valid=not self.errors,
            errors=self.errors,
            field_errors=self.field_errors,
        )


def invalid_date_message(label: str) -> str:
    return f"invalid date format for field {label}"


def _check_structure(fields: Sequence[FieldDefinition], collector: _Collector) -> None:
    key_usage: dict[str, list[int]] = {}

    for index, field_def in enumerate(fields):
        number = index + 1
        key = (field_def.key or "").strip()
        label = (field_def.label or "").strip()

        if key:
            key_usage.setdefault(key, []).append(index)

        if not key:
            collector.add(
                index,
                "key",
                "Key must not be empty",
                f"Field {number}: key must not be empty",
            )
        elif not KEY_PATTERN.match(key):
            collector.add(
                index,
                "key",
                "Key may only contain letters, digits, underscores and hyphens, "
                "and must start with a letter or underscore",
                f"Field {number}: key {key!r} has an invalid format",
            )

        if not label:
            collector.add(
                index,
                "label",
                "Label must not be empty",
                f"Field {number}: label must not be empty",
            )

        if field_def.type in CHOICE_FIELD_TYPES and field_def.allowed_options is None:
            collector.add(
                index,
                "options",
                "Add at least one option",
                f"Field {number}: {field_def.type} fields need at least one option",
            )

    for key, indexes in key_usage.items():
        if len(indexes) < 2:
            continue
        for index in indexes:
            collector.entry(index).add("key", "Key is used by another field")
        numbers = ", ".join(str(i + 1) for i in indexes)
        collector.errors.append(f"Duplicate frontmatter key {key!r} used by fields {numbers}")


def _check_values(
    fields: Sequence[FieldDefinition],
    values: Mapping[str, Any],
    collector: _Collector,
) -> None:
    for index, field_def in enumerate(fields):
        if field_def.type != FieldType.DATE or field_def.use_expression_default:
            continue
        value = values.get(field_def.key)
        if not isinstance(value, str) or not value.strip():
            continue
        if parse_calendar_date(value) is None:
            collector.add(
                index,
                "value",
                "Enter a valid date",
                invalid_date_message(field_def.label or field_def.key),
            )


def validate_structure(fields: Sequence[FieldDefinition]) -> ValidationResult:
    """Check the field definitions only."""
    collector = _Collector()
    _check_structure(fields, collector)
    return collector.result()


def validate_values(preset: Preset, values: Mapping[str, Any]) -> ValidationResult:
    """Check submitted *values* against the field types of *preset*."""
    collector = _Collector()
    _check_values(preset.fields, values, collector)
    return collector.result()


def validate(preset: Preset, submitted_values: Mapping[str, Any] | None = None) -> ValidationResult:
    """Run structural and (when *submitted_values* is given) value checks.

    ``is_valid`` is True only when no message was collected.
    """
    collector = _Collector()
    _check_structure(preset.fields, collector)
    if submitted_values is not None:
        _check_values(preset.fields, submitted_values, collector)
    return collector.result()
