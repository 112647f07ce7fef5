"""Conversion of submitted form values into canonical frontmatter values.

Per field type:

- ``text`` / ``select``: strings are trimmed; missing or blank -> ``""``.
- ``date``: a non-empty value must be a calendar date and is emitted as
  a :class:`datetime.date` (written as ``YYYY-MM-DD``). Expression-backed
  date fields pass through unchanged since they may still hold an
  unevaluated macro.
- ``multi-select``: trimmed, deduplicated list filtered against the
  field options; an empty selection is ``[]``, never ``""``.

Expected failures (an unparseable date) are returned in the
:class:`ConversionResult` rather than raised.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fmctl.domain.dates import parse_calendar_date
from fmctl.domain.fields import FieldType, normalize_string_list
from fmctl.domain.validation import FieldErrors, invalid_date_message

if TYPE_CHECKING:
    from fmctl.domain.fields import FieldDefinition, Preset


class FormConversionError(ValueError):
    """Raised by :meth:`ConversionResult.raise_for_errors`."""

    def __init__(self, result: ConversionResult) -> None:
        super().__init__("; ".join(result.errors))
        self.result = result


@dataclass(frozen=True)
class ConversionResult:
    """Converted frontmatter plus any field-level conversion errors."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    field_errors: dict[int, FieldErrors] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise FormConversionError(self)


def _empty_value(field_def: FieldDefinition) -> Any:
    return [] if field_def.type == FieldType.MULTI_SELECT else ""


def _convert_text(raw: Any) -> Any:
    if isinstance(raw, str):
        return raw.strip()
    return raw


def convert_form_data(
    preset: Preset,
    form_values: Mapping[str, Any],
    resolved_defaults: Mapping[str, Any] | None = None,
) -> ConversionResult:
    """Map raw *form_values* to canonical frontmatter, in preset field order.

    A field missing from *form_values* (or submitted as None) falls back
    to *resolved_defaults* when given. Every preset field receives
    exactly one entry in the output.
    """
    frontmatter: dict[str, Any] = {}
    errors: list[str] = []
    field_errors: dict[int, FieldErrors] = {}

    for index, field_def in enumerate(preset.fields):
        raw = form_values.get(field_def.key)
        if raw is None and resolved_defaults is not None:
            raw = resolved_defaults.get(field_def.key)

        if raw is None or raw == "" or (isinstance(raw, str) and not raw.strip()):
            frontmatter[field_def.key] = _empty_value(field_def)
            continue

        if field_def.type == FieldType.MULTI_SELECT:
            frontmatter[field_def.key] = normalize_string_list(raw, field_def.allowed_options)
        elif field_def.uses_expression:
            frontmatter[field_def.key] = raw if isinstance(raw, str) else str(raw)
        elif field_def.type == FieldType.DATE:
            parsed = parse_calendar_date(raw)
            if parsed is None:
                message = invalid_date_message(field_def.label or field_def.key)
                errors.append(message)
                field_errors.setdefault(index, FieldErrors()).add("value", message)
                frontmatter[field_def.key] = _convert_text(raw)
            else:
                frontmatter[field_def.key] = parsed
        else:
            frontmatter[field_def.key] = _convert_text(raw)

    return ConversionResult(frontmatter=frontmatter, errors=errors, field_errors=field_errors)
