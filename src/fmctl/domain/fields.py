"""Field and preset models — the schema a preset imposes on frontmatter.

A :class:`Preset` is an ordered collection of :class:`FieldDefinition`.
Field order is significant: it defines the output key order when the
merged frontmatter is written back.

Models are frozen and deliberately permissive (blank keys, duplicate
keys, select fields without options all construct fine) so that
:mod:`fmctl.domain.validation` can report every problem at once instead
of failing on the first one. Externally supplied field data goes through
:func:`sanitize_field` first.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class FieldType(StrEnum):
    """Supported field input types."""

    TEXT = "text"
    SELECT = "select"
    DATE = "date"
    MULTI_SELECT = "multi-select"


CHOICE_FIELD_TYPES = frozenset({FieldType.SELECT, FieldType.MULTI_SELECT})

FieldDefault = str | list[str]


class FieldSanitizeError(ValueError):
    """Raised by :func:`sanitize_field` in strict mode."""


class FieldDefinition(BaseModel):
    """One named, typed frontmatter entry within a preset."""

    model_config = {"frozen": True, "populate_by_name": True}

    key: str
    type: FieldType = FieldType.TEXT
    label: str = ""
    default: FieldDefault = ""
    options: list[str] | None = None
    use_expression_default: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "use_expression_default",
            "useExpressionDefault",
            "useTemplaterTimestamp",
        ),
    )
    description: str | None = None

    @property
    def allowed_options(self) -> list[str] | None:
        """Trimmed non-blank options, or None when no usable option exists."""
        if not self.options:
            return None
        cleaned = [opt.strip() for opt in self.options if opt.strip()]
        return cleaned or None

    @property
    def uses_expression(self) -> bool:
        """Date field whose default is always a deferred macro expression."""
        return self.type == FieldType.DATE and self.use_expression_default


class Preset(BaseModel):
    """A named, ordered collection of field definitions."""

    model_config = {"frozen": True}

    id: str
    name: str
    fields: list[FieldDefinition] = Field(default_factory=list)
    description: str | None = None

    @property
    def field_keys(self) -> list[str]:
        return [f.key for f in self.fields]

    def get_field(self, key: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def normalize_string_list(
    raw: Any,
    allowed: Iterable[str] | None = None,
) -> list[str]:
    """Normalize *raw* into a trimmed, deduplicated list of strings.

    A string becomes a singleton list; anything that is neither a string
    nor a list/tuple yields ``[]``. Blank entries are dropped and the
    first occurrence wins. When *allowed* is non-empty, values outside it
    are filtered out.

    Examples:
        >>> normalize_string_list([" a", "b", "a", ""])
        ['a', 'b']
        >>> normalize_string_list("x", allowed=["y"])
        []
    """
    allowed_set = {a.strip() for a in allowed if a.strip()} if allowed else set()

    if isinstance(raw, str):
        candidates: list[Any] = [raw]
    elif isinstance(raw, (list, tuple)):
        candidates = list(raw)
    else:
        return []

    result: list[str] = []
    for candidate in candidates:
        if candidate is None:
            continue
        value = str(candidate).strip()
        if not value or value in result:
            continue
        if allowed_set and value not in allowed_set:
            continue
        result.append(value)
    return result


def normalize_field_default(field_type: FieldType | str, raw: Any) -> FieldDefault:
    """Coerce a raw default into the shape *field_type* expects."""
    if field_type == FieldType.MULTI_SELECT:
        return normalize_string_list(raw)
    if isinstance(raw, str):
        return raw
    if raw is None:
        return ""
    return str(raw)


def coerce_default_text(default: FieldDefault | None) -> str:
    """Collapse a stored default to a single string (first list item wins)."""
    if isinstance(default, str):
        return default
    if isinstance(default, list):
        return str(default[0]) if default else ""
    if default is None:
        return ""
    return str(default)


# ---------------------------------------------------------------------------
# Sanitizing externally supplied field data
# ---------------------------------------------------------------------------


def sanitize_field(raw: Any, *, strict: bool = False) -> FieldDefinition | None:
    """Validate and clean one field mapping from external data.

    Lenient mode returns None for unusable entries (missing key or label)
    and falls back to ``text`` for unknown types. Strict mode raises
    :class:`FieldSanitizeError` instead.
    """
    if not isinstance(raw, dict):
        if strict:
            msg = "field must be an object"
            raise FieldSanitizeError(msg)
        return None

    key = str(raw.get("key") or "").strip()
    label = str(raw.get("label") or "").strip()
    if not key:
        if strict:
            msg = "field is missing a key"
            raise FieldSanitizeError(msg)
        return None
    if not label:
        if strict:
            msg = f"field {key!r} is missing a label"
            raise FieldSanitizeError(msg)
        return None

    raw_type = raw.get("type") or FieldType.TEXT
    try:
        field_type = FieldType(raw_type)
    except (TypeError, ValueError):
        if strict:
            msg = f"field type {raw_type!r} is not supported"
            raise FieldSanitizeError(msg) from None
        field_type = FieldType.TEXT

    data: dict[str, Any] = {
        "key": key,
        "type": field_type,
        "label": label,
        "default": normalize_field_default(field_type, raw.get("default")),
    }

    options = raw.get("options")
    if isinstance(options, list) and options:
        data["options"] = [str(opt).strip() for opt in options if str(opt).strip()]

    expression_flag = raw.get(
        "use_expression_default",
        raw.get("useExpressionDefault", raw.get("useTemplaterTimestamp")),
    )
    if expression_flag is True:
        data["use_expression_default"] = True

    description = raw.get("description")
    if isinstance(description, str) and description.strip():
        data["description"] = description.strip()

    return FieldDefinition.model_validate(data)


def sanitize_fields(raws: Iterable[Any]) -> list[FieldDefinition]:
    """Sanitize a list of field mappings, silently dropping unusable ones."""
    result: list[FieldDefinition] = []
    for raw in raws:
        field_def = sanitize_field(raw)
        if field_def is not None:
            result.append(field_def)
    return result
