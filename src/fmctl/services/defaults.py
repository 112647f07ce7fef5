"""Per-field default resolution.

Each field of a preset receives exactly one resolved default before any
user input is applied. Defaults that contain a macro marker (``<%``) are
handed to an :class:`~fmctl.services.ports.ExpressionEvaluator`; when
that is impossible (evaluation disabled, no evaluator, evaluator not
available, no active document, or the evaluator raising) the literal
text is kept and the field key is recorded in ``skipped``.

INVARIANT: Resolution never raises, and evaluator calls are awaited one
field at a time so a stateful evaluator sees a single consistent
document context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from fmctl.config.models import ExpressionsConfig
from fmctl.domain.dates import parse_calendar_date
from fmctl.domain.fields import (
    FieldDefinition,
    FieldType,
    coerce_default_text,
    normalize_string_list,
)

if TYPE_CHECKING:
    from fmctl.domain.fields import Preset
    from fmctl.services.ports import DocumentContext, ExpressionEvaluator

log = structlog.get_logger(__name__)

DEFAULT_DATE_FORMAT = "YYYYMMDDHHmmss"


@dataclass(frozen=True)
class ResolvedDefaults:
    """Resolved per-field defaults plus the keys left unevaluated."""

    values: dict[str, str | list[str]] = field(default_factory=dict)
    skipped: frozenset[str] = frozenset()


def build_date_expression(date_format: str | None = None) -> str:
    """Build the macro expression that stamps the current date/time.

    Examples:
        >>> build_date_expression("YYYY-MM-DD")
        '<% tp.date.now("YYYY-MM-DD") %>'
    """
    fmt = (date_format or "").strip() or DEFAULT_DATE_FORMAT
    fmt = fmt.replace("\\", "\\\\").replace('"', '\\"')
    return f'<% tp.date.now("{fmt}") %>'


def _raw_default_text(field_def: FieldDefinition, config: ExpressionsConfig) -> str:
    if field_def.uses_expression:
        return build_date_expression(config.date_format)
    return coerce_default_text(field_def.default)


async def resolve_defaults(
    preset: Preset,
    context: DocumentContext | None,
    evaluator: ExpressionEvaluator | None,
    *,
    settings: ExpressionsConfig | None = None,
) -> ResolvedDefaults:
    """Resolve the default value of every field in *preset*.

    Args:
        preset: Preset whose fields are resolved, in order.
        context: The active document, or None when there is none.
        evaluator: Optional macro evaluator.
        settings: Expression settings; code defaults when omitted.
    """
    config = settings or ExpressionsConfig()
    values: dict[str, str | list[str]] = {}
    skipped: set[str] = set()

    for field_def in preset.fields:
        if field_def.type == FieldType.MULTI_SELECT:
            values[field_def.key] = normalize_string_list(
                field_def.default, field_def.allowed_options
            )
            continue

        text = _raw_default_text(field_def, config)
        if config.marker not in text:
            values[field_def.key] = text
            continue

        values[field_def.key] = text
        if not config.enabled or evaluator is None or context is None:
            skipped.add(field_def.key)
            continue

        try:
            if not evaluator.is_available():
                skipped.add(field_def.key)
                continue
            values[field_def.key] = await evaluator.evaluate(text)
        except Exception:
            log.warning("expression_default.failed", field=field_def.key, exc_info=True)
            skipped.add(field_def.key)

    if skipped:
        log.debug("expression_default.skipped", fields=sorted(skipped))
    return ResolvedDefaults(values=values, skipped=frozenset(skipped))


def preset_default_layer(resolved: ResolvedDefaults, preset: Preset) -> dict[str, Any]:
    """Build the lowest-precedence merge layer from *resolved* defaults.

    Empty strings and empty lists are omitted so that they never shadow
    a value the note already has. Plain date defaults become
    :class:`datetime.date` values, matching converted form input.
    """
    layer: dict[str, Any] = {}
    for field_def in preset.fields:
        value = resolved.values.get(field_def.key)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            continue
        if field_def.type == FieldType.DATE and not field_def.uses_expression:
            value = parse_calendar_date(value) or value
        layer[field_def.key] = value
    return layer


# ---------------------------------------------------------------------------
# Manual-default memory for expression toggles
# ---------------------------------------------------------------------------


class DefaultsDraft:
    """Per-operation memory of manually typed date defaults.

    Switching a date field to expression autofill replaces its default
    with the macro; switching back restores what the user had typed.
    Entries are keyed by field index within one preset snapshot and live
    only as long as the draft object the caller holds.
    """

    def __init__(self) -> None:
        self._manual: dict[int, str] = {}

    def remembered(self, index: int) -> str | None:
        return self._manual.get(index)

    def forget(self, index: int) -> None:
        self._manual.pop(index, None)

    def toggle_expression_default(
        self,
        fields: list[FieldDefinition],
        index: int,
        enabled: bool,
        *,
        date_format: str | None = None,
    ) -> list[FieldDefinition]:
        """Return a new field list with field *index* switched on or off.

        Raises:
            IndexError: If *index* is out of range.
            ValueError: If the field is not a date field.
        """
        current = fields[index]
        if current.type != FieldType.DATE:
            msg = f"Field {current.key!r} is not a date field"
            raise ValueError(msg)

        if enabled:
            if index not in self._manual and not current.use_expression_default:
                self._manual[index] = coerce_default_text(current.default)
            self._manual.setdefault(index, "")
            updated = current.model_copy(
                update={
                    "use_expression_default": True,
                    "default": build_date_expression(date_format),
                }
            )
        else:
            manual = self._manual.get(index, "")
            updated = current.model_copy(
                update={"use_expression_default": False, "default": manual}
            )

        result = list(fields)
        result[index] = updated
        return result
