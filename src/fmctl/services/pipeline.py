"""PipelineService — merge preset defaults, note, template and user input.

Pipeline: SELECT → VALIDATE → RESOLVE → CONVERT → MERGE → RENDER → WRITE

``prepare`` stops after RENDER and never writes. ``apply`` performs the
whole pipeline as one step: the replacement text is fully built in
memory before the :class:`~fmctl.services.ports.DocumentWriter` is
called, and only when the text actually changed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal

import structlog

from fmctl.config.models import LEGACY_PRESET_CONFIG_KEYS, PRESET_CONFIG_KEY
from fmctl.domain.convert import convert_form_data
from fmctl.domain.frontmatter import parse_frontmatter
from fmctl.domain.merge import merge_all, order_by_preset, strip_keys
from fmctl.domain.mutation import (
    MutationError,
    replace_frontmatter,
    serialize_frontmatter,
    update_frontmatter,
)
from fmctl.domain.validation import validate
from fmctl.services.base import BaseService
from fmctl.services.defaults import preset_default_layer, resolve_defaults
from fmctl.services.result import ServiceResult, failure

if TYPE_CHECKING:
    from fmctl.config.settings import FmSettings
    from fmctl.services.ports import (
        DocumentContext,
        DocumentWriter,
        ExpressionEvaluator,
        PresetSource,
    )

log = structlog.get_logger(__name__)

UpdateMode = Literal["merge", "overwrite"]


def bound_preset_id(frontmatter: Mapping[str, Any]) -> str | None:
    """Preset ID a document (usually a template) is bound to, if any."""
    for key in (PRESET_CONFIG_KEY, *LEGACY_PRESET_CONFIG_KEYS):
        value = frontmatter.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class PipelineService(BaseService):
    """Computes and writes merged frontmatter for one document at a time."""

    def __init__(
        self,
        settings: FmSettings,
        presets: PresetSource,
        *,
        evaluator: ExpressionEvaluator | None = None,
        writer: DocumentWriter | None = None,
    ) -> None:
        super().__init__(settings, presets)
        self._evaluator = evaluator
        self._writer = writer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def prepare(
        self,
        context: DocumentContext,
        *,
        preset_id: str | None = None,
        form_values: Mapping[str, Any] | None = None,
        template_text: str | None = None,
        mode: UpdateMode | None = None,
    ) -> ServiceResult:
        """Compute the merged frontmatter and new document text without writing."""
        return await self._run(
            "prepare",
            context,
            preset_id=preset_id,
            form_values=form_values or {},
            template_text=template_text,
            mode=mode,
            write=False,
        )

    async def apply(
        self,
        context: DocumentContext,
        *,
        preset_id: str | None = None,
        form_values: Mapping[str, Any] | None = None,
        template_text: str | None = None,
        mode: UpdateMode | None = None,
        dry_run: bool = False,
    ) -> ServiceResult:
        """Run the full pipeline and write the result when it changed."""
        return await self._run(
            "apply",
            context,
            preset_id=preset_id,
            form_values=form_values or {},
            template_text=template_text,
            mode=mode,
            write=not dry_run,
        )

    def bind_preset(self, context: DocumentContext, preset_id: str) -> ServiceResult:
        """Record *preset_id* in the document's frontmatter binding key."""
        op = "bind_preset"
        preset = self._lookup_preset(op, preset_id)
        if isinstance(preset, ServiceResult):
            return preset

        def _bind(fm: dict[str, Any]) -> dict[str, Any]:
            cleaned = strip_keys(fm, LEGACY_PRESET_CONFIG_KEYS)
            cleaned[PRESET_CONFIG_KEY] = preset.id
            return cleaned

        try:
            update = update_frontmatter(context.content, _bind)
        except MutationError as exc:
            return failure(op, "MUTATION_FAILED", str(exc))

        warnings: list[str] = []
        written = self._write(context, update.content, update.changed, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "preset_id": preset.id,
                "path": str(context.path) if context.path else None,
                "changed": update.changed,
                "written": written,
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _run(
        self,
        op: str,
        context: DocumentContext,
        *,
        preset_id: str | None,
        form_values: Mapping[str, Any],
        template_text: str | None,
        mode: UpdateMode | None,
        write: bool,
    ) -> ServiceResult:
        warnings: list[str] = []
        merge_cfg = self._settings.merge
        effective_mode = mode or merge_cfg.mode
        template_fm = parse_frontmatter(template_text).frontmatter if template_text else {}

        # ── SELECT ───────────────────────────────────────────
        selected_id = (
            preset_id
            or bound_preset_id(template_fm)
            or self._settings.presets.default_preset_id
        )
        if not selected_id:
            return failure(op, "NO_PRESET", "No preset given and none bound to the template")
        preset = self._lookup_preset(op, selected_id)
        if isinstance(preset, ServiceResult):
            return preset

        # ── VALIDATE ─────────────────────────────────────────
        validation = validate(preset, form_values)
        if not validation.is_valid:
            return failure(
                op,
                "VALIDATION_FAILED",
                "; ".join(validation.errors),
                **validation.to_dict(),
            )

        # ── RESOLVE ──────────────────────────────────────────
        resolved = await resolve_defaults(
            preset,
            context,
            self._evaluator,
            settings=self._settings.expressions,
        )
        if resolved.skipped:
            warnings.append(
                "Some defaults were not evaluated: " + ", ".join(sorted(resolved.skipped))
            )

        # ── CONVERT ──────────────────────────────────────────
        conversion = convert_form_data(preset, form_values)
        if not conversion.ok:
            return failure(
                op,
                "VALIDATION_FAILED",
                "; ".join(conversion.errors),
                errors=list(conversion.errors),
                field_errors={str(i): fe.to_dict() for i, fe in conversion.field_errors.items()},
            )

        # ── MERGE ────────────────────────────────────────────
        layers: list[Mapping[str, Any]] = [preset_default_layer(resolved, preset)]
        if effective_mode == "merge":
            layers.append(context.frontmatter)
        layers.append(strip_keys(template_fm, merge_cfg.strip_keys))
        # Only submitted keys override; the rest come from defaults, note and template.
        layers.append({k: v for k, v in conversion.frontmatter.items() if k in form_values})
        merged = order_by_preset(merge_all(layers, union_keys=merge_cfg.union_keys), preset)

        # ── RENDER ───────────────────────────────────────────
        try:
            block_text = serialize_frontmatter(merged, preset=preset)
            mutation = replace_frontmatter(context.content, block_text, context.position)
        except MutationError as exc:
            return failure(op, "MUTATION_FAILED", str(exc))

        # ── WRITE ────────────────────────────────────────────
        written = False
        if write:
            written = self._write(context, mutation.content, mutation.changed, warnings)

        log.debug(
            "pipeline.complete",
            op=op,
            preset=preset.id,
            mode=effective_mode,
            changed=mutation.changed,
            written=written,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "preset_id": preset.id,
                "path": str(context.path) if context.path else None,
                "mode": effective_mode,
                "frontmatter": merged,
                "changed": mutation.changed,
                "written": written,
                "skipped_defaults": sorted(resolved.skipped),
                "content": mutation.content,
            },
            warnings=warnings,
        )

    def _write(
        self,
        context: DocumentContext,
        content: str,
        changed: bool,
        warnings: list[str],
    ) -> bool:
        if not changed:
            return False
        if self._writer is None:
            warnings.append("No document writer configured; nothing was written")
            return False
        self._writer.write(context, content)
        return True
