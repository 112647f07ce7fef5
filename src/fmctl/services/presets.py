"""PresetService — read-only preset inspection and validation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fmctl.domain.validation import validate
from fmctl.services.base import BaseService
from fmctl.services.result import ServiceResult, failure


class PresetService(BaseService):
    """List, show and validate presets from the configured source."""

    def list_presets(self) -> ServiceResult:
        items = [
            {
                "id": preset.id,
                "name": preset.name,
                "fields": len(preset.fields),
                "description": preset.description,
            }
            for preset in self._presets.list_presets()
        ]
        return ServiceResult(
            ok=True,
            op="list_presets",
            data={"items": items, "count": len(items)},
        )

    def get_preset(self, preset_id: str) -> ServiceResult:
        op = "get_preset"
        preset = self._lookup_preset(op, preset_id)
        if isinstance(preset, ServiceResult):
            return preset
        return ServiceResult(
            ok=True,
            op=op,
            data={"preset": preset.model_dump(mode="json", exclude_none=True)},
        )

    def validate_preset(
        self,
        preset_id: str,
        values: Mapping[str, Any] | None = None,
    ) -> ServiceResult:
        """Check a preset's field structure and, optionally, submitted values.

        A failed validation is reported as ``VALIDATION_FAILED`` with the
        full :class:`~fmctl.domain.validation.ValidationResult` in the
        error detail.
        """
        op = "validate_preset"
        preset = self._lookup_preset(op, preset_id)
        if isinstance(preset, ServiceResult):
            return preset

        result = validate(preset, values)
        if not result.is_valid:
            return failure(
                op,
                "VALIDATION_FAILED",
                f"Preset {preset.id!r} has {len(result.errors)} problem(s)",
                preset_id=preset.id,
                **result.to_dict(),
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"preset_id": preset.id, **result.to_dict()},
        )
