"""BaseService — shared foundation for fmctl services.

Every service receives the resolved :class:`FmSettings` and a
:class:`PresetSource` at construction time. Services own no mutable
state beyond these read-only collaborators: presets and documents are
supplied fresh on every call.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fmctl.services.result import ServiceResult, failure

if TYPE_CHECKING:
    from fmctl.config.settings import FmSettings
    from fmctl.domain.fields import Preset
    from fmctl.services.ports import PresetSource

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class PipelineService(BaseService):
            async def apply(self, preset_id: str, ...) -> ServiceResult:
                preset = self._lookup_preset(op, preset_id)
                if isinstance(preset, ServiceResult):
                    return preset
                ...
    """

    def __init__(self, settings: FmSettings, presets: PresetSource) -> None:
        self._settings = settings
        self._presets = presets

    @property
    def settings(self) -> FmSettings:
        return self._settings

    def _lookup_preset(self, op: str, preset_id: str) -> Preset | ServiceResult:
        """Return the preset, or a failed ServiceResult if it does not exist."""
        preset = self._presets.get_preset_by_id(preset_id)
        if preset is None:
            logger.debug("Preset not found: %s", preset_id)
            return failure(op, "PRESET_NOT_FOUND", f"No preset found with ID: {preset_id}")
        return preset
