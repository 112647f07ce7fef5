"""JSON preset files: loading, importing and exporting.

Accepted shapes for preset JSON:

- a bare list of preset objects
- an export payload ``{"type": "note-architect-presets", "presets": [...]}``
- a single-preset wrapper ``{"preset": {...}}``
- a single preset object

Imported data is sanitized strictly: an unusable preset or field aborts
the whole import with :class:`PresetImportError`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from fmctl.domain.fields import FieldSanitizeError, Preset, sanitize_field
from fmctl.domain.ids import generate_unique_preset_id_from, preset_id_error

EXPORT_TYPE = "note-architect-presets"
EXPORT_VERSION = 1

ImportStrategy = Literal["merge", "replace"]

logger = logging.getLogger(__name__)


class PresetImportError(ValueError):
    """Preset JSON could not be parsed or sanitized."""


@dataclass(frozen=True)
class ImportResult:
    """Outcome of :meth:`PresetStore.import_presets`."""

    strategy: ImportStrategy
    applied: list[Preset] = field(default_factory=list)
    renamed: list[tuple[str, str]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _extract_payload(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    if not isinstance(raw, dict):
        msg = "Preset data must be a JSON object or array"
        raise PresetImportError(msg)

    if "presets" in raw:
        declared = raw.get("type")
        if declared and declared != EXPORT_TYPE:
            msg = f"Unexpected preset payload type: {declared!r}"
            raise PresetImportError(msg)
        presets = raw["presets"]
        if not isinstance(presets, list):
            msg = "'presets' must be a list"
            raise PresetImportError(msg)
        return presets

    if "preset" in raw:
        return [raw["preset"]] if raw["preset"] else []

    return [raw]


def _sanitize_preset(raw: Any, index: int) -> Preset:
    position = index + 1
    if not isinstance(raw, dict):
        msg = f"Preset {position}: expected an object"
        raise PresetImportError(msg)

    preset_id = raw.get("id")
    if not isinstance(preset_id, str) or not preset_id.strip():
        msg = f"Preset {position}: missing id"
        raise PresetImportError(msg)
    preset_id = preset_id.strip()
    id_problem = preset_id_error(preset_id)
    if id_problem:
        msg = f"Preset {position}: invalid id {preset_id!r}: {id_problem}"
        raise PresetImportError(msg)

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        msg = f"Preset {position}: missing name"
        raise PresetImportError(msg)

    raw_fields = raw.get("fields")
    if not isinstance(raw_fields, list):
        msg = f"Preset {position}: 'fields' must be a list"
        raise PresetImportError(msg)

    fields = []
    for field_index, raw_field in enumerate(raw_fields, start=1):
        try:
            fields.append(sanitize_field(raw_field, strict=True))
        except FieldSanitizeError as exc:
            msg = f"Preset {position}, field {field_index}: {exc}"
            raise PresetImportError(msg) from exc

    description = raw.get("description")
    return Preset(
        id=preset_id,
        name=name.strip(),
        fields=fields,
        description=description.strip() if isinstance(description, str) else None,
    )


def load_presets(text: str) -> list[Preset]:
    """Parse and strictly sanitize preset JSON.

    Raises:
        PresetImportError: On invalid JSON, an unusable preset or field,
            or two presets sharing an ID.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Invalid preset JSON: {exc}"
        raise PresetImportError(msg) from exc

    presets = [_sanitize_preset(item, i) for i, item in enumerate(_extract_payload(raw))]

    seen: set[str] = set()
    for preset in presets:
        if preset.id in seen:
            msg = f"Duplicate preset ID {preset.id!r}"
            raise PresetImportError(msg)
        seen.add(preset.id)
    return presets


def dump_presets(presets: list[Preset], *, exported_at: datetime | None = None) -> str:
    """Serialize *presets* as an export payload (pretty-printed JSON)."""
    stamp = exported_at or datetime.now(UTC)
    payload = {
        "type": EXPORT_TYPE,
        "version": EXPORT_VERSION,
        "exportedAt": stamp.isoformat(),
        "presets": [preset.model_dump(mode="json", exclude_none=True) for preset in presets],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class PresetStore:
    """In-memory preset collection, optionally backed by a JSON file.

    Implements :class:`~fmctl.services.ports.PresetSource`.
    """

    def __init__(self, presets: list[Preset] | None = None, *, path: Path | None = None) -> None:
        self._presets: list[Preset] = list(presets or [])
        self._path = path

    @classmethod
    def from_file(cls, path: Path) -> PresetStore:
        """Load presets from *path*; a missing file gives an empty store."""
        if not path.is_file():
            logger.debug("Preset file not found: %s", path)
            return cls(path=path)
        return cls(load_presets(path.read_text(encoding="utf-8")), path=path)

    @property
    def path(self) -> Path | None:
        return self._path

    def get_preset_by_id(self, preset_id: str) -> Preset | None:
        for preset in self._presets:
            if preset.id == preset_id:
                return preset
        return None

    def list_presets(self) -> list[Preset]:
        return list(self._presets)

    def import_presets(self, text: str, *, strategy: ImportStrategy = "merge") -> ImportResult:
        """Add presets from JSON *text* to the store.

        ``merge`` keeps existing presets and renames incoming IDs that
        collide (``daily`` becomes ``daily-2``). ``replace`` discards the
        current collection.
        """
        incoming = load_presets(text)
        if not incoming:
            msg = "No presets found in import data"
            raise PresetImportError(msg)

        if strategy == "replace":
            self._presets = list(incoming)
            return ImportResult(strategy=strategy, applied=list(incoming))

        taken = {p.id for p in self._presets}
        applied: list[Preset] = []
        renamed: list[tuple[str, str]] = []
        for preset in incoming:
            target_id = preset.id
            if target_id in taken:
                target_id = generate_unique_preset_id_from(preset.id, taken)
                renamed.append((preset.id, target_id))
                preset = preset.model_copy(update={"id": target_id})
            taken.add(target_id)
            applied.append(preset)

        self._presets.extend(applied)
        return ImportResult(strategy=strategy, applied=applied, renamed=renamed)

    def export_presets(self, *, exported_at: datetime | None = None) -> str:
        return dump_presets(self._presets, exported_at=exported_at)

    def save(self) -> Path:
        """Write the collection back to its file."""
        if self._path is None:
            msg = "PresetStore has no backing file"
            raise ValueError(msg)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self.export_presets(), encoding="utf-8")
        return self._path
