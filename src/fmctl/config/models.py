"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, fmctl.toml only contains overrides.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# Frontmatter keys that bind a note to a preset; never written back by a merge.
PRESET_CONFIG_KEY = "note-architect-config"
LEGACY_PRESET_CONFIG_KEYS: tuple[str, ...] = (
    "note-architect-preset",
    "note-architect-presets",
)


class ExpressionsConfig(BaseModel):
    """[expressions] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    date_format: str = "YYYYMMDDHHmmss"
    marker: str = "<%"


class MergeConfig(BaseModel):
    """[merge] section."""

    model_config = {"frozen": True}

    union_keys: list[str] = Field(default_factory=lambda: ["tags"])
    strip_keys: list[str] = Field(
        default_factory=lambda: [PRESET_CONFIG_KEY, *LEGACY_PRESET_CONFIG_KEYS]
    )
    mode: Literal["merge", "overwrite"] = "merge"


class PresetsConfig(BaseModel):
    """[presets] section."""

    model_config = {"frozen": True}

    path: str = "presets.json"
    default_preset_id: str = ""
