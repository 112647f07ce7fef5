"""Settings for one fmctl invocation.

Sources, highest priority first:

1. CLI flags, passed to :meth:`FmSettings.from_cli` as keyword arguments
2. ``FMCTL_*`` environment variables (``__`` reaches into a section,
   e.g. ``FMCTL_MERGE__MODE=overwrite``)
3. The fmctl.toml chosen by :func:`~fmctl.config.discovery.locate_config`
4. Defaults of the section models in :mod:`fmctl.config.models`
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from fmctl.config.discovery import ConfigNotFoundError, ConfigSource, locate_config
from fmctl.config.models import ExpressionsConfig, MergeConfig, PresetsConfig

# The TOML file for the settings object under construction.
_toml_file: ContextVar[Path | None] = ContextVar("fmctl_toml_file", default=None)


class FmSettings(BaseSettings):
    """Settings shared by the CLI, services and plugins.

    Attributes:
        root: Directory relative paths (the presets file) resolve against.
        config_path: The TOML file in effect, if any.
        config_source: How *config_path* was found.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="FMCTL_",
        env_nested_delimiter="__",
    )

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    config_source: ConfigSource = "default"

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    expressions: ExpressionsConfig = Field(default_factory=ExpressionsConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    presets: PresetsConfig = Field(default_factory=PresetsConfig)

    @property
    def presets_path(self) -> Path:
        """Presets file resolved against :attr:`root`."""
        path = Path(self.presets.path).expanduser()
        return path if path.is_absolute() else self.root / path

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Flags, then env vars, then fmctl.toml; no dotenv or secrets files."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=_toml_file.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> FmSettings:
        """Build settings for a CLI run.

        *root* pins the workspace root and is where the walk-up starts;
        otherwise the root is the config file's directory (or CWD).
        Flags passed as None are dropped so env and TOML values apply.

        Raises:
            click.ClickException: If a named config file is missing or
                the TOML cannot be decoded.
        """
        try:
            location = locate_config(config_path, start=root)
        except ConfigNotFoundError as exc:
            raise click.ClickException(str(exc)) from exc

        overrides = {k: v for k, v in cli_flags.items() if v is not None}
        token = _toml_file.set(location.path)
        try:
            return cls(
                root=root if root is not None else location.root,
                config_path=location.path,
                config_source=location.source,
                **overrides,
            )
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {location.path}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _toml_file.reset(token)
