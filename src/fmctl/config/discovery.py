"""Locate the fmctl.toml in effect and the workspace root it defines.

Lookup order: the ``--config`` flag, then ``FMCTL_CONFIG``, then a walk
up from the start directory (the way git finds ``.git/``). A file named
explicitly must exist; a walk-up that finds nothing leaves fmctl on code
defaults, rooted at the start directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

CONFIG_FILENAME = "fmctl.toml"
CONFIG_ENV_VAR = "FMCTL_CONFIG"

ConfigSource = Literal["flag", "env", "walk-up", "default"]


class ConfigNotFoundError(FileNotFoundError):
    """A config file named by ``--config`` or ``FMCTL_CONFIG`` does not exist."""


@dataclass(frozen=True)
class ConfigLocation:
    """Where settings come from.

    Attributes:
        path: The TOML file to read, or None for code defaults only.
        root: Directory that relative paths in the config resolve against.
        source: Which lookup step produced *path*.
    """

    path: Path | None
    root: Path
    source: ConfigSource


def _named_file(raw: str, source: ConfigSource) -> ConfigLocation:
    path = Path(raw).expanduser()
    if not path.is_file():
        origin = "--config" if source == "flag" else CONFIG_ENV_VAR
        msg = f"Config file from {origin} not found: {path}"
        raise ConfigNotFoundError(msg)
    return ConfigLocation(path=path, root=path.parent, source=source)


def locate_config(explicit: str | None = None, *, start: Path | None = None) -> ConfigLocation:
    """Resolve the config file and workspace root for one invocation.

    Raises:
        ConfigNotFoundError: If *explicit* or ``FMCTL_CONFIG`` names a
            missing file.
    """
    if explicit:
        return _named_file(explicit, "flag")
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return _named_file(env_path, "env")

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return ConfigLocation(path=candidate, root=directory, source="walk-up")
    return ConfigLocation(path=None, root=origin, source="default")
