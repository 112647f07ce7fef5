"""Subcommand modules for fmctl.

Provides register_commands() which uses deferred imports to keep
``fmctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from fmctl.commands.presets import presets

    cli.add_command(presets)

    # --- Standalone commands ---
    from fmctl.commands.apply import apply
    from fmctl.commands.bind import bind
    from fmctl.commands.show import show
    from fmctl.commands.validate import validate

    cli.add_command(show)
    cli.add_command(validate)
    cli.add_command(apply)
    cli.add_command(bind)
