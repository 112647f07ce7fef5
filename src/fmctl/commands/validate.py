"""Command: validate a preset's fields and, optionally, form values."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fmctl.commands._base import FmCommand, parse_assignments

if TYPE_CHECKING:
    from fmctl.commands._context import AppContext


@click.command(
    cls=FmCommand,
    examples="""\
  fmctl validate meeting
  fmctl validate meeting --set due=2024-05-01
  fmctl --json validate meeting""",
)
@click.argument("preset_id")
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Form value to check (repeatable).",
)
@click.pass_obj
def validate(app: AppContext, preset_id: str, assignments: tuple[str, ...]) -> None:
    """Check PRESET_ID for structural problems and invalid values."""
    from fmctl.services.presets import PresetService

    values = parse_assignments(assignments)
    svc = PresetService(app.settings, app.preset_store)
    app.emit(svc.validate_preset(preset_id, values or None))
