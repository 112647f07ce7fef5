"""Command: bind a template to a preset."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from fmctl.commands._base import FmCommand

if TYPE_CHECKING:
    from fmctl.commands._context import AppContext


@click.command(
    cls=FmCommand,
    examples="""\
  fmctl bind templates/meeting.md meeting
  fmctl apply notes/today.md --template templates/meeting.md""",
)
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("preset_id")
@click.pass_obj
def bind(app: AppContext, template: Path, preset_id: str) -> None:
    """Record PRESET_ID in TEMPLATE so ``apply --template`` picks it up."""
    from fmctl.infrastructure.documents import FileDocumentWriter, load_document

    svc = app.pipeline(writer=FileDocumentWriter())
    app.emit(svc.bind_preset(load_document(template), preset_id))
