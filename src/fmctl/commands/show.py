"""Command: print a document's parsed frontmatter."""

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
  fmctl show notes/meeting.md
  fmctl --json show notes/meeting.md""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def show(app: AppContext, file: Path) -> None:
    """Show the frontmatter block of FILE and the lines it occupies."""
    from fmctl.domain.frontmatter import parse_frontmatter
    from fmctl.infrastructure.documents import read_document
    from fmctl.services.result import ServiceResult

    parsed = parse_frontmatter(read_document(file))
    position = parsed.position
    app.emit(
        ServiceResult(
            ok=True,
            op="show",
            data={
                "path": str(file),
                "has_frontmatter": parsed.has_frontmatter,
                "position": {"start": position.start, "end": position.end} if position else None,
                "frontmatter": parsed.frontmatter,
            },
        )
    )
