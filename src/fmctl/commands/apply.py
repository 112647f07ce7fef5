"""Command: merge preset defaults, template and values into a document."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import click

from fmctl.commands._base import FmCommand, parse_assignments

if TYPE_CHECKING:
    from fmctl.commands._context import AppContext
    from fmctl.services.pipeline import UpdateMode


@click.command(
    cls=FmCommand,
    examples="""\
  fmctl apply notes/meeting.md --preset meeting
  fmctl apply notes/meeting.md --preset meeting --set status=done --set tags=x --set tags=y
  fmctl apply notes/meeting.md --template templates/meeting.md
  fmctl apply notes/meeting.md --preset meeting --mode overwrite --dry-run""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--preset", "preset_id", default=None, help="Preset ID to apply.")
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Form value (repeatable; repeat a key for multi-select).",
)
@click.option(
    "--template",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Template whose frontmatter joins the merge.",
)
@click.option(
    "--mode",
    type=click.Choice(["merge", "overwrite"]),
    default=None,
    help="Keep the note's existing keys (merge) or drop them (overwrite).",
)
@click.option("--dry-run", is_flag=True, help="Show the result without writing the file.")
@click.pass_obj
def apply(
    app: AppContext,
    file: Path,
    preset_id: str | None,
    assignments: tuple[str, ...],
    template: Path | None,
    mode: UpdateMode | None,
    dry_run: bool,
) -> None:
    """Rewrite the frontmatter of FILE from a preset and form values."""
    from fmctl.infrastructure.documents import FileDocumentWriter, load_document, read_document

    form_values = parse_assignments(assignments)
    context = load_document(file)
    template_text = read_document(template) if template else None

    svc = app.pipeline(writer=FileDocumentWriter())
    result = asyncio.run(
        svc.apply(
            context,
            preset_id=preset_id,
            form_values=form_values,
            template_text=template_text,
            mode=mode,
            dry_run=dry_run,
        )
    )
    if result.ok and result.data.get("written"):
        app.plugin_manager.notify_applied(
            preset_id=result.data["preset_id"],
            path=str(file),
            frontmatter=result.data["frontmatter"],
        )
    app.emit(result)
