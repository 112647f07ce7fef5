"""Command group: inspect, import and export presets."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from fmctl.commands._base import FmGroup

if TYPE_CHECKING:
    from fmctl.commands._context import AppContext


@click.group(
    cls=FmGroup,
    invoke_without_command=True,
    examples="""\
  fmctl presets
  fmctl presets show meeting
  fmctl presets import shared-presets.json
  fmctl presets import shared-presets.json --replace
  fmctl presets export -o backup.json""",
)
@click.pass_context
def presets(ctx: click.Context) -> None:
    """Work with the loaded presets (lists them when no subcommand is given)."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(list_cmd)


@presets.command("list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List loaded presets."""
    from fmctl.services.presets import PresetService

    app.emit(PresetService(app.settings, app.preset_store).list_presets())


@presets.command("show")
@click.argument("preset_id")
@click.pass_obj
def show_cmd(app: AppContext, preset_id: str) -> None:
    """Show the fields of PRESET_ID."""
    from fmctl.services.presets import PresetService

    app.emit(PresetService(app.settings, app.preset_store).get_preset(preset_id))


@presets.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", is_flag=True, help="Replace all presets instead of adding to them.")
@click.pass_obj
def import_cmd(app: AppContext, file: Path, replace: bool) -> None:
    """Import presets from FILE into the presets file."""
    from fmctl.infrastructure.presets import PresetImportError
    from fmctl.services.result import ServiceResult, failure

    store = app.preset_store
    try:
        outcome = store.import_presets(
            file.read_text(encoding="utf-8"),
            strategy="replace" if replace else "merge",
        )
    except PresetImportError as exc:
        app.emit(failure("import_presets", "IMPORT_FAILED", str(exc), source=str(file)))
        return

    saved = store.save()
    app.emit(
        ServiceResult(
            ok=True,
            op="import_presets",
            data={
                "strategy": outcome.strategy,
                "applied": [p.id for p in outcome.applied],
                "renamed": [list(pair) for pair in outcome.renamed],
                "path": str(saved),
            },
        )
    )


@presets.command("export")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to a file instead of stdout.",
)
@click.pass_obj
def export_cmd(app: AppContext, output: Path | None) -> None:
    """Export all presets as JSON."""
    from fmctl.services.result import ServiceResult

    store = app.preset_store
    content = store.export_presets()
    count = len(store.list_presets())
    if output is None:
        data: dict[str, object] = {"content": content, "count": count}
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
        data = {"path": str(output), "count": count}
    app.emit(ServiceResult(ok=True, op="export_presets", data=data))
