"""Root CLI group for fmctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from fmctl import __version__
from fmctl.commands import register_commands
from fmctl.commands._context import AppContext
from fmctl.config.settings import FmSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="fmctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--presets",
    "presets_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Presets JSON file (overrides [presets] path).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    presets_path: Path | None,
) -> None:
    """fmctl — fill Markdown frontmatter from presets."""
    ctx.ensure_object(dict)
    settings = FmSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
    )
    ctx.obj = AppContext(settings, presets_path=presets_path)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
