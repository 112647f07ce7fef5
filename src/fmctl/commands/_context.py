"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Presets and plugins are loaded lazily so ``--help``
never touches the filesystem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
import structlog

from fmctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from pathlib import Path

    from fmctl.config.settings import FmSettings
    from fmctl.infrastructure.presets import PresetStore
    from fmctl.plugins.manager import PluginManager
    from fmctl.services.pipeline import PipelineService
    from fmctl.services.ports import DocumentWriter, ExpressionEvaluator
    from fmctl.services.result import ServiceResult

log = structlog.get_logger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: FmSettings, *, presets_path: Path | None = None) -> None:
        self.settings = settings
        self._presets_path = presets_path
        self._store: PresetStore | None = None
        self._plugins: PluginManager | None = None

        from fmctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            quiet=settings.quiet,
        )
        log.debug(
            "settings_loaded",
            config_path=str(settings.config_path) if settings.config_path else None,
            config_source=settings.config_source,
            root=str(settings.root),
        )

    @property
    def presets_path(self) -> Path:
        """``--presets`` if given, else ``[presets] path`` resolved against the root."""
        return self._presets_path or self.settings.presets_path

    @property
    def preset_store(self) -> PresetStore:
        """Presets loaded from :attr:`presets_path` on first access."""
        if self._store is None:
            from fmctl.infrastructure.presets import PresetImportError, PresetStore

            try:
                self._store = PresetStore.from_file(self.presets_path)
            except PresetImportError as exc:
                msg = f"Cannot load presets from {self.presets_path}: {exc}"
                raise click.ClickException(msg) from exc
        return self._store

    @property
    def plugin_manager(self) -> PluginManager:
        """Plugin manager with built-ins, entry points and local plugins loaded."""
        if self._plugins is None:
            from fmctl.plugins.builtins.date_expressions import DateExpressionPlugin
            from fmctl.plugins.manager import LOCAL_PLUGIN_DIR, PluginManager

            pm = PluginManager()
            pm.register_plugin(DateExpressionPlugin(), name="fmctl-date-expressions")
            pm.discover_and_load(local_dir=self.settings.root / LOCAL_PLUGIN_DIR)
            self._plugins = pm
        return self._plugins

    def expression_evaluator(self) -> ExpressionEvaluator | None:
        if not self.settings.expressions.enabled:
            return None
        return self.plugin_manager.get_expression_evaluator()

    def pipeline(self, *, writer: DocumentWriter | None = None) -> PipelineService:
        from fmctl.services.pipeline import PipelineService

        return PipelineService(
            self.settings,
            self.preset_store,
            evaluator=self.expression_evaluator(),
            writer=writer,
        )

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr unless in JSON mode.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
