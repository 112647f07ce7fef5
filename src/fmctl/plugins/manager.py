"""Plugin loading and hook dispatch.

Plugins come from three places, in registration order: built-ins
registered by the CLI context, ``fmctl.plugins`` entry points, and
``*.py`` files in a workspace's ``.fmctl/plugins/`` directory. A plugin
can offer an expression evaluator and observe written documents.

Plugin failures never abort an apply: hook errors are logged and the
hook is treated as having returned nothing.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy

from fmctl.plugins.hookspecs import FmctlHookSpec

if TYPE_CHECKING:
    from fmctl.services.ports import ExpressionEvaluator

PROJECT_NAME = "fmctl"
ENTRY_POINT_GROUP = "fmctl.plugins"
LOCAL_PLUGIN_DIR = Path(".fmctl") / "plugins"
LOCAL_MODULE_PREFIX = "fmctl_local_plugin_"

logger = logging.getLogger(__name__)


class PluginManager:
    """Registry of fmctl plugins over a :class:`pluggy.PluginManager`."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FmctlHookSpec)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin object under *name* (default: its class name)."""
        resolved = name or type(plugin).__name__
        self._pm.register(plugin, name=resolved)
        logger.debug("Registered plugin: %s", resolved)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then the plugins in *local_dir*.

        Returns the names of all registered plugins.
        """
        self._load_entry_points()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local_file(path)
        self._loaded = True
        return self.list_plugin_names()

    # ── Hook dispatch ─────────────────────────────────────────────────

    def get_expression_evaluator(self) -> ExpressionEvaluator | None:
        """Evaluator from the first plugin that offers one, or None."""
        try:
            return self._pm.hook.fmctl_expression_evaluator()
        except Exception:
            logger.warning("Expression evaluator hook failed", exc_info=True)
            return None

    def notify_applied(self, *, preset_id: str, path: str, frontmatter: dict[str, Any]) -> None:
        """Tell plugins a document was written with *frontmatter*."""
        try:
            self._pm.hook.post_apply(preset_id=preset_id, path=path, frontmatter=frontmatter)
        except Exception:
            logger.warning("post_apply hook failed for %s", path, exc_info=True)

    # ── Loading ───────────────────────────────────────────────────────

    def _load_entry_points(self) -> None:
        count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        if count:
            logger.debug("Loaded %d entry-point plugin(s)", count)
        # An entry point may name a plugin class; hooks are bound on an instance.
        for plugin in list(self._pm.get_plugins()):
            if inspect.isclass(plugin) and self._implements_hooks(plugin):
                name = self._pm.get_name(plugin) or plugin.__name__
                self._pm.unregister(plugin)
                self._instantiate(plugin, name)

    def _load_local_file(self, path: Path) -> None:
        module = self._import_file(path)
        if module is None:
            return
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ == module.__name__ and self._implements_hooks(cls):
                self._instantiate(cls, f"{module.__name__}.{cls.__name__}")

    def _instantiate(self, cls: type, name: str) -> None:
        try:
            plugin = cls()
        except Exception:
            logger.warning("Cannot instantiate plugin %s", name, exc_info=True)
            return
        self.register_plugin(plugin, name=name)

    @staticmethod
    def _import_file(path: Path) -> ModuleType | None:
        """Import *path* as a uniquely named module; None when it fails."""
        module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            logger.warning("Not an importable plugin file: %s", path)
            return None
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            logger.warning("Failed to load local plugin %s", path, exc_info=True)
            sys.modules.pop(module_name, None)
            return None
        return module

    def _implements_hooks(self, cls: type) -> bool:
        """Whether *cls* has at least one public method marked as an fmctl hookimpl."""
        return any(
            self._pm.parse_hookimpl_opts(cls, attr) is not None
            for attr in dir(cls)
            if not attr.startswith("_")
        )
