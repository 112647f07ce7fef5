"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers
are dispatched by ``result.op`` in :func:`render_result`; unknown ops
fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fmctl.output.console import create_console, get_output, style_for_field_type

if TYPE_CHECKING:
    from rich.console import Console

    from fmctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if "id" in item)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "fm.ok"), "  ", (result.op, "fm.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="fm.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="fm.id")
    elif key == "path":
        v = Text(str(value), style="fm.path")
    elif key in ("changed", "written") and value:
        v = Text(str(value), style="fm.changed")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _display(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) if value else "[]"
    if isinstance(value, dict):
        return _json.dumps(value, default=str, separators=(",", ":"))
    return str(value)


def _frontmatter_table(frontmatter: dict[str, Any]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Key", style="fm.field", no_wrap=True)
    table.add_column("Value")
    for key, value in frontmatter.items():
        table.add_row(Text(str(key)), Text(_display(value)))
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "fm.error"), "  ", (result.op, "fm.op"), f" — {msg}"))

    if err is None or not err.detail:
        return
    errors = err.detail.get("errors")
    if isinstance(errors, list) and len(errors) > 1:
        for line in errors:
            console.print(Text(f"    - {line}"))
    if verbose:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {_display(v)}"))


# ── Document renderers ────────────────────────────────────────────────


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    if d.get("path"):
        _field(console, "path", d["path"])
    position = d.get("position")
    if position:
        _field(console, "lines", f"{position['start']}-{position['end']}")
    if not d.get("has_frontmatter"):
        _field(console, "frontmatter", "none")
        return
    frontmatter = d.get("frontmatter") or {}
    if frontmatter:
        console.print()
        console.print(_frontmatter_table(frontmatter))
    else:
        _field(console, "frontmatter", "empty")


def _render_apply(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render prepare/apply results; the merged frontmatter is shown unless written."""
    d = result.data
    _status_line(console, result)
    for key in ("path", "preset_id", "mode", "changed", "written"):
        if d.get(key) is not None:
            _field(console, key, d[key])
    if d.get("skipped_defaults"):
        _field(console, "skipped_defaults", ", ".join(d["skipped_defaults"]))
    if verbose or not d.get("written"):
        console.print()
        console.print(_frontmatter_table(d.get("frontmatter") or {}))


def _render_bind(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("path", "preset_id", "changed", "written"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])


# ── Preset renderers ──────────────────────────────────────────────────


def _render_preset_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="fm.id", no_wrap=True)
    table.add_column("Name", style="fm.field")
    table.add_column("Fields", justify="right")
    if verbose:
        table.add_column("Description", style="dim")
    for item in items:
        row = [str(item.get("id", "")), str(item.get("name", "")), str(item.get("fields", 0))]
        if verbose:
            row.append(item.get("description") or "")
        table.add_row(*(Text(cell) for cell in row))
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} presets")


def _render_preset(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    preset = result.data.get("preset", {})
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Key", style="fm.field", no_wrap=True)
    table.add_column("Label")
    table.add_column("Type")
    table.add_column("Default")
    table.add_column("Options", style="dim")
    for f in preset.get("fields", []):
        field_type = str(f.get("type", "text"))
        table.add_row(
            Text(str(f.get("key", ""))),
            Text(str(f.get("label", ""))),
            Text(field_type, style=style_for_field_type(field_type)),
            Text(_display(f.get("default", ""))),
            Text(", ".join(f.get("options") or [])),
        )
    title = f"{preset.get('id', '?')} — {preset.get('name', '')}"
    console.print(Panel(table, title=title, border_style="dim", expand=False))
    if preset.get("description"):
        console.print(Text(f"  {preset['description']}"))


def _render_validation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "preset_id", result.data.get("preset_id", ""))
    _field(console, "valid", result.data.get("is_valid", True))


def _render_import(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "strategy", d.get("strategy", ""))
    _field(console, "imported", len(d.get("applied", [])))
    for original, new in d.get("renamed", []):
        console.print(f"  [fm.warning]renamed[/fm.warning] {original} -> {new}")
    if d.get("path"):
        _field(console, "path", d["path"])


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if "content" in d and not d.get("path"):
        console.print(d["content"], markup=False, emoji=False, soft_wrap=True, end="")
        return
    _status_line(console, result)
    _field(console, "path", d.get("path", ""))
    _field(console, "count", d.get("count", 0))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, _display(value))


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "show": _render_show,
    "prepare": _render_apply,
    "apply": _render_apply,
    "bind_preset": _render_bind,
    "list_presets": _render_preset_table,
    "get_preset": _render_preset,
    "validate_preset": _render_validation,
    "import_presets": _render_import,
    "export_presets": _render_export,
}
