"""Rich Console factory and theme for fmctl output.

Consoles render to a StringIO buffer so renderers keep a
``render_result() -> str`` contract. Rich drops color codes on its own
when stdout is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FM_THEME = Theme(
    {
        "fm.ok": "bold green",
        "fm.error": "bold red",
        "fm.warning": "bold yellow",
        "fm.op": "bold cyan",
        "fm.key": "dim",
        "fm.id": "bold blue",
        "fm.path": "dim",
        "fm.field": "bold",
        "fm.changed": "yellow",
        "fm.type.text": "white",
        "fm.type.select": "magenta",
        "fm.type.multi-select": "magenta",
        "fm.type.date": "cyan",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=FM_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_field_type(field_type: str) -> str:
    style = f"fm.type.{field_type}"
    return style if style in FM_THEME.styles else ""
