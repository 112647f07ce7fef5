"""Collaborator contracts consumed by the service layer.

The engine never talks to a host editor, a template processor or a
preset store directly; callers inject objects satisfying these
protocols. Tests use small fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from fmctl.domain.frontmatter import parse_frontmatter

if TYPE_CHECKING:
    from fmctl.domain.fields import Preset
    from fmctl.domain.frontmatter import Position


@runtime_checkable
class PresetSource(Protocol):
    """Read-only access to already-loaded presets."""

    def get_preset_by_id(self, preset_id: str) -> Preset | None: ...

    def list_presets(self) -> list[Preset]: ...


@runtime_checkable
class ExpressionEvaluator(Protocol):
    """Evaluates macro expressions such as ``<% tp.date.now("YYYY") %>``.

    ``evaluate`` may raise; the defaults resolver treats any failure as
    "leave the literal text in place".
    """

    def is_available(self) -> bool: ...

    async def evaluate(self, text: str) -> str: ...


@runtime_checkable
class DocumentWriter(Protocol):
    """Applies final document text to the live document."""

    def write(self, context: DocumentContext, content: str) -> None: ...


@dataclass(frozen=True)
class DocumentContext:
    """Snapshot of the active document, parsed once per operation."""

    content: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    position: Position | None = None
    path: Path | None = None

    @classmethod
    def from_text(cls, content: str, *, path: Path | None = None) -> DocumentContext:
        parsed = parse_frontmatter(content)
        return cls(
            content=content,
            frontmatter=parsed.frontmatter,
            position=parsed.position,
            path=path,
        )
