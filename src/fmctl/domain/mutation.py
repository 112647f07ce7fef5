"""Frontmatter serialization and in-place document replacement.

INVARIANT: :func:`replace_frontmatter` rewrites only the frontmatter
region. Text before and after the block is carried over byte for byte,
and the full replacement text is built in memory before anything is
returned, so a failure can never leave a document half-written.

:class:`MutationError` is the one fatal error of the engine: it is
raised when a value cannot be represented as YAML or when a block
position does not fit the document.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from io import StringIO
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from fmctl.domain.frontmatter import (
    FRONTMATTER_DELIMITER,
    FrontmatterDocument,
    Position,
    is_delimiter,
    parse_frontmatter,
)
from fmctl.domain.merge import order_by_preset

if TYPE_CHECKING:
    from fmctl.domain.fields import Preset


class MutationError(Exception):
    """Serialization or replacement failed; nothing was written."""


@dataclass(frozen=True)
class MutationResult:
    """New document text and whether it differs from the input."""

    content: str
    changed: bool


@dataclass(frozen=True)
class FrontmatterUpdate:
    """Result of :func:`update_frontmatter`."""

    content: str
    frontmatter: dict[str, Any]
    previous_frontmatter: dict[str, Any] = field(default_factory=dict)
    changed: bool = False


def _new_yaml() -> YAML:
    """Create a fresh round-trip emitter.

    A new instance per call avoids corrupted internal emitter state from
    propagating across operations (ruamel.yaml's YAML object is stateful
    and a failed dump can leave it in a broken state).
    """
    y = YAML()
    y.default_flow_style = False
    y.allow_unicode = True
    y.width = sys.maxsize
    y.indent(mapping=2, sequence=4, offset=2)
    return y


def _split_keepends(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping terminators (unlike ``str.splitlines``)."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def serialize_frontmatter(
    frontmatter: Mapping[str, Any],
    *,
    preset: Preset | None = None,
) -> str:
    """Render *frontmatter* as block YAML text (without delimiters).

    Keys declared on *preset* come first in field order, remaining keys
    follow in their original order. An empty map renders as ``""``.

    Raises:
        MutationError: If a value cannot be represented as YAML.
    """
    ordered = order_by_preset(frontmatter, preset)
    if not ordered:
        return ""

    buf = StringIO()
    try:
        _new_yaml().dump(ordered, buf)
    except YAMLError as exc:
        msg = f"Cannot serialize frontmatter: {exc}"
        raise MutationError(msg) from exc
    return buf.getvalue().replace("\r\n", "\n")


def render_block(block_text: str, newline: str = "\n") -> str:
    """Wrap serialized YAML in delimiters plus one blank separator line."""
    block = f"{FRONTMATTER_DELIMITER}\n{block_text}{FRONTMATTER_DELIMITER}\n\n"
    return block if newline == "\n" else block.replace("\n", newline)


def _line_ending(line: str) -> str:
    return "\r\n" if line.endswith("\r\n") else "\n"


def replace_frontmatter(
    document: str,
    block_text: str,
    position: Position | None,
) -> MutationResult:
    """Write *block_text* into *document* at *position*.

    With a position, exactly the inclusive line range is replaced by the
    rendered block and everything after it is left as is. Without one,
    the block is prepended. The block uses the line ending of the
    document (its opening delimiter, or its first line when prepending).

    Returns ``changed=False`` and the original text when the region
    already holds *block_text*.

    Raises:
        MutationError: If *position* does not describe a block in
            *document*.
    """
    lines = _split_keepends(document)
    if position is None:
        newline = _line_ending(lines[0]) if lines else "\n"
        return MutationResult(content=render_block(block_text, newline) + document, changed=True)

    if position.start < 0 or position.end <= position.start or position.end >= len(lines):
        msg = (
            f"Frontmatter position {position.start}-{position.end} "
            f"is outside the document ({len(lines)} lines)"
        )
        raise MutationError(msg)
    if not (is_delimiter(lines[position.start]) and is_delimiter(lines[position.end])):
        msg = f"Lines {position.start} and {position.end} are not frontmatter delimiters"
        raise MutationError(msg)

    current = "".join(lines[position.start + 1 : position.end]).replace("\r\n", "\n")
    if current == block_text:
        return MutationResult(content=document, changed=False)

    newline = _line_ending(lines[position.start])
    before = "".join(lines[: position.start])
    after = "".join(lines[position.end + 1 :])
    return MutationResult(
        content=before + render_block(block_text, newline) + after,
        changed=True,
    )


def compose_content(
    frontmatter: Mapping[str, Any],
    parsed: FrontmatterDocument,
    *,
    preset: Preset | None = None,
    newline: str = "\n",
) -> str:
    """Rebuild a whole document from *frontmatter* and the parsed body.

    The block re-emits the separator line that parsing dropped from the
    body, so a single blank line stays a single blank line.
    """
    block_text = serialize_frontmatter(frontmatter, preset=preset)
    content = render_block(block_text) + parsed.body.replace("\r\n", "\n")
    return content if newline == "\n" else content.replace("\n", newline)


def update_frontmatter(
    document: str,
    updater: Callable[[dict[str, Any]], Mapping[str, Any]],
    parsed: FrontmatterDocument | None = None,
) -> FrontmatterUpdate:
    """Apply *updater* to a copy of the document's frontmatter.

    The document is only rewritten when the updated map differs from
    the parsed one, so a corrupt block is replaced as soon as any key is
    set while an unchanged map leaves the text untouched.
    """
    base = parsed if parsed is not None else parse_frontmatter(document)
    updated = dict(updater(dict(base.frontmatter)))
    if updated == base.frontmatter:
        return FrontmatterUpdate(
            content=document,
            frontmatter=updated,
            previous_frontmatter=base.frontmatter,
            changed=False,
        )

    lines = _split_keepends(document)
    newline = _line_ending(lines[0]) if lines else "\n"
    return FrontmatterUpdate(
        content=compose_content(updated, base, newline=newline),
        frontmatter=updated,
        previous_frontmatter=base.frontmatter,
        changed=True,
    )
