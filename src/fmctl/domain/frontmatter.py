"""Frontmatter block parsing.

A frontmatter block is the YAML region at the very top of a document,
opened by a ``---`` line and closed by the next ``---`` line::

    ---
    title: Example
    tags: [a, b]
    ---

    Body text.

INVARIANT: Parsing never raises. A block whose YAML cannot be decoded
(or decodes to something other than a mapping) yields an empty
frontmatter map while ``has_frontmatter`` stays True and the body still
excludes the block, so a corrupt header can be rewritten in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"


@dataclass(frozen=True)
class Position:
    """Inclusive, 0-based line range of a block (both delimiter lines)."""

    start: int
    end: int

    @property
    def line_count(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class FrontmatterDocument:
    """Result of parsing one document. Discarded after one operation."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    has_frontmatter: bool = False
    position: Position | None = None


def _new_yaml() -> YAML:
    """Create a fresh safe loader producing plain dict/list/scalar values."""
    return YAML(typ="safe", pure=True)


def is_delimiter(line: str) -> bool:
    """Whether *line* is a ``---`` delimiter (surrounding whitespace ignored)."""
    return line.strip() == FRONTMATTER_DELIMITER


def find_block(lines: list[str]) -> Position | None:
    """Locate the frontmatter block in already-split *lines*."""
    if not lines or not is_delimiter(lines[0]):
        return None
    for i, line in enumerate(lines[1:], start=1):
        if is_delimiter(line):
            return Position(start=0, end=i)
    return None


def load_yaml_mapping(yaml_block: str) -> dict[str, Any]:
    """Decode *yaml_block* into a dict, degrading to ``{}`` on any failure."""
    try:
        data = _new_yaml().load(yaml_block)
    except (YAMLError, ValueError, TypeError, RecursionError):
        logger.debug("Unparseable frontmatter block; treating as empty", exc_info=True)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.debug("Frontmatter block is a %s, not a mapping", type(data).__name__)
        return {}
    return data


def parse_frontmatter(content: str) -> FrontmatterDocument:
    """Split *content* into frontmatter, body, and block position.

    ``\\r\\n`` line endings are normalized before detection; line numbers
    in :attr:`FrontmatterDocument.position` are the same in the original
    text. One blank separator line after the closing delimiter is not
    part of the body.

    Returns a document with ``has_frontmatter=False`` and the untouched
    input as body when no complete block is found.
    """
    normalized = content.replace("\r\n", "\n")
    lines = normalized.split("\n")
    position = find_block(lines)
    if position is None:
        return FrontmatterDocument(body=content)

    yaml_block = "\n".join(lines[position.start + 1 : position.end])
    body = "\n".join(lines[position.end + 1 :])
    if body.startswith("\n"):
        body = body[1:]

    return FrontmatterDocument(
        frontmatter=load_yaml_mapping(yaml_block),
        body=body,
        has_frontmatter=True,
        position=position,
    )
