"""Markdown documents on disk.

:func:`load_document` snapshots a file into a
:class:`~fmctl.services.ports.DocumentContext`; :class:`FileDocumentWriter`
is the :class:`~fmctl.services.ports.DocumentWriter` used by the CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fmctl.services.ports import DocumentContext

logger = logging.getLogger(__name__)


def read_document(path: Path) -> str:
    # newline="" keeps CRLF files byte-for-byte; parsing normalizes on its own.
    with path.open(encoding="utf-8", newline="") as fh:
        return fh.read()


def load_document(path: Path) -> DocumentContext:
    """Read and parse *path* into a document snapshot."""
    return DocumentContext.from_text(read_document(path), path=path)


class FileDocumentWriter:
    """Writes new document text back to the file the context came from."""

    def __init__(self, *, fallback_path: Path | None = None) -> None:
        self._fallback_path = fallback_path

    def write(self, context: DocumentContext, content: str) -> None:
        target = context.path or self._fallback_path
        if target is None:
            msg = "Document has no path to write to"
            raise ValueError(msg)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        logger.debug("Wrote %d characters to %s", len(content), target)
