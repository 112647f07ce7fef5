"""Pluggy hook specifications for fmctl.

One setup-time hook supplies the macro evaluator used for expression
defaults; one lifecycle hook fires after a document was written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from fmctl.services.ports import ExpressionEvaluator

hookspec = pluggy.HookspecMarker("fmctl")


class FmctlHookSpec:
    """Hook specifications for the fmctl plugin system."""

    @hookspec(firstresult=True)
    def fmctl_expression_evaluator(self) -> ExpressionEvaluator | None:
        """Return an evaluator for ``<% ... %>`` defaults, or None to pass."""

    @hookspec
    def post_apply(
        self,
        preset_id: str,
        path: str,
        frontmatter: dict[str, Any],
    ) -> None:
        """Called after merged frontmatter was written to a document."""
