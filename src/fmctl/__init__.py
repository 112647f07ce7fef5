"""fmctl — preset-driven frontmatter merging for Markdown documents."""

from fmctl.domain.convert import convert_form_data
from fmctl.domain.frontmatter import parse_frontmatter
from fmctl.domain.merge import merge, merge_all
from fmctl.domain.mutation import replace_frontmatter, serialize_frontmatter
from fmctl.domain.validation import validate
from fmctl.services.defaults import resolve_defaults

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "convert_form_data",
    "merge",
    "merge_all",
    "parse_frontmatter",
    "replace_frontmatter",
    "resolve_defaults",
    "serialize_frontmatter",
    "validate",
]
