"""Layered frontmatter merging.

Layers are plain dicts ordered from lowest to highest precedence::

    preset_defaults < note_existing < template_declared < user_input

For every key present in a higher layer its value replaces the lower
one, except for *union keys* (``tags`` by default): those are coerced to
lists, concatenated lower-then-higher and deduplicated, keeping the
first occurrence.

INVARIANT: ``merge_all`` is a strict left fold of ``merge``, and a key
keeps the position where it was first introduced even when a later
layer overrides its value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fmctl.domain.fields import Preset

UNION_KEYS: frozenset[str] = frozenset({"tags"})


def _as_list(value: Any) -> list[Any]:
    """Scalar -> singleton list, falsy/absent -> empty list."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if not value:
        return []
    return [value]


def _dedupe(items: Iterable[Any]) -> list[Any]:
    # Equality scan rather than a set: list items may be unhashable.
    result: list[Any] = []
    for item in items:
        if item not in result:
            result.append(item)
    return result


def merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
    *,
    union_keys: Iterable[str] = UNION_KEYS,
) -> dict[str, Any]:
    """Merge *override* on top of *base*, returning a new dict.

    Examples:
        >>> merge({"tags": ["a", "b"]}, {"tags": ["b", "c"]})
        {'tags': ['a', 'b', 'c']}
        >>> merge({"status": "todo", "title": "A"}, {"status": "done"})
        {'status': 'done', 'title': 'A'}
    """
    union = frozenset(union_keys)
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in union:
            merged[key] = _dedupe(_as_list(merged.get(key)) + _as_list(value))
            continue
        merged[key] = value
    return merged


def merge_all(
    layers: Sequence[Mapping[str, Any]],
    *,
    union_keys: Iterable[str] = UNION_KEYS,
) -> dict[str, Any]:
    """Left-fold :func:`merge` over *layers* (ascending precedence)."""
    union = frozenset(union_keys)
    result: dict[str, Any] = {}
    for layer in layers:
        result = merge(result, layer, union_keys=union)
    return result


def order_by_preset(frontmatter: Mapping[str, Any], preset: Preset | None) -> dict[str, Any]:
    """Return *frontmatter* with preset field keys first, extras appended.

    Keys declared on *preset* come first in field order (only those
    present); the remaining keys follow in their original order.
    """
    if preset is None:
        return dict(frontmatter)

    ordered: dict[str, Any] = {}
    for key in preset.field_keys:
        if key in frontmatter and key not in ordered:
            ordered[key] = frontmatter[key]
    for key, value in frontmatter.items():
        if key not in ordered:
            ordered[key] = value
    return ordered


def strip_keys(frontmatter: Mapping[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """Return a copy of *frontmatter* without *keys*."""
    drop = frozenset(keys)
    return {k: v for k, v in frontmatter.items() if k not in drop}
