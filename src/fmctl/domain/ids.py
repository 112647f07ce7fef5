"""Preset ID validation and generation.

Preset IDs are slugs: 2-50 characters, starting with a letter, then
letters, digits, hyphens or underscores. New IDs are derived from the
preset name; collisions get a numeric ``-N`` suffix.
"""

from __future__ import annotations

import re
import time
import unicodedata
from collections.abc import Callable, Iterable

PRESET_ID_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")
MIN_ID_LENGTH = 2
MAX_ID_LENGTH = 50
DEFAULT_MAX_SUFFIX = 9999
FALLBACK_PREFIX = "preset"


def preset_id_error(preset_id: str) -> str | None:
    """Return a message describing why *preset_id* is invalid, or None."""
    if not preset_id:
        return "Preset ID must not be empty"
    if len(preset_id) < MIN_ID_LENGTH:
        return f"Preset ID must be at least {MIN_ID_LENGTH} characters"
    if len(preset_id) > MAX_ID_LENGTH:
        return f"Preset ID must be at most {MAX_ID_LENGTH} characters"
    if not PRESET_ID_PATTERN.match(preset_id):
        return (
            "Preset ID may only contain letters, digits, hyphens and underscores, "
            "and must start with a letter"
        )
    return None


def is_valid_preset_id(preset_id: str) -> bool:
    return preset_id_error(preset_id) is None


def compute_name_hash(value: str) -> str:
    """Stable base-36 hash of *value*, 6-10 characters.

    Examples:
        >>> compute_name_hash("a")
        '00002p'
    """
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while True:
        h, rem = divmod(h, 36)
        encoded = digits[rem] + encoded
        if h == 0:
            break
    return encoded.rjust(6, "0")[:10]


def build_base_preset_id(name: str) -> str:
    """Slugify a preset *name* into a candidate ID.

    Accents are stripped, runs of other characters collapse to ``-``,
    and a slug that does not start with a letter gets a ``preset-``
    prefix. Names with nothing usable fall back to a hash.

    Examples:
        >>> build_base_preset_id("Meeting Notes")
        'meeting-notes'
        >>> build_base_preset_id("2024 Plan")
        'preset-2024-plan'
    """
    trimmed = name.strip()
    if not trimmed:
        return FALLBACK_PREFIX

    decomposed = unicodedata.normalize("NFKD", trimmed)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    slug = re.sub(r"[^a-z0-9]+", "-", stripped.lower()).strip("-")

    if slug and not slug[0].isalpha():
        slug = f"{FALLBACK_PREFIX}-{slug}"
    if not slug:
        slug = f"{FALLBACK_PREFIX}-{compute_name_hash(trimmed)}"

    slug = slug[:MAX_ID_LENGTH].rstrip("-")
    if len(slug) < MIN_ID_LENGTH:
        slug = f"{FALLBACK_PREFIX}-{compute_name_hash(trimmed)}"
    return slug[:MAX_ID_LENGTH] or FALLBACK_PREFIX


def _resolve_conflict(
    base_id: str,
    is_available: Callable[[str], bool],
    *,
    max_suffix: int,
    fallback_prefix: str,
) -> str:
    for suffix in range(2, max_suffix + 1):
        suffix_text = f"-{suffix}"
        truncated = base_id[: MAX_ID_LENGTH - len(suffix_text)].rstrip("-") or fallback_prefix
        candidate = f"{truncated}{suffix_text}"
        if is_valid_preset_id(candidate) and is_available(candidate):
            return candidate

    timestamp_id = f"{fallback_prefix}-{int(time.time() * 1000)}"[:MAX_ID_LENGTH]
    if is_valid_preset_id(timestamp_id) and is_available(timestamp_id):
        return timestamp_id
    return f"{fallback_prefix}-{int(time.time_ns())}"[:MAX_ID_LENGTH]


def generate_unique_preset_id(
    name: str,
    existing_ids: Iterable[str] = (),
    *,
    max_suffix: int = DEFAULT_MAX_SUFFIX,
) -> str:
    """Derive an ID from *name* that is valid and not in *existing_ids*."""
    taken = set(existing_ids)
    base_id = build_base_preset_id(name)
    if is_valid_preset_id(base_id) and base_id not in taken:
        return base_id
    return _resolve_conflict(
        base_id,
        lambda candidate: candidate not in taken,
        max_suffix=max_suffix,
        fallback_prefix=FALLBACK_PREFIX,
    )


def generate_unique_preset_id_from(
    original_id: str,
    existing_ids: Iterable[str] = (),
    *,
    max_suffix: int = DEFAULT_MAX_SUFFIX,
) -> str:
    """Keep *original_id* if free, otherwise suffix it (``daily`` -> ``daily-2``)."""
    taken = set(existing_ids)
    normalized = original_id.strip()
    if is_valid_preset_id(normalized) and normalized not in taken:
        return normalized
    return _resolve_conflict(
        normalized,
        lambda candidate: candidate not in taken,
        max_suffix=max_suffix,
        fallback_prefix=normalized or FALLBACK_PREFIX,
    )
