"""Calendar date parsing for date-typed fields."""

from __future__ import annotations

import re
from datetime import date, datetime

_SLASHED_DATE = re.compile(r"^(\d{4})[/.](\d{1,2})[/.](\d{1,2})$")


def parse_calendar_date(value: object) -> date | None:
    """Parse *value* into a :class:`date`, or return None if it is not one.

    Accepts ``date``/``datetime`` objects, ISO dates (``2025-01-15``),
    ISO date-times (``2025-01-15T10:30:00Z``) and ``YYYY/MM/DD`` or
    ``YYYY.MM.DD`` forms.

    Examples:
        >>> parse_calendar_date("2025-01-15")
        datetime.date(2025, 1, 15)
        >>> parse_calendar_date("2025-02-30") is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    match = _SLASHED_DATE.match(text)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None
