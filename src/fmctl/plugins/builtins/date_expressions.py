"""Built-in evaluator for date-stamp expressions.

Understands the one expression shape fmctl itself generates for date
autofill defaults::

    <% tp.date.now("YYYY-MM-DD") %>

Format strings use moment.js-style tokens; text in ``[brackets]`` is
copied literally. Any other expression raises ``ValueError`` so the
defaults resolver keeps the literal text and reports the field as
skipped. A template-engine plugin registering its own evaluator takes
precedence over this one.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime

import pluggy

hookimpl = pluggy.HookimplMarker("fmctl")

_EXPRESSION = re.compile(
    r"""<%\s*tp\.date\.now\(\s*(?:(["'])(?P<fmt>(?:\\.|(?!\1).)*)\1)?\s*\)\s*%>"""
)

_TOKEN = re.compile(
    r"\[(?P<literal>[^\]]*)\]"
    r"|YYYY|YY|MMMM|MMM|MM|M|DDDD|DD|D|dddd|ddd|HH|H|hh|h|mm|m|ss|s|A|a"
)

DEFAULT_FORMAT = "YYYY-MM-DD"


def _twelve_hour(moment: datetime) -> int:
    return moment.hour % 12 or 12


_RENDERERS: dict[str, Callable[[datetime], str]] = {
    "YYYY": lambda d: f"{d.year:04d}",
    "YY": lambda d: f"{d.year % 100:02d}",
    "MMMM": lambda d: d.strftime("%B"),
    "MMM": lambda d: d.strftime("%b"),
    "MM": lambda d: f"{d.month:02d}",
    "M": lambda d: str(d.month),
    "DDDD": lambda d: f"{d.timetuple().tm_yday:03d}",
    "DD": lambda d: f"{d.day:02d}",
    "D": lambda d: str(d.day),
    "dddd": lambda d: d.strftime("%A"),
    "ddd": lambda d: d.strftime("%a"),
    "HH": lambda d: f"{d.hour:02d}",
    "H": lambda d: str(d.hour),
    "hh": lambda d: f"{_twelve_hour(d):02d}",
    "h": lambda d: str(_twelve_hour(d)),
    "mm": lambda d: f"{d.minute:02d}",
    "m": lambda d: str(d.minute),
    "ss": lambda d: f"{d.second:02d}",
    "s": lambda d: str(d.second),
    "A": lambda d: "AM" if d.hour < 12 else "PM",
    "a": lambda d: "am" if d.hour < 12 else "pm",
}


def format_moment(moment: datetime, fmt: str) -> str:
    """Render *moment* using a moment.js-style format string.

    Examples:
        >>> format_moment(datetime(2024, 3, 5, 14, 7, 9), "YYYY-MM-DD HH:mm")
        '2024-03-05 14:07'
        >>> format_moment(datetime(2024, 3, 5), "[Week of] MMM D")
        'Week of Mar 5'
    """

    def _replace(match: re.Match[str]) -> str:
        literal = match.group("literal")
        if literal is not None:
            return literal
        return _RENDERERS[match.group(0)](moment)

    return _TOKEN.sub(_replace, fmt)


class DateExpressionEvaluator:
    """ExpressionEvaluator for ``tp.date.now`` stamps."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or datetime.now

    def is_available(self) -> bool:
        return True

    async def evaluate(self, text: str) -> str:
        moment = self._clock()

        def _replace(match: re.Match[str]) -> str:
            raw = match.group("fmt")
            fmt = re.sub(r"\\(.)", r"\1", raw) if raw else DEFAULT_FORMAT
            return format_moment(moment, fmt)

        result = _EXPRESSION.sub(_replace, text)
        if "<%" in result:
            msg = f"Unsupported expression: {text!r}"
            raise ValueError(msg)
        return result


class DateExpressionPlugin:
    """Registers :class:`DateExpressionEvaluator` as the fallback evaluator."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._evaluator = DateExpressionEvaluator(clock)

    @hookimpl(trylast=True)
    def fmctl_expression_evaluator(self) -> DateExpressionEvaluator:
        return self._evaluator
