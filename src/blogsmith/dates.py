"""The ``datetime`` template helper.

Formats dates with moment.js-style patterns (``YYYY/MM/DD``,
``ddd, DD MMM YYYY HH:mm:ss ZZ``) so that the patterns used in templates
and in the permalink configuration read the same everywhere. Text inside
square brackets is emitted literally.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

from blogsmith.frontmatter import coerce_datetime

DEFAULT_FORMAT = "ddd, DD MMM YYYY HH:mm:ss ZZ"

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Longest tokens first so that "MMMM" wins over "MM".
_TOKEN_RE = re.compile(
    r"\[[^\]]*\]|YYYY|YY|MMMM|MMM|MM|M|Do|DD|D|dddd|ddd|dd|d"
    r"|HH|H|hh|h|mm|m|ss|s|A|a|ZZ|Z|X|x"
)


def _ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _offset(dt: datetime, sep: str) -> str:
    delta = dt.utcoffset()
    minutes = int(delta.total_seconds() // 60) if delta else 0
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{sep}{mins:02d}"


def _twelve_hour(hour: int) -> int:
    return hour % 12 or 12


_RENDERERS: dict[str, Callable[[datetime], str]] = {
    "YYYY": lambda dt: f"{dt.year:04d}",
    "YY": lambda dt: f"{dt.year % 100:02d}",
    "MMMM": lambda dt: MONTHS[dt.month - 1],
    "MMM": lambda dt: MONTHS[dt.month - 1][:3],
    "MM": lambda dt: f"{dt.month:02d}",
    "M": lambda dt: str(dt.month),
    "Do": lambda dt: _ordinal(dt.day),
    "DD": lambda dt: f"{dt.day:02d}",
    "D": lambda dt: str(dt.day),
    "dddd": lambda dt: WEEKDAYS[dt.weekday()],
    "ddd": lambda dt: WEEKDAYS[dt.weekday()][:3],
    "dd": lambda dt: WEEKDAYS[dt.weekday()][:2],
    # Sunday is 0
    "d": lambda dt: str(dt.isoweekday() % 7),
    "HH": lambda dt: f"{dt.hour:02d}",
    "H": lambda dt: str(dt.hour),
    "hh": lambda dt: f"{_twelve_hour(dt.hour):02d}",
    "h": lambda dt: str(_twelve_hour(dt.hour)),
    "mm": lambda dt: f"{dt.minute:02d}",
    "m": lambda dt: str(dt.minute),
    "ss": lambda dt: f"{dt.second:02d}",
    "s": lambda dt: str(dt.second),
    "A": lambda dt: "PM" if dt.hour >= 12 else "AM",
    "a": lambda dt: "pm" if dt.hour >= 12 else "am",
    "ZZ": lambda dt: _offset(dt, ""),
    "Z": lambda dt: _offset(dt, ":"),
    "X": lambda dt: str(int(dt.timestamp())),
    "x": lambda dt: str(int(dt.timestamp() * 1000)),
}


def _render_token(token: str, dt: datetime) -> str:
    if token.startswith("["):
        return token[1:-1]
    return _RENDERERS[token](dt)


def format_datetime(value: Any = None, fmt: str | None = None) -> str:
    """Format a date or datetime with a moment-style pattern.

    Args:
        value: A ``date``, ``datetime`` or ISO string. ``None`` means now.
        fmt: Pattern such as ``"YYYY/MM/DD"``. ``None`` (or empty) selects
            the RFC 822 style used by feeds.

    Returns:
        The formatted string.
    """
    if value is None or value == "":
        dt = datetime.now(UTC)
    elif isinstance(value, (date, str)):
        dt = coerce_datetime(value)
    else:
        raise TypeError(f"Cannot format {type(value).__name__} as a date")

    pattern = fmt or DEFAULT_FORMAT
    return _TOKEN_RE.sub(lambda m: _render_token(m.group(0), dt), pattern)
