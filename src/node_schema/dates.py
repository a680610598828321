"""Strict ISO-8601 date detection and moment-style date formatting.

Date detection matches a string exactly against a fixed family of ISO-8601
calendar formats. Formats use moment-style placeholders (``YYYY``, ``MM``,
``DD``, ``[W]``...) which are tokenized by ``DateFormatLexer``; the same
tokens drive ``format_date`` when a resolver reformats a stored value.

All parsed dates are converted to UTC.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from node_schema.errors import DateFormatError
from node_schema.parsing.date_lexer import DateFormatLexer

ISO_8601_FORMATS: tuple[str, ...] = (
    "YYYY",
    "YYYY-MM",
    "YYYY-MM-DD",
    "YYYYMMDD",
    "YYYY-MM-DDTHHZ",
    "YYYY-MM-DDTHH:mmZ",
    "YYYY-MM-DDTHHmmZ",
    "YYYY-MM-DDTHH:mm:ssZ",
    "YYYY-MM-DDTHHmmssZ",
    "YYYY-MM-DDTHH:mm:ss.SSSZ",
    "YYYY-MM-DDTHHmmss.SSSZ",
    "YYYY-[W]WW",
    "YYYY[W]WW",
    "YYYY-[W]WW-E",
    "YYYY[W]WWE",
    "YYYY-DDDD",
    "YYYYDDDD",
)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Sunday first, matching the ``d`` placeholder (0 = Sunday)
WEEKDAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)

# Placeholders usable when parsing, with the strict pattern each one accepts
_PARSE_PATTERNS: dict[str, str] = {
    "YYYY": r"(?P<year>\d{4})",
    "MM": r"(?P<month>\d{2})",
    "DD": r"(?P<day>\d{2})",
    "DDDD": r"(?P<ordinal>\d{3})",
    "HH": r"(?P<hour>\d{2})",
    "mm": r"(?P<minute>\d{2})",
    "ss": r"(?P<second>\d{2})",
    "SSS": r"(?P<millis>\d{3})",
    "WW": r"(?P<week>\d{2})",
    "E": r"(?P<weekday>\d)",
    "Z": r"(?P<offset>[Zz]|[+-]\d\d:?\d\d)",
}

_UNIT_ALIASES: dict[str, str] = {
    "y": "year", "year": "year", "years": "year",
    "Q": "quarter", "quarter": "quarter", "quarters": "quarter",
    "M": "month", "month": "month", "months": "month",
    "w": "week", "week": "week", "weeks": "week",
    "d": "day", "day": "day", "days": "day",
    "h": "hour", "hour": "hour", "hours": "hour",
    "m": "minute", "minute": "minute", "minutes": "minute",
    "s": "second", "second": "second", "seconds": "second",
    "ms": "millisecond", "millisecond": "millisecond", "milliseconds": "millisecond",
}

_UNIT_MILLIS: dict[str, float] = {
    "week": 6048e5,
    "day": 864e5,
    "hour": 36e5,
    "minute": 6e4,
    "second": 1e3,
    "millisecond": 1.0,
}

_RELATIVE_TIME: dict[str, str] = {
    "s": "a few seconds",
    "m": "a minute",
    "mm": "{} minutes",
    "h": "an hour",
    "hh": "{} hours",
    "d": "a day",
    "dd": "{} days",
    "M": "a month",
    "MM": "{} months",
    "y": "a year",
    "yy": "{} years",
}


@lru_cache(maxsize=256)
def tokenize_format(fmt: str) -> tuple[tuple[str, str], ...]:
    """Split a format string into (token type, value) pairs.

    Each call tokenizes with its own lexer, so concurrent resolvers never
    share lexer state.
    """
    lexer = DateFormatLexer()
    lexer.build()
    return tuple((tok.type, tok.value) for tok in lexer.tokenize(fmt))


@lru_cache(maxsize=64)
def compile_format(fmt: str) -> re.Pattern[str]:
    """Compile a parse format into an anchored regular expression."""
    parts = []
    for kind, value in tokenize_format(fmt):
        if kind == "FIELD":
            pattern = _PARSE_PATTERNS.get(value)
            if pattern is None:
                raise DateFormatError(f"Placeholder '{value}' cannot be used for parsing")
            parts.append(pattern)
        else:
            parts.append(re.escape(value))
    return re.compile("".join(parts))


def _parse_offset(text: str | None) -> timezone:
    if not text or text in ("Z", "z"):
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * delta)


def _is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _build_datetime(parts: dict[str, str]) -> datetime | None:
    """Assemble matched groups into a UTC datetime, or None if the calendar rejects them."""
    try:
        year = int(parts["year"])
        if parts.get("ordinal"):
            ordinal = int(parts["ordinal"])
            if not 1 <= ordinal <= (366 if _is_leap(year) else 365):
                return None
            day = date(year, 1, 1) + timedelta(days=ordinal - 1)
        elif parts.get("week"):
            day = date.fromisocalendar(year, int(parts["week"]), int(parts.get("weekday") or 1))
        else:
            day = date(year, int(parts.get("month") or 1), int(parts.get("day") or 1))

        value = datetime(
            day.year,
            day.month,
            day.day,
            int(parts.get("hour") or 0),
            int(parts.get("minute") or 0),
            int(parts.get("second") or 0),
            int(parts.get("millis") or 0) * 1000,
            tzinfo=_parse_offset(parts.get("offset")),
        )
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def parse_strict(value: Any, formats: tuple[str, ...] = ISO_8601_FORMATS) -> datetime | None:
    """Parse value if it matches one of formats exactly.

    Only strings are considered. Returns None when no format matches or
    the matched fields do not form a real calendar date.
    """
    if not isinstance(value, str):
        return None
    for fmt in formats:
        match = compile_format(fmt).fullmatch(value)
        if match is None:
            continue
        parts = {k: v for k, v in match.groupdict().items() if v is not None}
        parsed = _build_datetime(parts)
        if parsed is not None:
            return parsed
    return None


def is_date(value: Any) -> bool:
    """Return whether value is a string in one of the ISO-8601 date formats."""
    return parse_strict(value) is not None


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _format_offset(value: datetime, separator: str) -> str:
    offset = value.utcoffset() or timedelta(0)
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{sign}{minutes // 60:02d}{separator}{minutes % 60:02d}"


def _render_field(token: str, value: datetime) -> str:
    iso_year, iso_week, iso_weekday = value.isocalendar()
    day_of_year = value.timetuple().tm_yday
    hour12 = value.hour % 12 or 12
    millis = value.microsecond // 1000

    if token == "YYYY":
        return f"{value.year:04d}"
    if token == "YY":
        return f"{value.year % 100:02d}"
    if token == "Q":
        return str((value.month - 1) // 3 + 1)
    if token == "MMMM":
        return MONTH_NAMES[value.month - 1]
    if token == "MMM":
        return MONTH_NAMES[value.month - 1][:3]
    if token == "MM":
        return f"{value.month:02d}"
    if token == "M":
        return str(value.month)
    if token == "Do":
        return _ordinal(value.day)
    if token == "DDDD":
        return f"{day_of_year:03d}"
    if token == "DDD":
        return str(day_of_year)
    if token == "DD":
        return f"{value.day:02d}"
    if token == "D":
        return str(value.day)
    if token == "dddd":
        return WEEKDAY_NAMES[iso_weekday % 7]
    if token == "ddd":
        return WEEKDAY_NAMES[iso_weekday % 7][:3]
    if token == "d":
        return str(iso_weekday % 7)
    if token == "E":
        return str(iso_weekday)
    if token == "WW":
        return f"{iso_week:02d}"
    if token == "W":
        return str(iso_week)
    if token == "HH":
        return f"{value.hour:02d}"
    if token == "H":
        return str(value.hour)
    if token == "hh":
        return f"{hour12:02d}"
    if token == "h":
        return str(hour12)
    if token == "mm":
        return f"{value.minute:02d}"
    if token == "m":
        return str(value.minute)
    if token == "ss":
        return f"{value.second:02d}"
    if token == "s":
        return str(value.second)
    if token == "SSS":
        return f"{millis:03d}"
    if token == "SS":
        return f"{millis // 10:02d}"
    if token == "S":
        return str(millis // 100)
    if token == "A":
        return "PM" if value.hour >= 12 else "AM"
    if token == "a":
        return "pm" if value.hour >= 12 else "am"
    if token == "ZZ":
        return _format_offset(value, "")
    if token == "Z":
        return _format_offset(value, ":")
    if token == "X":
        return str(int(value.timestamp()))
    if token == "x":
        return str(int(value.timestamp() * 1000))
    raise DateFormatError(f"Unknown placeholder '{token}'")


def format_date(value: datetime, fmt: str) -> str:
    """Render value using a moment-style format string."""
    out = []
    for kind, text in tokenize_format(fmt):
        if kind == "FIELD":
            out.append(_render_field(text, value))
        else:
            out.append(text)
    return "".join(out)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def from_now(value: datetime, now: datetime) -> str:
    """Describe value relative to now, e.g. ``"3 days ago"`` or ``"in an hour"``."""
    delta_ms = (value - now) / timedelta(milliseconds=1)
    abs_ms = abs(delta_ms)

    seconds = _round_half_up(abs_ms / 1e3)
    minutes = _round_half_up(abs_ms / 6e4)
    hours = _round_half_up(abs_ms / 36e5)
    days = _round_half_up(abs_ms / 864e5)
    months = _round_half_up(abs_ms / 864e5 * 4800 / 146097)
    years = _round_half_up(abs_ms / 864e5 * 400 / 146097)

    if seconds < 45:
        key, n = "s", seconds
    elif minutes <= 1:
        key, n = "m", 1
    elif minutes < 45:
        key, n = "mm", minutes
    elif hours <= 1:
        key, n = "h", 1
    elif hours < 22:
        key, n = "hh", hours
    elif days <= 1:
        key, n = "d", 1
    elif days < 26:
        key, n = "dd", days
    elif months <= 1:
        key, n = "M", 1
    elif months < 11:
        key, n = "MM", months
    elif years <= 1:
        key, n = "y", 1
    else:
        key, n = "yy", years

    text = _RELATIVE_TIME[key].format(n)
    return f"in {text}" if delta_ms > 0 else f"{text} ago"


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    return (date(year, month + 1, 1) - date(year, month, 1)).days


def _add_months(value: datetime, months: int) -> datetime:
    total = value.year * 12 + (value.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    return value.replace(year=year, month=month, day=min(value.day, _days_in_month(year, month)))


def _month_diff(a: datetime, b: datetime) -> float:
    """Fractional number of months from b to a."""
    whole = (b.year - a.year) * 12 + (b.month - a.month)
    anchor = _add_months(a, whole)
    if b < anchor:
        anchor2 = _add_months(a, whole - 1)
        adjust = (b - anchor) / (anchor - anchor2)
    else:
        anchor2 = _add_months(a, whole + 1)
        adjust = (b - anchor) / (anchor2 - anchor)
    return -(whole + adjust)


def normalize_unit(unit: str | None) -> str:
    """Map a unit name or abbreviation to its canonical form (default: millisecond)."""
    if not unit:
        return "millisecond"
    return _UNIT_ALIASES.get(unit) or _UNIT_ALIASES.get(unit.lower(), "millisecond")


def difference(now: datetime, value: datetime, unit: str | None) -> int:
    """Return now minus value in unit, truncated toward zero."""
    canonical = normalize_unit(unit)
    if canonical in ("year", "quarter", "month"):
        months = _month_diff(now, value)
        if canonical == "year":
            return int(months / 12)
        if canonical == "quarter":
            return int(months / 3)
        return int(months)
    delta_ms = (now - value) / timedelta(milliseconds=1)
    return int(delta_ms / _UNIT_MILLIS[canonical])
