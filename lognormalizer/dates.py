"""Date formatting with ``Y-m-d H:i:s`` style patterns.

Each letter in a pattern is a format token; a backslash makes the next
character literal and every other character is copied as-is. Month and day
names are always English, independent of the process locale. Naive values
are treated as UTC wherever a timezone token is used.
"""

from __future__ import annotations

import calendar
import datetime
from typing import Callable

DEFAULT_DATE_FORMAT = "Y-m-d H:i:s"

_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_EPOCH_DATE = datetime.date(1970, 1, 1)


def _as_datetime(value: datetime.date | datetime.time) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    return datetime.datetime.combine(_EPOCH_DATE, value)


def _utc_offset(dt: datetime.datetime) -> datetime.timedelta:
    return dt.utcoffset() or datetime.timedelta(0)


def _offset_text(dt: datetime.datetime, sep: str) -> str:
    total = int(_utc_offset(dt).total_seconds())
    sign = "-" if total < 0 else "+"
    hours, rest = divmod(abs(total), 3600)
    return f"{sign}{hours:02d}{sep}{rest // 60:02d}"


def _tz_name(dt: datetime.datetime) -> str:
    if dt.tzinfo is None:
        return "UTC"
    key = getattr(dt.tzinfo, "key", None)
    if key:
        return str(key)
    return dt.tzname() or _offset_text(dt, ":")


def _tz_abbreviation(dt: datetime.datetime) -> str:
    if dt.tzinfo is None:
        return "UTC"
    return dt.tzname() or _offset_text(dt, ":")


def _day_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _epoch_seconds(dt: datetime.datetime) -> int:
    if dt.tzinfo is None:
        return calendar.timegm(dt.timetuple())
    return int(dt.timestamp() // 1)


def _swatch_beat(dt: datetime.datetime) -> str:
    utc = dt - _utc_offset(dt)
    seconds = (utc.hour * 3600 + utc.minute * 60 + utc.second + 3600) % 86400
    return f"{int(seconds / 86.4):03d}"


def _twelve_hour(dt: datetime.datetime) -> int:
    return dt.hour % 12 or 12


def _is_dst(dt: datetime.datetime) -> str:
    offset = dt.dst() if dt.tzinfo is not None else None
    return "1" if offset else "0"


_TOKENS: dict[str, Callable[[datetime.datetime], str]] = {
    # day
    "d": lambda dt: f"{dt.day:02d}",
    "D": lambda dt: _DAY_NAMES[dt.weekday()][:3],
    "j": lambda dt: str(dt.day),
    "l": lambda dt: _DAY_NAMES[dt.weekday()],
    "N": lambda dt: str(dt.isoweekday()),
    "S": lambda dt: _day_suffix(dt.day),
    "w": lambda dt: str(dt.isoweekday() % 7),
    "z": lambda dt: str(dt.timetuple().tm_yday - 1),
    # week
    "W": lambda dt: f"{dt.isocalendar()[1]:02d}",
    # month
    "F": lambda dt: _MONTH_NAMES[dt.month - 1],
    "m": lambda dt: f"{dt.month:02d}",
    "M": lambda dt: _MONTH_NAMES[dt.month - 1][:3],
    "n": lambda dt: str(dt.month),
    "t": lambda dt: str(calendar.monthrange(dt.year, dt.month)[1]),
    # year
    "L": lambda dt: "1" if calendar.isleap(dt.year) else "0",
    "o": lambda dt: str(dt.isocalendar()[0]),
    "Y": lambda dt: str(dt.year),
    "y": lambda dt: f"{dt.year % 100:02d}",
    # time
    "a": lambda dt: "am" if dt.hour < 12 else "pm",
    "A": lambda dt: "AM" if dt.hour < 12 else "PM",
    "B": _swatch_beat,
    "g": lambda dt: str(_twelve_hour(dt)),
    "G": lambda dt: str(dt.hour),
    "h": lambda dt: f"{_twelve_hour(dt):02d}",
    "H": lambda dt: f"{dt.hour:02d}",
    "i": lambda dt: f"{dt.minute:02d}",
    "s": lambda dt: f"{dt.second:02d}",
    "u": lambda dt: f"{dt.microsecond:06d}",
    "v": lambda dt: f"{dt.microsecond // 1000:03d}",
    # timezone
    "e": _tz_name,
    "I": _is_dst,
    "O": lambda dt: _offset_text(dt, ""),
    "P": lambda dt: _offset_text(dt, ":"),
    "p": lambda dt: "Z" if not _utc_offset(dt) else _offset_text(dt, ":"),
    "T": _tz_abbreviation,
    "Z": lambda dt: str(int(_utc_offset(dt).total_seconds())),
    # full date/time
    "c": lambda dt: format_date(dt, "Y-m-d\\TH:i:sP"),
    "r": lambda dt: format_date(dt, "D, d M Y H:i:s O"),
    "U": lambda dt: str(_epoch_seconds(dt)),
}


def format_date(value: datetime.date | datetime.time, pattern: str = DEFAULT_DATE_FORMAT) -> str:
    """Render a date, datetime or time value with a ``Y-m-d H:i:s`` style pattern."""
    dt = _as_datetime(value)
    out: list[str] = []
    escaped = False
    for char in pattern:
        if escaped:
            out.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        else:
            token = _TOKENS.get(char)
            out.append(token(dt) if token else char)
    if escaped:
        out.append("\\")
    return "".join(out)
