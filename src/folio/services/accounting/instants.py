"""Normalisation of query bounds and ledger timestamps.

All instants are compared as naive datetimes. Aware datetimes are
converted to UTC first; dates are promoted to midnight. Strings accept
ISO dates with or without zero padding ("2012-3-7") and the end-of-day
form "2012-3-7 24:00:00", which means midnight of the following day.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

_LOOSE_DATETIME = re.compile(
    r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})"
    r"(?:[ T](\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6}))?)?)?\s*$"
)


def normalize_timestamp(value: datetime | date) -> datetime:
    """Convert a datetime/date into the naive form used for comparisons."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def parse_instant(value: str) -> datetime:
    """
    Parse a textual instant.

    Raises:
        ValueError: If the string is not a recognised date/time
    """
    match = _LOOSE_DATETIME.match(value)
    if match is None:
        return normalize_timestamp(datetime.fromisoformat(value.strip()))

    year, month, day, hour, minute, second, fraction = match.groups()
    base = datetime(int(year), int(month), int(day))
    hours = int(hour or 0)
    minutes = int(minute or 0)
    seconds = int(second or 0)
    micros = int((fraction or "0").ljust(6, "0"))

    if hours == 24:
        if minutes or seconds or micros:
            raise ValueError(f"Invalid end-of-day time in '{value}'")
        return base + timedelta(days=1)

    return base.replace(hour=hours, minute=minutes, second=seconds, microsecond=micros)


def to_instant(value: Any) -> datetime | None:
    """
    Coerce a query bound to a naive datetime.

    None and unparseable values both mean "unbounded" and return None.
    """
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return normalize_timestamp(value)
    if isinstance(value, str):
        try:
            return parse_instant(value)
        except ValueError:
            return None
    return None
