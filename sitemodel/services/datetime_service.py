"""Datetime parsing: lax input -> strict output."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

import pendulum

# Strict output format: YYYY-MM-DD HH:MM:SS +HHMM (Jekyll's own date format)
STRICT_FORMAT = "%Y-%m-%d %H:%M:%S %z"

_FILENAME_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-")


def parse_datetime(value: str | date | datetime, default_tz: str = "UTC") -> datetime:
    """Parse a lax date/datetime into a timezone-aware datetime.

    Accepts the forms Jekyll accepts in front matter:
    - 2024-05-01 10:30:00 -0700
    - 2024-05-01 10:30
    - 2024-05-01
    - ISO 8601 variants with T separator
    - ``date``/``datetime`` objects already decoded by the YAML loader

    Missing timezone defaults to default_tz.
    Missing time components default to zeros.
    Raises ValueError if the value cannot be parsed.
    """
    tz = pendulum.timezone(default_tz)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=tz)  # type: ignore[arg-type]
        return value
    if isinstance(value, date):
        return pendulum.datetime(value.year, value.month, value.day, tz=tz)

    value_str = value.strip()
    if not value_str:
        raise ValueError("Empty date value")
    # Jekyll writes offsets as "-0700" separated by a space; pendulum wants it attached.
    value_str = re.sub(r"\s+([+-]\d{2}:?\d{2})$", r"\1", value_str)

    try:
        parsed = pendulum.parse(value_str, tz=default_tz, strict=False)
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value!r}") from exc
    if not isinstance(parsed, pendulum.DateTime):
        if not isinstance(parsed, pendulum.Date):
            raise ValueError(f"Invalid date: {value!r}")
        # pendulum.parse returns Date for date-only strings
        parsed = pendulum.datetime(parsed.year, parsed.month, parsed.day, tz=default_tz)
    return parsed


def date_from_filename(file_name: str, default_tz: str = "UTC") -> datetime | None:
    """Return the publish date encoded in a ``YYYY-MM-DD-slug.md`` file name."""
    name = file_name.rsplit("/", maxsplit=1)[-1]
    match = _FILENAME_DATE_RE.match(name)
    if match is None:
        return None
    year, month, day = (int(g) for g in match.groups())
    try:
        return pendulum.datetime(year, month, day, tz=default_tz)
    except ValueError:
        return None


def format_datetime(dt: datetime) -> str:
    """Format a datetime to the strict output format.

    Output: YYYY-MM-DD HH:MM:SS +HHMM
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.strftime(STRICT_FORMAT)


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)

