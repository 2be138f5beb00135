"""Lenient timestamp parsing and the date formats used by provider queries."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
import time as _time
from typing import Any

from dateutil import parser as date_parser


_COMPACT_FORMATS = ("%Y%m%d%H%M%S", "%Y%m%dT%H%M%SZ")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an upstream timestamp into an aware UTC datetime.

    Accepts ISO-8601, RFC-822 (feeds), GDELT compact forms and
    ``time.struct_time``. Returns None for anything unparseable; naive
    values are taken as UTC.
    """
    if value is None:
        return None
    if isinstance(value, _time.struct_time):
        return datetime(*value[:6], tzinfo=timezone.utc)
    if isinstance(value, datetime):
        parsed = value
    else:
        raw = str(value).strip()
        if not raw:
            return None
        parsed = _parse_compact(raw)
        if parsed is None:
            try:
                parsed = date_parser.parse(raw)
            except (ValueError, OverflowError, TypeError):
                return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def recency_key(value: Any) -> tuple[int, float]:
    """Sort key giving a total order; unparseable timestamps sort first."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return (0, 0.0)
    return (1, parsed.timestamp())


def ymd(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def compact_timestamp(moment: datetime) -> str:
    """GDELT query format: YYYYMMDDHHmmss."""
    return moment.strftime("%Y%m%d%H%M%S")


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def day_end(day: date) -> datetime:
    """Last whole second of ``day`` (23:59:59 UTC)."""
    return datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)


def in_day_window(moment: datetime, start: date, end: date) -> bool:
    """Boundary-inclusive check: start 00:00:00 through end 23:59:59."""
    lower = day_start(start) - timedelta(seconds=1)
    upper = day_end(end) + timedelta(seconds=1)
    return lower < moment < upper


def _parse_compact(raw: str) -> datetime | None:
    if not raw[:8].isdigit():
        return None
    for fmt in _COMPACT_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None
