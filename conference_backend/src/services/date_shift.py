"""
Calendar date arithmetic for conference duplication.

Pure functions, no I/O. Dates are handled as ``YYYY-MM-DD`` strings,
date-times as a ``YYYY-MM-DD`` prefix followed by an opaque suffix
(time of day, fractional seconds, zone marker) that is never parsed.
"""

import re
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional, Tuple


DATE_PREFIX_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})(.*)$", re.DOTALL)
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date_prefix(value: Optional[str]) -> Optional[date]:
    """
    Parse the leading ``YYYY-MM-DD`` of a string.

    Returns:
        The calendar date, or None if the prefix is missing or not a real date
    """
    if not isinstance(value, str):
        return None
    match = DATE_PREFIX_PATTERN.match(value)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def format_date(value: date) -> str:
    return value.isoformat()


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def compute_day_offset(target_start_date: str, source_start_date: str) -> int:
    """
    Whole-day difference ``target - source`` between two calendar dates.

    Only the date prefix of each argument is considered.

    Raises:
        ValueError: If either argument has no valid date prefix
    """
    target = parse_date_prefix(target_start_date)
    source = parse_date_prefix(source_start_date)
    if target is None or source is None:
        raise ValueError(
            f"Cannot compute day offset between '{target_start_date}' and '{source_start_date}'"
        )
    return (target - source).days


def try_shift_calendar_date(value: str, day_offset: int) -> Tuple[str, bool]:
    """
    Shift the date prefix of ``value`` by ``day_offset`` days.

    The suffix after the first 10 characters is copied unchanged.

    Returns:
        (result, ok). ``ok`` is False when the input has no valid date
        prefix or the shifted date falls outside years 1..9999; ``result``
        is then the input unchanged.
    """
    if not value or day_offset == 0:
        return value, True
    match = DATE_PREFIX_PATTERN.match(value)
    parsed = parse_date_prefix(value)
    if not match or parsed is None:
        return value, False
    try:
        shifted = add_days(parsed, day_offset)
    except OverflowError:
        return value, False
    return format_date(shifted) + match.group(2), True


def shift_calendar_date(value: str, day_offset: int) -> str:
    """Shift the date prefix of ``value``; invalid input is returned unchanged."""
    shifted, _ = try_shift_calendar_date(value, day_offset)
    return shifted


def earliest_day_date(days: Optional[Iterable[Mapping]]) -> Optional[str]:
    """
    Earliest valid ``YYYY-MM-DD`` date among conference days.

    Days without a valid ``date`` are ignored.
    """
    dates = [
        str(day.get("date")).strip()
        for day in days or []
        if isinstance(day, Mapping)
        and ISO_DATE_PATTERN.match(str(day.get("date") or "").strip())
        and parse_date_prefix(str(day.get("date")).strip()) is not None
    ]
    return min(dates) if dates else None
