"""
Formatting utilities for timestamps stored in documents.

Provides functions for formatting:
- ISO 8601 UTC timestamps (createdAt, deletedAt, computedAt)
- Epoch-millisecond strings (lastUpdated, the web client's convention)
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_iso_timestamp(value: Optional[datetime] = None) -> str:
    """
    Format a datetime as an ISO 8601 UTC string with millisecond precision.

    Examples:
        >>> format_iso_timestamp(datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc))
        '2024-03-01T08:30:00.000Z'
    """
    value = value or utc_now()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def format_epoch_millis(value: Optional[datetime] = None) -> str:
    """
    Epoch milliseconds as a string.

    Examples:
        >>> format_epoch_millis(datetime(2024, 1, 1, tzinfo=timezone.utc))
        '1704067200000'
    """
    value = value or utc_now()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return str(int(value.timestamp() * 1000))
