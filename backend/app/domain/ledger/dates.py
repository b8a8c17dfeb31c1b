"""
ISO-8601 date helpers shared by the ledger selectors.

Dates are stored verbatim as strings (as they arrive in backups) and only
parsed when a selector needs to order or compare them.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union

# Sort key for records whose date cannot be parsed
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DateLike = Union[str, date, datetime, None]


def parse_datetime(value: DateLike) -> Optional[datetime]:
    """
    Parse an ISO-8601 string, date or datetime into an aware UTC datetime.

    Naive values are treated as UTC. Returns None for empty or malformed input.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: DateLike) -> Optional[date]:
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def sort_key(value: DateLike) -> datetime:
    return parse_datetime(value) or EPOCH


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
