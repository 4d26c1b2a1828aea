from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)
_GENERALIZED_TIME_FORMAT = "%Y%m%d%H%M%SZ"
_GENERALIZED_TIME_PATTERN = re.compile(
    r"^(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})"
    r"(?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d{1,3}))?Z$"
)


def ensure_utc_datetime(*, value: datetime, field_name: str) -> datetime:
    """
    Validate datetime is timezone-aware UTC and return same value.

    Args:
        value: Datetime value to validate.
        field_name: Field label for deterministic error message.
    Returns:
        datetime: Same validated datetime.
    Assumptions:
        UTC datetimes have zero offset.
    Raises:
        ValueError: If datetime is naive or non-UTC.
    Side Effects:
        None.
    """
    offset = value.utcoffset()
    if value.tzinfo is None or offset is None:
        raise ValueError(f"{field_name} must be timezone-aware UTC datetime")
    if offset.total_seconds() != 0:
        raise ValueError(f"{field_name} must be UTC datetime")
    return value


def format_generalized_time(*, value: datetime) -> str:
    """
    Format UTC datetime in directory generalized-time layout `YYYYMMDDHHMMSSZ`.

    Args:
        value: Timezone-aware UTC datetime.
    Returns:
        str: Generalized-time literal with second precision.
    Assumptions:
        Sub-second precision is dropped, matching directory attribute precision.
    Raises:
        ValueError: If datetime is naive or non-UTC.
    Side Effects:
        None.
    """
    normalized = ensure_utc_datetime(value=value, field_name="value")
    return normalized.strftime(_GENERALIZED_TIME_FORMAT)


def parse_generalized_time(*, raw_value: str) -> datetime:
    """
    Parse directory generalized-time literal into UTC datetime.

    Args:
        raw_value: Literal such as `20200101000000Z` or `20200101000000.123Z`.
    Returns:
        datetime: Timezone-aware UTC datetime.
    Assumptions:
        Only the `Z` (UTC) designator is produced by the directory.
    Raises:
        ValueError: If literal does not match generalized-time layout or is out of range.
    Side Effects:
        None.
    """
    match = _GENERALIZED_TIME_PATTERN.match(raw_value.strip())
    if match is None:
        raise ValueError(f"invalid generalized time literal: {raw_value!r}")
    fraction = match.group("fraction") or "0"
    milliseconds = int(fraction.ljust(3, "0"))
    return datetime(
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        int(match.group("second")),
        milliseconds * 1000,
        tzinfo=timezone.utc,
    )


def epoch_millis(*, value: datetime) -> int:
    """
    Convert UTC datetime into integer epoch milliseconds without float rounding.

    Args:
        value: Timezone-aware UTC datetime.
    Returns:
        int: Milliseconds since UNIX epoch, floored.
    Assumptions:
        None.
    Raises:
        ValueError: If datetime is naive or non-UTC.
    Side Effects:
        None.
    """
    normalized = ensure_utc_datetime(value=value, field_name="value")
    return (normalized - _EPOCH) // _ONE_MILLISECOND


def datetime_from_epoch_millis(*, millis: int) -> datetime:
    """Convert epoch milliseconds back into UTC datetime."""
    return _EPOCH + timedelta(milliseconds=millis)
