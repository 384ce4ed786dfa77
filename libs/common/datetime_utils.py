"""Timezone-aware UTC helpers.

Timestamps are stored as aware UTC datetimes; report windows are whole UTC
days.
"""

from datetime import date, datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Aware UTC now; use as the ``default=`` of DateTime columns."""
    return datetime.now(timezone.utc)


def utc_day_start(day: date) -> datetime:
    """Midnight UTC at the start of ``day``."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def utc_day_end(day: date) -> datetime:
    """Exclusive end of ``day``: midnight UTC of the following day."""
    return utc_day_start(day + timedelta(days=1))
