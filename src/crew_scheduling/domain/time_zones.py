from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo

# Acclimatised zone used by every crew member (GMT+2).
REFERENCE_UTC_OFFSET_HOURS = 2
REFERENCE_TZ = timezone(timedelta(hours=REFERENCE_UTC_OFFSET_HOURS))


def reference_tz(offset_hours: float) -> tzinfo:
    return timezone(timedelta(hours=offset_hours))


def to_reference_zone(utc_dt: datetime, tz: tzinfo = REFERENCE_TZ) -> datetime:
    """Convert a naive UTC datetime to an aware datetime in ``tz``."""
    return utc_dt.replace(tzinfo=timezone.utc).astimezone(tz)


def minutes(delta: timedelta) -> int:
    """Whole minutes in ``delta``, truncated toward zero."""
    return int(delta.total_seconds() / 60)
