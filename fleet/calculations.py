"""Helper functions for reminder scheduling calculations."""

import math
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Optional

from dateutil import tz
from dateutil.parser import isoparse

from .events import MaintenanceBand

# Upper bounds (km to next service) for each band, most urgent first
MAINTENANCE_BANDS = (
    (0, MaintenanceBand.OVERDUE),
    (100, MaintenanceBand.URGENT_100),
    (500, MaintenanceBand.UNDER_500),
    (1000, MaintenanceBand.UNDER_1000),
    (2000, MaintenanceBand.UNDER_2000),
)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts datetimes, dates and ISO-8601 strings. Naive values are taken
    as UTC, date-only values as midnight UTC. Returns None for anything
    that cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            parsed = isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.UTC)
    return parsed.astimezone(tz.UTC)


def as_mileage(value: Any) -> Optional[float]:
    """Coerce a stored mileage to float; None when missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        miles = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(miles) or math.isinf(miles):
        return None
    return miles


def minutes_until(target: datetime, now: datetime) -> float:
    """Minutes from now until target (negative when in the past)."""
    return (target - now).total_seconds() / 60


def days_until(target: datetime, now: datetime) -> int:
    """Whole days from now until target, rounded up."""
    return math.ceil((target - now).total_seconds() / 86400)


def maintenance_band(distance: float) -> Optional[MaintenanceBand]:
    """Pick the most urgent band covering distance; None beyond 2000km."""
    for limit, band in MAINTENANCE_BANDS:
        if distance <= limit:
            return band
    return None


def next_batch_time(now: datetime, zone: tzinfo, hour: int = 8) -> datetime:
    """Tomorrow at `hour`:00 in the given zone, returned in UTC."""
    tomorrow = now.astimezone(zone).date() + timedelta(days=1)
    local = datetime(tomorrow.year, tomorrow.month, tomorrow.day, hour, tzinfo=zone)
    return local.astimezone(tz.UTC)
