"""Display labels and time formatting for reminder events."""

import math
from datetime import datetime, tzinfo
from typing import Optional

from dateutil import tz

from .events import (
    AgreementCheckpoint,
    Event,
    ExpiryDue,
    MaintenanceBand,
    MaintenanceDue,
)

CHECKPOINT_LABELS = {
    120: "2 Hours",
    60: "1 Hour",
    0: "EXPIRED",
}

MAINTENANCE_LABELS = {
    MaintenanceBand.OVERDUE: "MAINTENANCE OVERDUE",
    MaintenanceBand.URGENT_100: "Urgent 100km",
    MaintenanceBand.UNDER_500: "< 500km",
    MaintenanceBand.UNDER_1000: "< 1000km",
    MaintenanceBand.UNDER_2000: "< 2000km",
}


def checkpoint_label(checkpoint: AgreementCheckpoint) -> str:
    cp = checkpoint.offset_minutes
    return CHECKPOINT_LABELS.get(cp, f"{cp} Minutes")


def maintenance_label(due: MaintenanceDue) -> str:
    return MAINTENANCE_LABELS[due.band]


def expiry_label(due: ExpiryDue) -> str:
    """Field title plus state, e.g. 'Insurance 12 Days' or 'Roadtax EXPIRED'."""
    if due.days < 0:
        suffix = "EXPIRED"
    elif due.days == 0:
        suffix = "Today"
    else:
        suffix = f"{due.days} Days"
    return f"{due.field.title} {suffix}"


def event_label(event: Event) -> str:
    """Human-readable label for any reminder event."""
    if isinstance(event, AgreementCheckpoint):
        return checkpoint_label(event)
    if isinstance(event, MaintenanceDue):
        return maintenance_label(event)
    if isinstance(event, ExpiryDue):
        return expiry_label(event)
    raise TypeError(f"Unknown event type: {type(event).__name__}")


def format_iso(dt: Optional[datetime]) -> Optional[str]:
    """UTC ISO-8601 with a trailing Z."""
    if dt is None:
        return None
    return dt.astimezone(tz.UTC).isoformat().replace("+00:00", "Z")


def format_local(dt: Optional[datetime], zone: tzinfo) -> str:
    """Format for display in the business timezone (e.g. 'Jan 1, 08:30 AM')."""
    if dt is None:
        return "-"
    local = dt.astimezone(zone)
    return f"{local:%b} {local.day}, {local:%I:%M %p}"


def format_relative(dt: datetime, now: datetime) -> str:
    """Relative time until dt: 'Overdue', 'in N mins' or 'in N hours'."""
    mins = math.ceil((dt - now).total_seconds() / 60)
    if mins < 0:
        return "Overdue"
    if mins < 60:
        return f"in {mins} mins"
    return f"in {math.ceil(mins / 60)} hours"
