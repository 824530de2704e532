"""Fleet-wide maintenance and document expiry checks."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from .calculations import as_mileage, days_until, parse_timestamp
from .events import ExpiryDue, ExpiryField
from .sent_log import LogEntry, append_entries
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

MAINTENANCE_TARGETS = (
    ("Service", "next_service_mileage"),
    ("Gear Oil", "next_gear_oil_mileage"),
    ("Tyres", "next_tyre_mileage"),
    ("Brake Pads", "next_brake_pad_mileage"),
)

DUE_WITHIN_KM = 2000


@dataclass
class MaintenanceIssue:
    """A mileage target that is overdue or within 2000km."""

    label: str
    target: float
    distance: float

    @property
    def overdue(self) -> bool:
        return self.distance <= 0

    @property
    def description(self) -> str:
        if self.overdue:
            return f"{self.label} OVERDUE ({abs(self.distance):,.0f}km)"
        return f"{self.label} due in {self.distance:,.0f}km"


def maintenance_issues(vehicle: Vehicle) -> List[MaintenanceIssue]:
    """
    Check every mileage target on a vehicle.

    Vehicles with tracking switched off are skipped. A missing current
    mileage counts as 0; a missing target is ignored.
    """
    if not vehicle.track_insurance:
        return []
    current = as_mileage(vehicle.current_mileage) or 0

    issues = []
    for label, attr in MAINTENANCE_TARGETS:
        target = as_mileage(getattr(vehicle, attr))
        if not target:
            continue
        distance = target - current
        if distance <= DUE_WITHIN_KM:
            issues.append(MaintenanceIssue(label, target, distance))
    return issues


def expiring_documents(
    now: datetime, vehicles: Iterable[Vehicle], within_days: int = 90
) -> List[Tuple[Vehicle, ExpiryDue]]:
    """Insurance and roadtax expiring within `within_days`, soonest first."""
    now = parse_timestamp(now)
    found = []
    for vehicle in vehicles:
        for field in ExpiryField:
            expiry = parse_timestamp(vehicle.expiry(field))
            if expiry is None:
                continue
            days = days_until(expiry, now)
            if days <= within_days:
                found.append((vehicle, ExpiryDue(field, days)))
    found.sort(key=lambda pair: pair[1].days)
    return found


def record_maintenance(
    log_file: Union[str, Path],
    now: datetime,
    vehicles: Iterable[Vehicle],
    dry_run: bool = False,
) -> List[LogEntry]:
    """
    Log one maintenance reminder per vehicle with at least one issue.

    The reminder type is MAINTENANCE_OVERDUE when any target is overdue,
    otherwise MAINTENANCE_DUE. Unless dry_run, appends the entries to the
    sent log. Returns the new entries.
    """
    now = parse_timestamp(now)

    entries = []
    for vehicle in vehicles:
        issues = maintenance_issues(vehicle)
        if not issues:
            continue
        overdue = any(issue.overdue for issue in issues)
        entries.append(
            LogEntry(
                sent_at=now,
                reminder_type="MAINTENANCE_OVERDUE" if overdue else "MAINTENANCE_DUE",
                plate_number=vehicle.plate_number,
                car_model=vehicle.name,
            )
        )

    if dry_run or not entries:
        return entries

    append_entries(log_file, entries)
    logger.info("Recorded %d maintenance reminder(s)", len(entries))
    return entries
