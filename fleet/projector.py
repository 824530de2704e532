"""Upcoming reminder queue projection.

Walks agreements and vehicles that the caller has already fetched and
derives every reminder that will fire, sorted by scheduled time. Nothing
is written back and the result depends only on the arguments.
"""

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, List, Optional

from dateutil import tz

from .agreement import Agreement
from .calculations import (
    as_mileage,
    days_until,
    maintenance_band,
    minutes_until,
    next_batch_time,
    parse_timestamp,
)
from .events import AgreementCheckpoint, ExpiryDue, ExpiryField, MaintenanceDue
from .queue_item import QueueItem
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

# Minutes before agreement end at which reminders fire
CHECKPOINTS = (120, 60, 30, 10, 0)

AGREEMENT_WINDOW_HOURS = 48
EXPIRY_WINDOW_DAYS = 90
MAINTENANCE_WINDOW_KM = 2000


def agreement_checkpoints(agreement: Agreement, now: datetime) -> List[QueueItem]:
    """
    Queue items for every checkpoint still ahead of now.

    A checkpoint is emitted only when strictly more than its offset remains,
    so an agreement ending exactly 120 minutes from now gets no "2 Hours".
    """
    end = agreement.end
    if end is None:
        logger.debug("Skipping agreement %s: bad date_end %r", agreement.id, agreement.date_end)
        return []

    remaining = minutes_until(end, now)
    return [
        QueueItem(
            plate=agreement.plate_number,
            model=agreement.car_type,
            event=AgreementCheckpoint(cp),
            scheduled_for=end - timedelta(minutes=cp),
            original_end=end,
        )
        for cp in CHECKPOINTS
        if remaining > cp
    ]


def maintenance_checkpoint(vehicle: Vehicle, batch_time: datetime) -> Optional[QueueItem]:
    """Queue item when the next service is within 2000km, else None."""
    target = as_mileage(vehicle.next_service_mileage)
    current = as_mileage(vehicle.current_mileage)
    if target is None or current is None:
        return None

    distance = target - current
    if distance > MAINTENANCE_WINDOW_KM:
        return None
    return QueueItem(
        plate=vehicle.plate_number,
        model=vehicle.name,
        event=MaintenanceDue(maintenance_band(distance), distance),
        scheduled_for=batch_time,
    )


def expiry_checkpoint(
    vehicle: Vehicle, field: ExpiryField, now: datetime, batch_time: datetime
) -> Optional[QueueItem]:
    """Queue item when a document expires within 90 days (or already has)."""
    raw = vehicle.expiry(field)
    if raw is None:
        return None
    expiry = parse_timestamp(raw)
    if expiry is None:
        logger.debug("Skipping %s for %s: bad value %r", field.value, vehicle.plate_number, raw)
        return None

    days = days_until(expiry, now)
    if days > EXPIRY_WINDOW_DAYS:
        return None
    return QueueItem(
        plate=vehicle.plate_number,
        model=vehicle.name,
        event=ExpiryDue(field, days),
        scheduled_for=batch_time,
    )


def project_queue(
    now: datetime,
    agreements: Iterable[Agreement],
    vehicles: Iterable[Vehicle],
    zone: Optional[tzinfo] = None,
) -> List[QueueItem]:
    """
    Build the upcoming reminder queue.

    Args:
        now: Current instant (naive values are taken as UTC)
        agreements: Agreements ending within the look-ahead window
        vehicles: Active fleet vehicles
        zone: Business timezone for the daily 08:00 batch (default UTC)

    Items with equal scheduled times keep emission order: agreements, then
    maintenance, then insurance, then roadtax.
    """
    now = parse_timestamp(now)
    if now is None:
        raise ValueError("now must be a datetime")
    batch_time = next_batch_time(now, zone or tz.UTC)
    vehicles = list(vehicles)

    queue: List[QueueItem] = []
    for agreement in agreements:
        queue.extend(agreement_checkpoints(agreement, now))

    for vehicle in vehicles:
        item = maintenance_checkpoint(vehicle, batch_time)
        if item is not None:
            queue.append(item)

    for field in (ExpiryField.INSURANCE, ExpiryField.ROADTAX):
        for vehicle in vehicles:
            item = expiry_checkpoint(vehicle, field, now, batch_time)
            if item is not None:
                queue.append(item)

    queue.sort(key=lambda item: item.scheduled_for)
    return queue
