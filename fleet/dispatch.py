"""Select agreement reminders that are due to be sent now."""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from .agreement import Agreement
from .calculations import parse_timestamp
from .events import AgreementCheckpoint
from .labels import checkpoint_label
from .projector import CHECKPOINTS
from .sent_log import LogEntry, already_sent, append_entries, load_log, prune_log

logger = logging.getLogger(__name__)

SKIPPED_DISPATCH_STATUSES = ("Cancelled", "Deleted", "Completed")


def due_reminders(
    now: datetime, agreements: Iterable[Agreement], window_minutes: float = 5
) -> List[Tuple[Agreement, AgreementCheckpoint]]:
    """
    Agreement checkpoints that fall due around now.

    For each checkpoint the target is now + offset; an agreement matches
    when target - window < date_end <= target + window. Results are
    ordered by checkpoint (2 Hours first), then by input order.
    """
    now = parse_timestamp(now)
    window = timedelta(minutes=window_minutes)
    agreements = [
        a for a in agreements
        if a.status not in SKIPPED_DISPATCH_STATUSES and a.end is not None
    ]

    due = []
    for cp in CHECKPOINTS:
        target = now + timedelta(minutes=cp)
        for agreement in agreements:
            if target - window < agreement.end <= target + window:
                due.append((agreement, AgreementCheckpoint(cp)))
    return due


def record_dispatch(
    log_file: Union[str, Path],
    now: datetime,
    agreements: Iterable[Agreement],
    dry_run: bool = False,
) -> List[LogEntry]:
    """
    Log due reminders that have not been logged yet.

    Returns the new entries. Unless dry_run, appends them to the sent log
    and prunes entries older than 48 hours.
    """
    now = parse_timestamp(now)
    sent = load_log(log_file, limit=None)

    entries = []
    for agreement, checkpoint in due_reminders(now, agreements):
        label = checkpoint_label(checkpoint)
        if already_sent(sent, agreement.id, label):
            logger.debug("Already sent %s for agreement %s", label, agreement.id)
            continue
        entry = LogEntry(
            sent_at=now,
            reminder_type=label,
            plate_number=agreement.plate_number,
            car_model=agreement.car_type,
            agreement_id=agreement.id,
        )
        entries.append(entry)
        sent.append(entry)

    if dry_run:
        return entries

    if entries:
        append_entries(log_file, entries)
        logger.info("Recorded %d reminder(s)", len(entries))
    prune_log(log_file, now)
    return entries
