"""Sent notification log stored as YAML."""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from .calculations import parse_timestamp
from .labels import format_iso
from .loader import FleetDataError

logger = logging.getLogger(__name__)


class LogEntry:
    """A reminder that has been dispatched."""

    def __init__(
        self,
        sent_at: Union[str, datetime],
        reminder_type: str,
        plate_number: Optional[str] = None,
        car_model: Optional[str] = None,
        agreement_id: Optional[str] = None,
    ):
        self.sent_at = sent_at
        self.reminder_type = reminder_type
        self.plate_number = plate_number
        self.car_model = car_model
        self.agreement_id = agreement_id

    @property
    def sent(self) -> Optional[datetime]:
        return parse_timestamp(self.sent_at)

    def to_dict(self) -> Dict[str, Any]:
        """YAML row, omitting None values."""
        sent = self.sent
        d: Dict[str, Any] = {
            "sent_at": format_iso(sent) if sent else self.sent_at,
            "reminder_type": self.reminder_type,
        }
        if self.plate_number is not None:
            d["plate_number"] = self.plate_number
        if self.car_model is not None:
            d["car_model"] = self.car_model
        if self.agreement_id is not None:
            d["agreement_id"] = self.agreement_id
        return d


def _read_rows(filename: Union[str, Path]) -> List[Dict[str, Any]]:
    path = Path(filename)
    if not path.exists():
        return []
    with open(path, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)
    if not data:
        return []
    if not isinstance(data, dict):
        raise FleetDataError(f"{filename}: expected a mapping with a 'logs' list")
    rows = data.get("logs") or []
    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise FleetDataError(f"{filename}: 'logs' must be a list of mappings")
    return list(rows)


def _write_rows(filename: Union[str, Path], rows: List[Dict[str, Any]]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            {"logs": rows},
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _to_entry(row: Dict[str, Any]) -> LogEntry:
    sent_at = row.get("sent_at")
    return LogEntry(
        sent_at if isinstance(sent_at, (str, datetime)) else str(sent_at),
        row.get("reminder_type", ""),
        row.get("plate_number"),
        row.get("car_model"),
        row.get("agreement_id"),
    )


def _sort_key(entry: LogEntry) -> float:
    sent = entry.sent
    return sent.timestamp() if sent else float("-inf")


def load_log(filename: Union[str, Path], limit: Optional[int] = 100) -> List[LogEntry]:
    """Sent entries, newest first. A missing file is an empty log."""
    entries = [_to_entry(row) for row in _read_rows(filename)]
    entries.sort(key=_sort_key, reverse=True)
    return entries[:limit] if limit is not None else entries


def append_entries(filename: Union[str, Path], entries: Iterable[LogEntry]) -> None:
    """Append entries to the log file, creating it if needed."""
    rows = _read_rows(filename)
    rows.extend(entry.to_dict() for entry in entries)
    _write_rows(filename, rows)


def prune_log(filename: Union[str, Path], now: datetime, max_age_hours: float = 48) -> int:
    """
    Drop entries sent more than max_age_hours before now.

    Entries with an unreadable sent_at are kept. Returns the number removed.
    """
    rows = _read_rows(filename)
    if not rows:
        return 0
    cutoff = parse_timestamp(now) - timedelta(hours=max_age_hours)
    kept = []
    for row in rows:
        sent = _to_entry(row).sent
        if sent is not None and sent < cutoff:
            continue
        kept.append(row)

    removed = len(rows) - len(kept)
    if removed:
        _write_rows(filename, kept)
        logger.info("Pruned %d log entries older than %s", removed, format_iso(cutoff))
    return removed


def already_sent(entries: Iterable[LogEntry], agreement_id: Optional[str], reminder_type: str) -> bool:
    """True if this agreement already has a log entry of this reminder type."""
    if agreement_id is None:
        return False
    return any(
        e.agreement_id == agreement_id and e.reminder_type == reminder_type
        for e in entries
    )
