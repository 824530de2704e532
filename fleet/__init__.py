"""
Rental fleet reminder models.

This package projects the Notification Center's upcoming reminder queue:
- Agreement / Vehicle: rows read from the fleet data store
- AgreementCheckpoint, MaintenanceDue, ExpiryDue: reminder event variants
- QueueItem: one projected reminder
- project_queue: the pure projection over agreements and vehicles
- Sent log, dispatch selection and maintenance checks around it
"""

from .events import (
    AgreementCheckpoint,
    ExpiryDue,
    ExpiryField,
    MaintenanceBand,
    MaintenanceDue,
)
from .agreement import Agreement
from .vehicle import Vehicle
from .queue_item import QueueItem
from .snapshot import FleetSnapshot, select_active_vehicles, select_upcoming_agreements
from .calculations import (
    days_until,
    maintenance_band,
    minutes_until,
    next_batch_time,
    parse_timestamp,
)
from .labels import event_label, format_iso, format_local, format_relative
from .projector import CHECKPOINTS, project_queue
from .loader import FleetDataError, load_fleet, save_vehicle_mileage
from .sent_log import LogEntry, append_entries, load_log, prune_log
from .dispatch import due_reminders, record_dispatch
from .maintenance import MaintenanceIssue, expiring_documents, maintenance_issues, record_maintenance

__all__ = [
    "AgreementCheckpoint",
    "ExpiryDue",
    "ExpiryField",
    "MaintenanceBand",
    "MaintenanceDue",
    "Agreement",
    "Vehicle",
    "QueueItem",
    "FleetSnapshot",
    "select_active_vehicles",
    "select_upcoming_agreements",
    "days_until",
    "maintenance_band",
    "minutes_until",
    "next_batch_time",
    "parse_timestamp",
    "event_label",
    "format_iso",
    "format_local",
    "format_relative",
    "CHECKPOINTS",
    "project_queue",
    "FleetDataError",
    "load_fleet",
    "save_vehicle_mileage",
    "LogEntry",
    "append_entries",
    "load_log",
    "prune_log",
    "due_reminders",
    "record_dispatch",
    "MaintenanceIssue",
    "expiring_documents",
    "maintenance_issues",
    "record_maintenance",
]
