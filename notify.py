#!/usr/bin/env python3
"""
Unified CLI for rental fleet notifications.

Commands:
  queue          - Show the upcoming reminder queue
  due            - Show agreement reminders due right now
  dispatch       - Record due reminders in the sent log
  log            - View the sent log
  maintenance    - Show vehicles with maintenance due within 2000km (--record logs them)
  expiring       - Show insurance/roadtax expiring soon
  update-mileage - Update a vehicle's current mileage
"""

import argparse
import logging
import sys
from datetime import datetime, tzinfo
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional, Tuple

from dateutil import tz

from fleet import (
    Agreement,
    AgreementCheckpoint,
    ExpiryDue,
    FleetDataError,
    LogEntry,
    QueueItem,
    Vehicle,
    due_reminders,
    event_label,
    expiring_documents,
    format_local,
    format_relative,
    load_fleet,
    load_log,
    maintenance_issues,
    parse_timestamp,
    project_queue,
    record_dispatch,
    record_maintenance,
    save_vehicle_mileage,
)
from fleet.settings import configure_logging, get_settings, resolve_timezone

logger = logging.getLogger("notify")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_mileage(km: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_text(text: Optional[str]) -> str:
    return text if text else "-"


def make_queue_table(items: List[QueueItem], now: datetime, zone: tzinfo) -> List[List[str]]:
    """Convert queue items to table rows."""
    return [
        [
            format_local(item.scheduled_for, zone),
            format_relative(item.scheduled_for, now),
            item.type,
            format_text(item.plate),
            format_text(item.model),
        ]
        for item in items
    ]


def make_due_table(
    due: List[Tuple[Agreement, AgreementCheckpoint]], zone: tzinfo
) -> List[List[str]]:
    rows = []
    for agreement, checkpoint in due:
        rows.append(
            [
                event_label(checkpoint),
                format_text(agreement.plate_number),
                format_text(agreement.car_type),
                format_local(agreement.end, zone),
                format_text(agreement.customer_name),
            ]
        )
    return rows


def make_log_table(entries: List[LogEntry], zone: tzinfo) -> List[List[str]]:
    """Convert sent log entries to table rows."""
    rows = []
    for entry in entries:
        sent = entry.sent
        rows.append(
            [
                format_local(sent, zone) if sent else format_text(str(entry.sent_at)),
                entry.reminder_type,
                format_text(entry.plate_number),
                format_text(entry.car_model),
            ]
        )
    return rows


def make_maintenance_table(vehicles: List[Vehicle]) -> List[List[str]]:
    """One row per vehicle with at least one maintenance issue."""
    rows = []
    for vehicle in vehicles:
        issues = maintenance_issues(vehicle)
        if not issues:
            continue
        rows.append(
            [
                format_text(vehicle.plate_number),
                format_text(vehicle.name),
                format_mileage(vehicle.current_mileage),
                "; ".join(issue.description for issue in issues),
            ]
        )
    return rows


def make_expiry_table(found: List[Tuple[Vehicle, ExpiryDue]]) -> List[List[str]]:
    rows = []
    for vehicle, due in found:
        rows.append(
            [
                format_text(vehicle.plate_number),
                format_text(vehicle.name),
                due.field.title,
                str(vehicle.expiry(due.field)),
                event_label(due),
            ]
        )
    return rows


# =============================================================================
# Command handlers
# =============================================================================


def cmd_queue(args, now, zone):
    """Show the upcoming reminder queue."""
    fleet = load_fleet(args.fleet_file)
    agreements = fleet.upcoming_agreements(now)
    vehicles = fleet.active_vehicles()
    queue = project_queue(now, agreements, vehicles, zone)

    print(f"Now: {format_local(now, zone)} ({args.tz})")
    print(f"Agreements ending within 48h: {len(agreements)}")
    print(f"Active vehicles: {len(vehicles)}")
    print()

    if not queue:
        print("Upcoming queue is empty.")
        return 0

    headers = ["Scheduled For", "When", "Alert Type", "Plate", "Model"]
    print(tabulate(make_queue_table(queue, now, zone), headers=headers, tablefmt="simple"))
    return 0


def cmd_due(args, now, zone):
    """Show agreement reminders due right now."""
    fleet = load_fleet(args.fleet_file)
    due = due_reminders(now, fleet.agreements)
    if not due:
        print("No reminders due.")
        return 0

    headers = ["Reminder", "Plate", "Car", "Ends", "Customer"]
    print(tabulate(make_due_table(due, zone), headers=headers, tablefmt="simple"))
    return 0


def cmd_dispatch(args, now, zone):
    """Record due reminders in the sent log."""
    fleet = load_fleet(args.fleet_file)
    entries = record_dispatch(args.log_file, now, fleet.agreements, dry_run=args.dry_run)

    if not entries:
        print("Nothing new to send.")
    else:
        headers = ["Time", "Type", "Plate", "Car"]
        print(tabulate(make_log_table(entries, zone), headers=headers, tablefmt="simple"))
        print()

    if args.dry_run:
        print("(dry run - no changes made)")
    elif entries:
        print(f"Recorded {len(entries)} reminder(s) in {args.log_file}.")
    return 0


def cmd_log(args, now, zone):
    """View the sent log."""
    entries = load_log(args.log_file, limit=args.limit)
    if not entries:
        print("No notifications sent.")
        return 0

    headers = ["Time", "Type", "Plate", "Car"]
    print(tabulate(make_log_table(entries, zone), headers=headers, tablefmt="simple"))
    return 0


def cmd_maintenance(args, now, zone):
    """Show vehicles with maintenance due."""
    fleet = load_fleet(args.fleet_file)
    rows = make_maintenance_table(fleet.active_vehicles())
    if not rows:
        print("No maintenance needed.")
        return 0

    headers = ["Plate", "Model", "Mileage (km)", "Issues"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))

    if args.record:
        entries = record_maintenance(args.log_file, now, fleet.active_vehicles(), dry_run=args.dry_run)
        print()
        if args.dry_run:
            print("(dry run - no changes made)")
        else:
            print(f"Recorded {len(entries)} maintenance reminder(s) in {args.log_file}.")
    return 0


def cmd_expiring(args, now, zone):
    """Show insurance/roadtax expiring soon."""
    fleet = load_fleet(args.fleet_file)
    found = expiring_documents(now, fleet.active_vehicles(), within_days=args.within)
    if not found:
        print(f"Nothing expiring within {args.within} days.")
        return 0

    headers = ["Plate", "Model", "Document", "Expiry", "Status"]
    print(tabulate(make_expiry_table(found), headers=headers, tablefmt="simple"))
    return 0


def cmd_update_mileage(args, now, zone):
    """Update a vehicle's current mileage."""
    fleet = load_fleet(args.fleet_file)
    vehicle = fleet.get_vehicle(args.plate)
    if vehicle is None:
        print(f"Error: Unknown plate '{args.plate}'")
        return 1

    print(f"Vehicle: {vehicle.plate_number} ({format_text(vehicle.name)})")
    print(f"Current mileage: {format_mileage(vehicle.current_mileage)}")
    print(f"New mileage:     {format_mileage(args.mileage)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_vehicle_mileage(args.fleet_file, vehicle.plate_number, args.mileage)
    print("Mileage updated.")
    return 0


COMMANDS = {
    "queue": cmd_queue,
    "due": cmd_due,
    "dispatch": cmd_dispatch,
    "log": cmd_log,
    "maintenance": cmd_maintenance,
    "expiring": cmd_expiring,
    "update-mileage": cmd_update_mileage,
}


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Rental fleet notification center",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/fleet.yaml queue
  %(prog)s data/fleet.yaml queue --now 2024-01-01T00:00:00Z
  %(prog)s data/fleet.yaml dispatch --dry-run
  %(prog)s data/fleet.yaml expiring --within 1
  %(prog)s data/fleet.yaml update-mileage "WXY 1234" 45210
""",
    )
    parser.add_argument("fleet_file", type=Path, help="Path to fleet YAML file")
    parser.add_argument(
        "--now",
        type=str,
        help="Evaluate as of this ISO-8601 instant (default: current time)",
    )
    parser.add_argument(
        "--tz",
        type=str,
        default=settings.app_tz,
        help=f"Business timezone (default: {settings.app_tz})",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=settings.sent_log_file,
        help=f"Sent log YAML file (default: {settings.sent_log_file})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("queue", help="Show the upcoming reminder queue")
    subparsers.add_parser("due", help="Show agreement reminders due right now")

    dispatch_parser = subparsers.add_parser("dispatch", help="Record due reminders in the sent log")
    dispatch_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be recorded without saving",
    )

    log_parser = subparsers.add_parser("log", help="View the sent log")
    log_parser.add_argument("--limit", type=int, default=100, help="Maximum entries (default: 100)")

    maintenance_parser = subparsers.add_parser("maintenance", help="Show vehicles with maintenance due")
    maintenance_parser.add_argument(
        "--record",
        action="store_true",
        help="Also record one reminder per vehicle in the sent log",
    )
    maintenance_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="With --record, show what would be recorded without saving",
    )

    expiring_parser = subparsers.add_parser("expiring", help="Show insurance/roadtax expiring soon")
    expiring_parser.add_argument(
        "--within",
        type=int,
        default=90,
        help="Look-ahead in days (default: 90)",
    )

    mileage_parser = subparsers.add_parser("update-mileage", help="Update a vehicle's current mileage")
    mileage_parser.add_argument("plate", type=str, help="Plate number")
    mileage_parser.add_argument("mileage", type=float, help="Current mileage (km)")
    mileage_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )
    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)

    if not args.fleet_file.exists():
        print(f"Error: File not found: {args.fleet_file}")
        return 1

    try:
        zone = resolve_timezone(args.tz)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.now:
        now = parse_timestamp(args.now)
        if now is None:
            print(f"Error: Invalid --now value '{args.now}'")
            return 1
    else:
        now = datetime.now(tz.UTC)

    try:
        return COMMANDS[args.command](args, now, zone)
    except FleetDataError as e:
        logger.debug("Bad fleet file", exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
