#!/usr/bin/env python3
"""Tests for reminder dispatch selection."""

from datetime import datetime, timedelta

from dateutil import tz

from fleet import Agreement, AgreementCheckpoint, append_entries, due_reminders, load_log, record_dispatch
from fleet.sent_log import LogEntry

NOW = datetime(2024, 1, 1, tzinfo=tz.UTC)


def ending(minutes: float, id: str = "a1", status: str = "Confirmed") -> Agreement:
    end = NOW + timedelta(minutes=minutes)
    return Agreement(id, "WXY 1234", "Myvi", end.isoformat(), status)


class TestDueReminders:
    """Tests for due_reminders."""

    def test_matches_checkpoint_within_window(self):
        due = due_reminders(NOW, [ending(122)])
        assert [(a.id, cp) for a, cp in due] == [("a1", AgreementCheckpoint(120))]

    def test_window_bounds(self):
        # target - 5 is excluded, target + 5 is included
        assert due_reminders(NOW, [ending(55)]) == []
        assert len(due_reminders(NOW, [ending(65)])) == 1

    def test_expired_checkpoint(self):
        due = due_reminders(NOW, [ending(2)])
        assert due[0][1] == AgreementCheckpoint(0)

    def test_between_checkpoints(self):
        assert due_reminders(NOW, [ending(45)]) == []

    def test_skipped_statuses(self):
        agreements = [
            ending(60, id="c", status="Cancelled"),
            ending(60, id="d", status="Deleted"),
            ending(60, id="f", status="Completed"),
        ]
        assert due_reminders(NOW, agreements) == []

    def test_ordered_by_checkpoint(self):
        due = due_reminders(NOW, [ending(10, id="x"), ending(120, id="y")])
        assert [a.id for a, _ in due] == ["y", "x"]

    def test_bad_date_end_ignored(self):
        bad = Agreement("a9", "P", "Myvi", "later", "Confirmed")
        assert due_reminders(NOW, [bad]) == []


class TestRecordDispatch:
    """Tests for record_dispatch."""

    def test_records_new_entries(self, tmp_path):
        log = tmp_path / "logs.yaml"
        entries = record_dispatch(log, NOW, [ending(30)])

        assert [e.reminder_type for e in entries] == ["30 Minutes"]
        saved = load_log(log)
        assert len(saved) == 1
        assert saved[0].agreement_id == "a1"
        assert saved[0].plate_number == "WXY 1234"
        assert saved[0].car_model == "Myvi"
        assert saved[0].sent == NOW

    def test_does_not_resend(self, tmp_path):
        log = tmp_path / "logs.yaml"
        record_dispatch(log, NOW, [ending(30)])
        again = record_dispatch(log, NOW + timedelta(minutes=2), [ending(30)])
        assert again == []
        assert len(load_log(log)) == 1

    def test_dry_run_writes_nothing(self, tmp_path):
        log = tmp_path / "logs.yaml"
        entries = record_dispatch(log, NOW, [ending(60)], dry_run=True)
        assert len(entries) == 1
        assert not log.exists()

    def test_prunes_old_entries(self, tmp_path):
        log = tmp_path / "logs.yaml"
        append_entries(log, [LogEntry(NOW - timedelta(hours=72), "EXPIRED", agreement_id="old")])
        record_dispatch(log, NOW, [])
        assert load_log(log) == []
