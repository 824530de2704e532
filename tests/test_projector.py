#!/usr/bin/env python3
"""
Tests for the upcoming reminder queue projection.

Covers:
1. Agreement checkpoints - strict boundary and fan-out
2. Maintenance banding - one most-urgent label per vehicle
3. Expiry checkpoints - 90 day window, per-field independence
4. Ordering - sorted by scheduled time, stable on ties
5. Fail-safe handling of malformed rows
"""

from datetime import datetime, timedelta

import pytest
from dateutil import tz

from fleet import (
    Agreement,
    AgreementCheckpoint,
    ExpiryDue,
    ExpiryField,
    MaintenanceBand,
    MaintenanceDue,
    Vehicle,
    project_queue,
)
from fleet.projector import agreement_checkpoints, maintenance_checkpoint

NOW = datetime(2024, 1, 1, tzinfo=tz.UTC)
KL = tz.gettz("Asia/Kuala_Lumpur")


def agreement_ending(minutes: float, **kwargs) -> Agreement:
    end = NOW + timedelta(minutes=minutes)
    return Agreement(kwargs.pop("id", "a1"), "WXY 1234", "Perodua Myvi", end.isoformat(), "Confirmed", **kwargs)


def vehicle(**kwargs) -> Vehicle:
    kwargs.setdefault("id", "c1")
    kwargs.setdefault("plate_number", "WXY 1234")
    return Vehicle(make="Perodua", model="Myvi", **kwargs)


# =============================================================================
# Agreement checkpoints
# =============================================================================


class TestAgreementCheckpoints:
    """Tests for per-agreement checkpoint fan-out."""

    def test_fan_out_150_minutes(self):
        """150 minutes out emits all five checkpoints."""
        items = agreement_checkpoints(agreement_ending(150), NOW)
        end = NOW + timedelta(minutes=150)
        assert [i.event.offset_minutes for i in items] == [120, 60, 30, 10, 0]
        for item in items:
            assert item.scheduled_for == end - timedelta(minutes=item.event.offset_minutes)
            assert item.original_end == end

    def test_exact_boundary_not_emitted(self):
        """Ending exactly 120 minutes out skips the 2 Hours checkpoint."""
        items = project_queue(NOW, [agreement_ending(120)], [])
        assert "2 Hours" not in [i.type for i in items]
        assert len(items) == 4

    def test_one_minute_past_boundary_emitted(self):
        """Ending 121 minutes out emits 2 Hours one minute from now."""
        items = project_queue(NOW, [agreement_ending(121)], [])
        first = items[0]
        assert first.type == "2 Hours"
        assert first.scheduled_for == NOW + timedelta(minutes=1)

    def test_only_expired_checkpoint_left(self):
        """Five minutes out leaves only the EXPIRED checkpoint."""
        items = project_queue(NOW, [agreement_ending(5)], [])
        assert [i.type for i in items] == ["EXPIRED"]
        assert items[0].is_expired_checkpoint

    def test_already_ended_emits_nothing(self):
        assert project_queue(NOW, [agreement_ending(0)], []) == []
        assert project_queue(NOW, [agreement_ending(-30)], []) == []

    def test_plate_and_model_from_agreement(self):
        item = project_queue(NOW, [agreement_ending(15)], [])[0]
        assert item.plate == "WXY 1234"
        assert item.model == "Perodua Myvi"

    def test_malformed_date_end_skipped(self):
        bad = Agreement("a2", "ABC 1", "Saga", "not-a-date", "Confirmed")
        missing = Agreement("a3", "ABC 2", "Saga", None, "Confirmed")
        assert project_queue(NOW, [bad, missing], []) == []

    def test_datetime_date_end_accepted(self):
        ag = Agreement("a4", "ABC 3", "Saga", NOW + timedelta(minutes=45), "Confirmed")
        assert [i.type for i in project_queue(NOW, [ag], [])] == ["30 Minutes", "10 Minutes", "EXPIRED"]


# =============================================================================
# Maintenance checkpoint
# =============================================================================


class TestMaintenanceCheckpoint:
    """Tests for mileage-based maintenance banding."""

    BATCH = datetime(2024, 1, 2, 8, tzinfo=tz.UTC)

    @pytest.mark.parametrize(
        "current,target,band,label",
        [
            (10500, 10000, MaintenanceBand.OVERDUE, "MAINTENANCE OVERDUE"),
            (10000, 10000, MaintenanceBand.OVERDUE, "MAINTENANCE OVERDUE"),
            (9950, 10000, MaintenanceBand.URGENT_100, "Urgent 100km"),
            (9600, 10000, MaintenanceBand.UNDER_500, "< 500km"),
            (9000, 10000, MaintenanceBand.UNDER_1000, "< 1000km"),
            (8000, 10000, MaintenanceBand.UNDER_2000, "< 2000km"),
        ],
    )
    def test_bands(self, current, target, band, label):
        item = maintenance_checkpoint(
            vehicle(current_mileage=current, next_service_mileage=target), self.BATCH
        )
        assert item.event == MaintenanceDue(band, target - current)
        assert item.type == label
        assert item.scheduled_for == self.BATCH
        assert item.original_end is None

    def test_beyond_2000_not_emitted(self):
        v = vehicle(current_mileage=7999, next_service_mileage=10000)
        assert maintenance_checkpoint(v, self.BATCH) is None

    def test_urgent_vehicle_emits_exactly_one_item(self):
        v = vehicle(current_mileage=9950, next_service_mileage=10000)
        items = project_queue(NOW, [], [v])
        assert [i.type for i in items] == ["Urgent 100km"]

    def test_missing_next_service_never_emits(self):
        for current in (None, 0, 50000):
            v = vehicle(current_mileage=current, next_service_mileage=None)
            assert project_queue(NOW, [], [v]) == []

    def test_missing_current_mileage_not_treated_as_zero(self):
        v = vehicle(current_mileage=None, next_service_mileage=1500)
        assert project_queue(NOW, [], [v]) == []

    def test_non_numeric_mileage_skipped(self):
        v = vehicle(current_mileage="n/a", next_service_mileage=10000)
        assert project_queue(NOW, [], [v]) == []

    def test_model_from_catalog(self):
        v = vehicle(current_mileage=9950, next_service_mileage=10000)
        assert project_queue(NOW, [], [v])[0].model == "Perodua Myvi"


# =============================================================================
# Expiry checkpoints
# =============================================================================


class TestExpiryCheckpoints:
    """Tests for insurance and roadtax expiry items."""

    def test_91_days_skipped(self):
        v = vehicle(insurance_expiry=(NOW + timedelta(days=91)).isoformat())
        assert project_queue(NOW, [], [v]) == []

    def test_90_days_emitted(self):
        v = vehicle(insurance_expiry=(NOW + timedelta(days=90)).isoformat())
        items = project_queue(NOW, [], [v])
        assert len(items) == 1
        assert items[0].event == ExpiryDue(ExpiryField.INSURANCE, 90)
        assert items[0].type == "Insurance 90 Days"

    def test_partial_day_rounds_up(self):
        v = vehicle(roadtax_expiry=(NOW + timedelta(hours=30)).isoformat())
        assert project_queue(NOW, [], [v])[0].type == "Roadtax 2 Days"

    def test_today(self):
        v = vehicle(insurance_expiry="2024-01-01")
        assert project_queue(NOW, [], [v])[0].type == "Insurance Today"

    def test_expired(self):
        v = vehicle(roadtax_expiry="2023-12-25")
        assert project_queue(NOW, [], [v])[0].type == "Roadtax EXPIRED"

    def test_fields_independent(self):
        both = vehicle(insurance_expiry="2024-02-01", roadtax_expiry="2024-02-15")
        one = vehicle(id="c2", plate_number="B 1", insurance_expiry=None, roadtax_expiry="2024-02-15")
        assert len(project_queue(NOW, [], [both])) == 2
        assert len(project_queue(NOW, [], [one])) == 1

    def test_unparseable_expiry_skipped(self):
        v = vehicle(insurance_expiry="31/02/2024", roadtax_expiry="2024-02-15")
        items = project_queue(NOW, [], [v])
        assert [i.event.field for i in items] == [ExpiryField.ROADTAX]


# =============================================================================
# Queue ordering
# =============================================================================


class TestProjectQueue:
    """Tests for combined projection and ordering."""

    def test_end_to_end_example(self):
        ag = Agreement("a1", "WXY 1234", "Myvi", "2024-01-01T02:30:00Z", "Confirmed")
        items = project_queue(NOW, [ag], [])
        assert [(i.scheduled_for.strftime("%H:%M"), i.type) for i in items] == [
            ("00:30", "2 Hours"),
            ("01:30", "1 Hour"),
            ("02:00", "30 Minutes"),
            ("02:20", "10 Minutes"),
            ("02:30", "EXPIRED"),
        ]

    def test_sorted_across_agreements(self):
        items = project_queue(
            NOW, [agreement_ending(300, id="late"), agreement_ending(90, id="early")], []
        )
        times = [i.scheduled_for for i in items]
        assert times == sorted(times)
        assert items[0].scheduled_for == NOW + timedelta(minutes=30)

    def test_deterministic(self):
        agreements = [agreement_ending(150), agreement_ending(400, id="a2")]
        vehicles = [
            vehicle(current_mileage=9950, next_service_mileage=10000, insurance_expiry="2024-01-20"),
        ]
        first = [i.to_dict() for i in project_queue(NOW, agreements, vehicles, KL)]
        second = [i.to_dict() for i in project_queue(NOW, agreements, vehicles, KL)]
        assert first == second

    def test_batch_items_at_next_8am_business_time(self):
        v = vehicle(current_mileage=9950, next_service_mileage=10000)
        item = project_queue(NOW, [], [v], KL)[0]
        # 2024-01-01 00:00Z is 08:00 in KL, so the next batch is Jan 2 08:00 KL
        assert item.scheduled_for == datetime(2024, 1, 2, 0, tzinfo=tz.UTC)

    def test_batch_items_default_to_utc(self):
        v = vehicle(current_mileage=9950, next_service_mileage=10000)
        item = project_queue(NOW, [], [v])[0]
        assert item.scheduled_for == datetime(2024, 1, 2, 8, tzinfo=tz.UTC)

    def test_ties_keep_emission_order(self):
        """Maintenance, then insurance, then roadtax for the same batch time."""
        vehicles = [
            vehicle(id="c1", plate_number="A 1", roadtax_expiry="2024-01-10", current_mileage=1, next_service_mileage=2),
            vehicle(id="c2", plate_number="B 2", insurance_expiry="2024-01-10"),
        ]
        items = project_queue(NOW, [], vehicles)
        assert [(i.plate, type(i.event)) for i in items] == [
            ("A 1", MaintenanceDue),
            ("B 2", ExpiryDue),
            ("A 1", ExpiryDue),
        ]
        assert items[1].event.field == ExpiryField.INSURANCE
        assert items[2].event.field == ExpiryField.ROADTAX

    def test_agreements_before_batch_items(self):
        ag = agreement_ending(2 * 24 * 60)
        v = vehicle(current_mileage=9950, next_service_mileage=10000)
        items = project_queue(NOW, [ag], [v])
        batch = [i for i in items if isinstance(i.event, MaintenanceDue)][0]
        index = items.index(batch)
        assert all(i.scheduled_for <= batch.scheduled_for for i in items[:index])

    def test_naive_now_taken_as_utc(self):
        items = project_queue(datetime(2024, 1, 1), [agreement_ending(15)], [])
        assert [i.type for i in items] == ["10 Minutes", "EXPIRED"]

    def test_invalid_now_raises(self):
        with pytest.raises(ValueError):
            project_queue("yesterday", [], [])

    def test_does_not_mutate_inputs(self):
        agreements = [agreement_ending(150)]
        vehicles = [vehicle(current_mileage=9950, next_service_mileage=10000)]
        project_queue(NOW, agreements, vehicles)
        assert agreements[0].date_end == (NOW + timedelta(minutes=150)).isoformat()
        assert vehicles[0].current_mileage == 9950

    def test_event_variant_for_agreement(self):
        item = project_queue(NOW, [agreement_ending(15)], [])[0]
        assert item.event == AgreementCheckpoint(10)
