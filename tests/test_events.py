#!/usr/bin/env python3
"""Tests for reminder event variants."""

from fleet import AgreementCheckpoint, ExpiryDue, ExpiryField, MaintenanceBand, MaintenanceDue


class TestMaintenanceBand:
    """Tests for MaintenanceBand ordering."""

    def test_urgency_ordering(self):
        """Lower value = more urgent."""
        assert MaintenanceBand.OVERDUE.value < MaintenanceBand.URGENT_100.value
        assert MaintenanceBand.URGENT_100.value < MaintenanceBand.UNDER_500.value
        assert MaintenanceBand.UNDER_500.value < MaintenanceBand.UNDER_1000.value
        assert MaintenanceBand.UNDER_1000.value < MaintenanceBand.UNDER_2000.value


class TestExpiryField:
    def test_title(self):
        assert ExpiryField.INSURANCE.title == "Insurance"
        assert ExpiryField.ROADTAX.title == "Roadtax"

    def test_value_is_attribute_name(self):
        assert ExpiryField.INSURANCE.value == "insurance_expiry"
        assert ExpiryField.ROADTAX.value == "roadtax_expiry"


class TestVariants:
    """Variants compare by value."""

    def test_agreement_checkpoint(self):
        assert AgreementCheckpoint(0).is_expiry is True
        assert AgreementCheckpoint(10).is_expiry is False
        assert AgreementCheckpoint(30) == AgreementCheckpoint(30)

    def test_maintenance_and_expiry(self):
        assert MaintenanceDue(MaintenanceBand.OVERDUE, -5) == MaintenanceDue(MaintenanceBand.OVERDUE, -5)
        assert ExpiryDue(ExpiryField.ROADTAX, 3) != ExpiryDue(ExpiryField.INSURANCE, 3)
