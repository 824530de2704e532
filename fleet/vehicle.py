"""Vehicle class for fleet records."""

from datetime import date, datetime
from typing import Optional, Union

from .events import ExpiryField

Timestamp = Union[str, date, datetime, None]


class Vehicle:
    """Fleet vehicle with mileage targets and document expiries."""

    def __init__(
        self,
        id: Optional[str],
        plate_number: Optional[str],
        status: Optional[str] = None,
        current_mileage: Optional[float] = None,
        next_service_mileage: Optional[float] = None,
        insurance_expiry: Timestamp = None,
        roadtax_expiry: Timestamp = None,
        make: Optional[str] = None,
        model: Optional[str] = None,
        next_gear_oil_mileage: Optional[float] = None,
        next_tyre_mileage: Optional[float] = None,
        next_brake_pad_mileage: Optional[float] = None,
        track_insurance: Optional[bool] = True,
    ):
        self.id = id
        self.plate_number = plate_number
        self.status = status
        self.current_mileage = current_mileage
        self.next_service_mileage = next_service_mileage
        self.insurance_expiry = insurance_expiry
        self.roadtax_expiry = roadtax_expiry
        self.make = make
        self.model = model
        self.next_gear_oil_mileage = next_gear_oil_mileage
        self.next_tyre_mileage = next_tyre_mileage
        self.next_brake_pad_mileage = next_brake_pad_mileage
        self.track_insurance = track_insurance is not False

    @property
    def name(self) -> Optional[str]:
        """Catalog make and model, or None when neither is known."""
        name = f"{self.make or ''} {self.model or ''}".strip()
        return name or None

    def expiry(self, field: ExpiryField) -> Timestamp:
        """Raw value of an expiry field."""
        return getattr(self, field.value)

    def __repr__(self) -> str:
        return f"Vehicle({self.id!r}, {self.plate_number!r})"
