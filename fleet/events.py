"""Reminder event variants emitted by the projector."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class MaintenanceBand(Enum):
    """Distance-to-service bands. Lower value = more urgent."""

    OVERDUE = 1
    URGENT_100 = 2
    UNDER_500 = 3
    UNDER_1000 = 4
    UNDER_2000 = 5


class ExpiryField(Enum):
    """Vehicle documents that expire."""

    INSURANCE = "insurance_expiry"
    ROADTAX = "roadtax_expiry"

    @property
    def title(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class AgreementCheckpoint:
    """Reminder fired offset_minutes before an agreement ends."""

    offset_minutes: int

    @property
    def is_expiry(self) -> bool:
        return self.offset_minutes == 0


@dataclass(frozen=True)
class MaintenanceDue:
    """Service mileage is within reach (or already passed)."""

    band: MaintenanceBand
    distance: float


@dataclass(frozen=True)
class ExpiryDue:
    """Insurance or roadtax expires in `days` (negative once lapsed)."""

    field: ExpiryField
    days: int


Event = Union[AgreementCheckpoint, MaintenanceDue, ExpiryDue]
