"""FleetSnapshot - agreements and vehicles as fetched from the data store."""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from .agreement import Agreement
from .calculations import parse_timestamp
from .vehicle import Vehicle

CLOSED_AGREEMENT_STATUSES = ("Cancelled", "Completed")
INACTIVE_VEHICLE_STATUSES = ("Deleted", "inactive")


def select_upcoming_agreements(
    now: datetime, agreements: Iterable[Agreement], window_hours: float = 48
) -> List[Agreement]:
    """
    Open agreements ending within the look-ahead window.

    Keeps agreements whose status is not Cancelled/Completed and whose
    date_end falls in (now, now + window_hours], sorted by date_end.
    Agreements with an unparseable date_end are dropped.
    """
    now = parse_timestamp(now)
    horizon = now + timedelta(hours=window_hours)
    selected = []
    for agreement in agreements:
        if agreement.status in CLOSED_AGREEMENT_STATUSES:
            continue
        end = agreement.end
        if end is None or not (now < end <= horizon):
            continue
        selected.append((end, agreement))
    selected.sort(key=lambda pair: pair[0])
    return [agreement for _, agreement in selected]


def select_active_vehicles(vehicles: Iterable[Vehicle]) -> List[Vehicle]:
    """Vehicles that are not deleted or inactive."""
    return [v for v in vehicles if v.status not in INACTIVE_VEHICLE_STATUSES]


class FleetSnapshot:
    """All agreements and vehicles loaded from one fleet file."""

    def __init__(
        self,
        agreements: Optional[List[Agreement]] = None,
        vehicles: Optional[List[Vehicle]] = None,
    ):
        self.agreements = agreements or []
        self.vehicles = vehicles or []

    def upcoming_agreements(self, now: datetime, window_hours: float = 48) -> List[Agreement]:
        return select_upcoming_agreements(now, self.agreements, window_hours)

    def active_vehicles(self) -> List[Vehicle]:
        return select_active_vehicles(self.vehicles)

    def get_vehicle(self, plate_number: str) -> Optional[Vehicle]:
        """Find a vehicle by plate, ignoring case and spaces."""
        wanted = normalize_plate(plate_number)
        for vehicle in self.vehicles:
            if normalize_plate(vehicle.plate_number) == wanted:
                return vehicle
        return None


def normalize_plate(plate: Optional[str]) -> str:
    return (plate or "").replace(" ", "").upper()
