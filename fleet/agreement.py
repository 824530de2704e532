"""Agreement class for rental bookings."""

from datetime import datetime
from typing import Optional, Union

from .calculations import parse_timestamp


class Agreement:
    """A rental agreement as read from the bookings table."""

    def __init__(
        self,
        id: Optional[str],
        plate_number: Optional[str],
        car_type: Optional[str],
        date_end: Union[str, datetime, None],
        status: Optional[str] = None,
        customer_name: Optional[str] = None,
        mobile: Optional[str] = None,
    ):
        self.id = id
        self.plate_number = plate_number
        self.car_type = car_type
        self.date_end = date_end
        self.status = status
        self.customer_name = customer_name
        self.mobile = mobile

    @property
    def end(self) -> Optional[datetime]:
        """date_end as an aware datetime, or None if unparseable."""
        return parse_timestamp(self.date_end)

    def __repr__(self) -> str:
        return f"Agreement({self.id!r}, {self.plate_number!r}, ends {self.date_end!r})"
