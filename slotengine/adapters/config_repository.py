"""
Schedule repository backed by the YAML application config.
"""

from typing import List, Optional

from pendulum import DateTime

from ..config import AppConfig
from ..domain.models import TimeRange, WorkingHourSlot
from ..services.availability import BookingType, OverrideRecord


class ConfigScheduleRepository:
    """
    Serves host schedule data straight from an ``AppConfig``.

    Stands in for a database in the CLI and in tests.
    """

    def __init__(self, config: AppConfig):
        self.config = config

    def get_working_hours(self) -> List[WorkingHourSlot]:
        return [entry.to_slot() for entry in self.config.working_hours]

    def get_overrides(self) -> List[OverrideRecord]:
        return [entry.to_record() for entry in self.config.overrides]

    def get_bookings(self, start: DateTime, end: DateTime) -> List[TimeRange]:
        """Return non-cancelled bookings that overlap the window."""
        window = TimeRange(start=start, end=end)
        bookings: List[TimeRange] = []

        for booking in self.config.bookings:
            if booking.is_cancelled:
                continue
            booking_range = booking.to_time_range(self.config.timezone)
            if booking_range.overlaps(window):
                bookings.append(booking_range)

        return bookings

    def get_booking_type(self, slug: str) -> Optional[BookingType]:
        booking_type = self.config.find_booking_type(slug)
        if booking_type is None:
            return None
        return booking_type.to_booking_type()
