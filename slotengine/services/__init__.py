"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import (
    AvailabilityService,
    BookingType,
    CalendarClientProtocol,
    OverrideRecord,
    ScheduleRepository,
    select_applicable_overrides,
)

__all__ = [
    "AvailabilityService",
    "BookingType",
    "CalendarClientProtocol",
    "OverrideRecord",
    "ScheduleRepository",
    "select_applicable_overrides",
]
