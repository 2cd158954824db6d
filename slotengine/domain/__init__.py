"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    BookingTypeNotFoundError,
    CalendarFetchError,
    InvalidConfigurationError,
    SlotEngineError,
)
from .intervals import merge_ranges, subtract_range, subtract_ranges
from .models import (
    AvailabilityInput,
    AvailableSlot,
    Override,
    OverrideType,
    TimeRange,
    WorkingHourSlot,
)
from .recurrence import matches, weekday_index
from .slot_calculator import SlotCalculator, calculate_available_slots

__all__ = [
    "AvailabilityInput",
    "AvailableSlot",
    "BookingTypeNotFoundError",
    "CalendarFetchError",
    "InvalidConfigurationError",
    "Override",
    "OverrideType",
    "SlotCalculator",
    "SlotEngineError",
    "TimeRange",
    "WorkingHourSlot",
    "calculate_available_slots",
    "matches",
    "merge_ranges",
    "subtract_range",
    "subtract_ranges",
    "weekday_index",
]
