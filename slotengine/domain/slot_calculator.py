"""
Core business logic for calculating bookable time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import re
from datetime import date, timedelta
from typing import Iterable, List, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidConfigurationError
from .intervals import merge_ranges, subtract_ranges
from .models import (
    AvailabilityInput,
    AvailableSlot,
    Override,
    OverrideType,
    TimeRange,
    WorkingHourSlot,
)
from .recurrence import weekday_index

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

MINUTES_PER_DAY = 24 * 60


def parse_time_of_day(value: str) -> int:
    """
    Parse a wall-clock "HH:MM" (or "HH:MM:SS") string into minutes after midnight.

    "24:00" is accepted as the end of the day. Seconds are ignored.

    Raises:
        InvalidConfigurationError: If the string is not a valid time of day
    """
    match = _TIME_OF_DAY.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidConfigurationError(f"Malformed time of day: {value!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)

    if hours == 24 and minutes == 0 and seconds == 0:
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59 or seconds > 59:
        raise InvalidConfigurationError(f"Time of day out of range: {value!r}")

    return hours * 60 + minutes


def resolve_timezone(name: str):
    """
    Resolve an IANA timezone identifier.

    Raises:
        InvalidConfigurationError: If the identifier is unknown
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidConfigurationError(f"Unknown timezone: {name!r}")
    try:
        return pendulum.timezone(name)
    except (ValueError, KeyError) as exc:
        raise InvalidConfigurationError(f"Unknown timezone: {name!r}") from exc


def wall_clock_to_instant(day: date, minutes: int, tz) -> DateTime:
    """Resolve minutes after local midnight on ``day`` to an absolute instant."""
    if minutes >= MINUTES_PER_DAY:
        day = day + timedelta(days=1)
        minutes -= MINUTES_PER_DAY
    return pendulum.datetime(
        day.year, day.month, day.day,
        minutes // 60, minutes % 60,
        tz=tz,
    )


class SlotCalculator:
    """
    Calculates bookable slots for one date.

    Algorithm:
    1. Resolve the day's working hours into absolute intervals and merge them
    2. Union "available" overrides into the free set
    3. Subtract "unavailable" overrides
    4. Subtract existing bookings and external calendar busy time
    5. Quantize each free interval into slots, keeping room for the buffer
    6. Drop slots that start before the minimum notice period
    7. Return slots in ascending order

    The calculator holds no state; a single instance may be shared freely.
    """

    def calculate_available_slots(self, availability: AvailabilityInput) -> List[AvailableSlot]:
        """
        Calculate bookable slots for ``availability.date``.

        Args:
            availability: Fully assembled input for one target date

        Returns:
            Ordered list of AvailableSlot objects, each exactly
            ``duration_mins`` long

        Raises:
            InvalidConfigurationError: For an unknown timezone, non-positive
                duration, negative buffer or notice, or malformed times
        """
        self._validate_parameters(availability)
        tz = resolve_timezone(availability.timezone)
        target_date = availability.date

        # Steps 1 and 2: working hours plus "available" overrides
        working_ranges = self._resolve_working_hours(
            availability.working_hours, target_date, tz
        )
        available_overrides = self._resolve_overrides(
            availability.overrides, OverrideType.AVAILABLE, target_date, tz
        )
        free_ranges = merge_ranges(working_ranges + available_overrides)

        # Step 3: "unavailable" overrides win over everything else
        blocked_overrides = self._resolve_overrides(
            availability.overrides, OverrideType.UNAVAILABLE, target_date, tz
        )
        free_ranges = subtract_ranges(free_ranges, blocked_overrides)

        # Step 4: bookings and calendar blocks are treated identically
        busy_ranges = merge_ranges(
            list(availability.existing_bookings) + list(availability.busy_events)
        )
        free_ranges = subtract_ranges(free_ranges, busy_ranges)

        # Steps 5 and 6
        earliest_start = pendulum.instance(availability.now).add(
            microseconds=availability.min_notice_ms * 1000
        )
        slots: List[AvailableSlot] = []

        for free_range in free_ranges:
            for slot in self._quantize(
                free_range,
                availability.duration_mins,
                availability.buffer_mins,
                tz,
            ):
                if slot.start >= earliest_start:
                    slots.append(slot)

        # Step 7: free ranges are disjoint and sorted, so this is already ordered
        return slots

    @staticmethod
    def _validate_parameters(availability: AvailabilityInput) -> None:
        if availability.duration_mins is None or availability.duration_mins <= 0:
            raise InvalidConfigurationError(
                f"duration_mins must be greater than zero, got {availability.duration_mins}"
            )
        if availability.buffer_mins is None or availability.buffer_mins < 0:
            raise InvalidConfigurationError(
                f"buffer_mins must not be negative, got {availability.buffer_mins}"
            )
        if availability.min_notice_ms is None or availability.min_notice_ms < 0:
            raise InvalidConfigurationError(
                f"min_notice_ms must not be negative, got {availability.min_notice_ms}"
            )
        if availability.now is None:
            raise InvalidConfigurationError("now must be provided")

    def _resolve_working_hours(
        self,
        working_hours: Iterable[WorkingHourSlot],
        target_date: date,
        tz
    ) -> List[TimeRange]:
        """Convert the target weekday's working hours into absolute ranges."""
        day_of_week = weekday_index(target_date)
        ranges: List[TimeRange] = []

        for slot in working_hours:
            if slot.day_of_week not in range(7):
                raise InvalidConfigurationError(
                    f"day_of_week must be between 0 and 6, got {slot.day_of_week}"
                )
            if slot.day_of_week != day_of_week:
                continue

            window = self._resolve_window(slot.start_time, slot.end_time, target_date, tz)
            if window:
                ranges.append(window)

        return ranges

    def _resolve_overrides(
        self,
        overrides: Iterable[Override],
        override_type: OverrideType,
        target_date: date,
        tz
    ) -> List[TimeRange]:
        """Convert overrides of one type into absolute ranges."""
        ranges: List[TimeRange] = []

        for override in overrides:
            if override.type is not override_type:
                continue

            window = self._resolve_window(override.start_time, override.end_time, target_date, tz)
            if window:
                ranges.append(window)

        return ranges

    @staticmethod
    def _resolve_window(
        start_time: str,
        end_time: str,
        target_date: date,
        tz
    ) -> TimeRange | None:
        """
        Resolve a wall-clock window on the target date.

        Zero-length windows yield None. A window that ends before it starts
        is a configuration error.
        """
        start_minutes = parse_time_of_day(start_time)
        end_minutes = parse_time_of_day(end_time)

        if end_minutes < start_minutes:
            raise InvalidConfigurationError(
                f"Window {start_time}-{end_time} ends before it starts"
            )

        start = wall_clock_to_instant(target_date, start_minutes, tz)
        end = wall_clock_to_instant(target_date, end_minutes, tz)

        # A DST gap can collapse a short window to nothing
        if start >= end:
            return None

        return TimeRange(start=start, end=end)

    @staticmethod
    def _quantize(
        free_range: TimeRange,
        duration_mins: int,
        buffer_mins: int,
        tz
    ) -> Iterable[AvailableSlot]:
        """
        Split a free range into back-to-back slots starting at its start.

        The buffer after each slot has to fit inside the same free range.
        """
        slot_start = free_range.start.in_timezone(tz)

        while True:
            slot_end = slot_start.add(minutes=duration_mins)
            if slot_end.add(minutes=buffer_mins) > free_range.end:
                break

            yield AvailableSlot(start=slot_start, end=slot_end)
            slot_start = slot_end


def calculate_available_slots(availability: AvailabilityInput) -> List[AvailableSlot]:
    """Module-level shortcut for ``SlotCalculator().calculate_available_slots``."""
    return SlotCalculator().calculate_available_slots(availability)


def day_bounds(target_date: date, timezone: str) -> Tuple[DateTime, DateTime]:
    """
    Return the absolute start and end of ``target_date`` in ``timezone``.

    Raises:
        InvalidConfigurationError: If the timezone is unknown
    """
    tz = resolve_timezone(timezone)
    return (
        wall_clock_to_instant(target_date, 0, tz),
        wall_clock_to_instant(target_date, MINUTES_PER_DAY, tz),
    )
