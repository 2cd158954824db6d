"""
Application service that assembles availability input and computes slots.

The service is the data-loading boundary around the pure engine: it pulls
working hours, overrides and bookings from a schedule repository, asks an
optional calendar client for external busy time, decides which overrides
apply to the requested date and hands everything to ``SlotCalculator``.
Both collaborators are described by protocols so they can be stubbed in
tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingTypeNotFoundError, CalendarFetchError
from ..domain.models import (
    AvailabilityInput,
    AvailableSlot,
    Override,
    OverrideType,
    TimeRange,
    WorkingHourSlot,
)
from ..domain.recurrence import matches, weekday_index
from ..domain.slot_calculator import SlotCalculator, day_bounds

logger = logging.getLogger(__name__)

MS_PER_HOUR = 60 * 60 * 1000


@dataclass(frozen=True)
class BookingType:
    """Slot parameters of a bookable appointment type."""
    slug: str
    name: str
    duration_mins: int
    buffer_mins: int = 0
    min_notice_hours: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class OverrideRecord:
    """
    An override as stored, before it is resolved to a date.

    One-off overrides carry a ``date``; recurring ones carry a weekly
    ``recurrence_rule`` instead.
    """
    type: OverrideType
    start_time: str
    end_time: str
    date: Optional[date] = None
    is_recurring: bool = False
    recurrence_rule: Optional[str] = None

    def applies_to(self, target_date: date) -> bool:
        """Check whether this override is in effect on ``target_date``."""
        if not self.is_recurring and self.date is not None:
            return self.date == target_date
        if self.is_recurring and self.recurrence_rule:
            return matches(self.recurrence_rule, weekday_index(target_date))
        return False

    def to_override(self) -> Override:
        return Override(type=self.type, start_time=self.start_time, end_time=self.end_time)


class ScheduleRepository(Protocol):
    """Protocol describing the host schedule data needed by the service."""

    def get_working_hours(self) -> List[WorkingHourSlot]:
        """Return all recurring working-hour slots."""

    def get_overrides(self) -> List[OverrideRecord]:
        """Return all stored overrides, recurring or not."""

    def get_bookings(self, start: DateTime, end: DateTime) -> List[TimeRange]:
        """Return non-cancelled bookings overlapping the window."""

    def get_booking_type(self, slug: str) -> Optional[BookingType]:
        """Return the booking type with the given slug, if any."""


class CalendarClientProtocol(Protocol):
    """Protocol describing the external calendar behaviour needed by the service."""

    async def get_busy_times(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[TimeRange]:
        """Return busy time ranges overlapping the window."""


def select_applicable_overrides(
    records: Iterable[OverrideRecord],
    target_date: date,
) -> List[Override]:
    """Resolve stored overrides to those in effect on ``target_date``."""
    return [
        record.to_override()
        for record in records
        if record.applies_to(target_date)
    ]


class AvailabilityService:
    """
    Orchestrates schedule loading, busy-time retrieval and slot calculation.
    """

    def __init__(
        self,
        repository: ScheduleRepository,
        calendar_client: Optional[CalendarClientProtocol] = None,
        slot_calculator: Optional[SlotCalculator] = None,
        clock: Callable[[], DateTime] = pendulum.now,
    ) -> None:
        self._repository = repository
        self._calendar_client = calendar_client
        self._slot_calculator = slot_calculator or SlotCalculator()
        self._clock = clock

    async def find_slots(
        self,
        *,
        booking_type_slug: str,
        target_date: date,
        timezone: str,
    ) -> List[AvailableSlot]:
        """
        Load everything needed for ``target_date`` and compute bookable slots.

        Raises:
            BookingTypeNotFoundError: If the booking type is unknown or inactive
            InvalidConfigurationError: If the loaded data cannot be evaluated
        """
        availability = await self.build_input(
            booking_type_slug=booking_type_slug,
            target_date=target_date,
            timezone=timezone,
        )
        return self.calculate_slots(availability)

    async def build_input(
        self,
        *,
        booking_type_slug: str,
        target_date: date,
        timezone: str,
    ) -> AvailabilityInput:
        """Assemble the engine input for one date."""
        booking_type = self._repository.get_booking_type(booking_type_slug)
        if booking_type is None or not booking_type.is_active:
            raise BookingTypeNotFoundError(
                f"Booking type not found or inactive: {booking_type_slug!r}"
            )

        day_start, day_end = day_bounds(target_date, timezone)

        overrides = select_applicable_overrides(
            self._repository.get_overrides(), target_date
        )
        bookings = self._repository.get_bookings(day_start, day_end)
        busy_events = await self.fetch_busy_times(
            start_date=day_start,
            end_date=day_end,
            timezone=timezone,
        )

        logger.debug(
            "Loaded %d override(s), %d booking(s), %d busy block(s) for %s",
            len(overrides), len(bookings), len(busy_events), target_date,
        )

        return AvailabilityInput(
            date=target_date,
            timezone=timezone,
            working_hours=self._repository.get_working_hours(),
            overrides=overrides,
            busy_events=busy_events,
            existing_bookings=bookings,
            duration_mins=booking_type.duration_mins,
            buffer_mins=booking_type.buffer_mins,
            min_notice_ms=booking_type.min_notice_hours * MS_PER_HOUR,
            now=self._clock(),
        )

    async def fetch_busy_times(
        self,
        *,
        start_date: DateTime,
        end_date: DateTime,
        timezone: str,
    ) -> List[TimeRange]:
        """
        Fetch external calendar busy time for the window.

        A failing calendar must not block booking: the error is logged and
        no additional busy time is assumed.
        """
        if self._calendar_client is None:
            return []

        try:
            return list(
                await self._calendar_client.get_busy_times(
                    start_time=start_date,
                    end_time=end_date,
                    timezone=timezone,
                )
            )
        except CalendarFetchError as exc:
            logger.warning("Calendar busy times unavailable, ignoring: %s", exc)
            return []

    def calculate_slots(self, availability: AvailabilityInput) -> List[AvailableSlot]:
        """Calculate bookable slots from assembled input."""
        return self._slot_calculator.calculate_available_slots(availability)
