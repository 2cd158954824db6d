"""
Shared helpers for the test suite.
"""

import pendulum
import pytest

from slotengine.domain.models import AvailabilityInput, WorkingHourSlot

TIMEZONE = "Europe/London"

# Monday 2 Feb 2026 (day_of_week 1)
MONDAY = pendulum.date(2026, 2, 2)


def at(hh_mm: str, day=MONDAY, tz: str = TIMEZONE) -> pendulum.DateTime:
    """Build an instant from a wall-clock time on ``day``."""
    hours, minutes = (int(part) for part in hh_mm.split(":"))
    return pendulum.datetime(day.year, day.month, day.day, hours, minutes, tz=tz)


def local_times(slots, tz: str = TIMEZONE) -> list:
    """Render slot starts as local "HH:mm" strings."""
    return [slot.start.in_timezone(tz).format("HH:mm") for slot in slots]


@pytest.fixture
def make_input():
    """Factory for a Monday with 09:00-17:00 working hours and nothing else."""

    def _make(**changes) -> AvailabilityInput:
        values = dict(
            date=MONDAY,
            timezone=TIMEZONE,
            working_hours=[WorkingHourSlot(day_of_week=1, start_time="09:00", end_time="17:00")],
            duration_mins=60,
            buffer_mins=0,
            min_notice_ms=0,
            now=pendulum.datetime(2026, 2, 1, tz=TIMEZONE),
        )
        values.update(changes)
        return AvailabilityInput(**values)

    return _make
