"""
Domain models for availability calculation.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List

import pendulum
from pendulum import DateTime


def _as_pendulum(value: datetime) -> DateTime:
    """Normalise a stdlib datetime to pendulum; naive values are taken as UTC."""
    if isinstance(value, DateTime):
        return value
    return pendulum.instance(value)


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable range between two absolute instants.

    Used for confirmed bookings, external calendar blocks and free time alike.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        object.__setattr__(self, "start", _as_pendulum(self.start))
        object.__setattr__(self, "end", _as_pendulum(self.end))
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeRange") -> bool:
        """Check if another range lies entirely within this one."""
        return self.start <= other.start and other.end <= self.end

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        start = max(self.start, other.start)
        end = min(self.end, other.end)

        return TimeRange(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


class OverrideType(str, Enum):
    """Whether an override opens or removes bookable time."""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"

    @classmethod
    def _missing_(cls, value: object) -> "OverrideType | None":
        # Legacy records store removed time as "blocked"
        if isinstance(value, str) and value.lower() == "blocked":
            return cls.UNAVAILABLE
        return None


@dataclass(frozen=True)
class WorkingHourSlot:
    """
    One recurring block of general availability on one weekday.

    Times are local wall-clock strings ("HH:MM") in the host's timezone.
    """
    day_of_week: int  # 0=Sunday, 6=Saturday
    start_time: str
    end_time: str


@dataclass(frozen=True)
class Override:
    """
    A date-specific exception, already resolved to the target date.

    "available" overrides add bookable time, "unavailable" overrides remove it.
    """
    type: OverrideType
    start_time: str
    end_time: str

    def __post_init__(self):
        if not isinstance(self.type, OverrideType):
            object.__setattr__(self, "type", OverrideType(self.type))

    @property
    def is_available(self) -> bool:
        return self.type is OverrideType.AVAILABLE


@dataclass
class AvailabilityInput:
    """
    Everything the engine needs to compute slots for a single date.
    """
    date: date
    timezone: str
    working_hours: List[WorkingHourSlot]
    duration_mins: int
    now: DateTime
    overrides: List[Override] = field(default_factory=list)
    busy_events: List[TimeRange] = field(default_factory=list)
    existing_bookings: List[TimeRange] = field(default_factory=list)
    buffer_mins: int = 0
    min_notice_ms: int = 0


@dataclass(frozen=True)
class AvailableSlot:
    """
    A single bookable window offered to a prospective client.
    """
    start: DateTime
    end: DateTime

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise as ISO-8601 strings."""
        return {
            "start": self.start.to_iso8601_string(),
            "end": self.end.to_iso8601_string(),
        }

    def format_display(self, timezone: str | None = None) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:MM - HH:MM (N min)
        """
        start = self.start.in_timezone(timezone) if timezone else self.start
        end = self.end.in_timezone(timezone) if timezone else self.end

        date_str = start.format("dddd, DD.MM.YYYY")
        time_str = f"{start.format('HH:mm')} - {end.format('HH:mm')}"

        return f"{date_str} | {time_str} ({self.duration_minutes()} min)"
