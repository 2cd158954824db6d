"""
Configuration management using Pydantic models loaded from YAML.
"""

import datetime as dt
from pathlib import Path
from typing import List, Optional

import pendulum
import yaml
from pendulum import DateTime
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import OverrideType, TimeRange, WorkingHourSlot
from .domain.slot_calculator import parse_time_of_day, resolve_timezone
from .services.availability import BookingType, OverrideRecord


def _parse_instant(value: str, timezone: str = "UTC") -> DateTime:
    parsed = pendulum.parse(value, tz=timezone)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"Expected a date and time, got {value!r}")
    return parsed


class WorkingHoursConfig(BaseModel):
    """One recurring block of working hours."""
    day_of_week: int  # 0=Sunday, 6=Saturday
    start: str
    end: str

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v: int) -> int:
        """Validate weekday is between 0 and 6."""
        if v not in range(7):
            raise ValueError(f"day_of_week must be between 0 and 6, got {v}")
        return v

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        parse_time_of_day(v)
        return v

    @model_validator(mode="after")
    def validate_order(self) -> "WorkingHoursConfig":
        """Ensure the block opens before it closes."""
        if parse_time_of_day(self.end) <= parse_time_of_day(self.start):
            raise ValueError("end must be later than start")
        return self

    def to_slot(self) -> WorkingHourSlot:
        return WorkingHourSlot(day_of_week=self.day_of_week, start_time=self.start, end_time=self.end)


class OverrideConfig(BaseModel):
    """A one-off (``date``) or weekly recurring (``recurrence_rule``) override."""
    type: OverrideType
    start: str
    end: str
    date: Optional[dt.date] = None
    recurrence_rule: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        parse_time_of_day(v)
        return v

    @model_validator(mode="after")
    def validate_schedule(self) -> "OverrideConfig":
        """Exactly one of date or recurrence_rule must be set."""
        if (self.date is None) == (self.recurrence_rule is None):
            raise ValueError("override needs exactly one of 'date' or 'recurrence_rule'")
        if parse_time_of_day(self.end) <= parse_time_of_day(self.start):
            raise ValueError("end must be later than start")
        return self

    def to_record(self) -> OverrideRecord:
        return OverrideRecord(
            type=self.type,
            start_time=self.start,
            end_time=self.end,
            date=self.date,
            is_recurring=self.recurrence_rule is not None,
            recurrence_rule=self.recurrence_rule,
        )


class BookingConfig(BaseModel):
    """An existing booking with ISO-8601 start and end."""
    start: str
    end: str
    status: str = "confirmed"

    @field_validator("start", "end")
    @classmethod
    def validate_instant(cls, v: str) -> str:
        _parse_instant(v)
        return v

    @property
    def is_cancelled(self) -> bool:
        return self.status.lower() == "cancelled"

    def to_time_range(self, timezone: str) -> TimeRange:
        """Parse into a TimeRange; values without an offset are read in ``timezone``."""
        return TimeRange(
            start=_parse_instant(self.start, timezone),
            end=_parse_instant(self.end, timezone),
        )


class BookingTypeConfig(BaseModel):
    """Settings of a bookable appointment type."""
    slug: str
    name: str
    duration_minutes: int = 30
    buffer_minutes: int = 0
    min_notice_hours: int = 0
    is_active: bool = True

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure meeting duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("buffer_minutes", "min_notice_hours")
    @classmethod
    def validate_not_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("value must not be negative")
        return value

    def to_booking_type(self) -> BookingType:
        return BookingType(
            slug=self.slug,
            name=self.name,
            duration_mins=self.duration_minutes,
            buffer_mins=self.buffer_minutes,
            min_notice_hours=self.min_notice_hours,
            is_active=self.is_active,
        )


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/London"
    working_hours: List[WorkingHoursConfig] = Field(default_factory=list)
    overrides: List[OverrideConfig] = Field(default_factory=list)
    bookings: List[BookingConfig] = Field(default_factory=list)
    booking_types: List[BookingTypeConfig] = Field(default_factory=list)
    calendar_file: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        resolve_timezone(value)
        return value

    @field_validator("booking_types")
    @classmethod
    def validate_booking_types(cls, value: List[BookingTypeConfig]) -> List[BookingTypeConfig]:
        """Ensure booking type slugs are unique."""
        seen_slugs: set[str] = set()
        for booking_type in value:
            slug_key = booking_type.slug.lower()
            if slug_key in seen_slugs:
                raise ValueError(f"Duplicate booking type slug detected: {booking_type.slug}")
            seen_slugs.add(slug_key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative calendar files are resolved next to the config file
        if config.calendar_file is not None and not config.calendar_file.is_absolute():
            config.calendar_file = config_path.parent / config.calendar_file

        return config

    def find_booking_type(self, slug: str) -> BookingTypeConfig | None:
        """Find a booking type by its slug."""
        for booking_type in self.booking_types:
            if booking_type.slug.lower() == slug.lower():
                return booking_type
        return None


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
