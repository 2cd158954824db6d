"""
Tests for configuration loading and the config-backed adapters.
"""

import asyncio
import json
from pathlib import Path

import pendulum
import pytest
import yaml
from conftest import MONDAY, TIMEZONE, at
from pydantic import ValidationError

from slotengine.adapters.config_repository import ConfigScheduleRepository
from slotengine.adapters.json_calendar_client import JsonCalendarClient
from slotengine.config import AppConfig
from slotengine.domain.exceptions import CalendarFetchError
from slotengine.domain.models import OverrideType

CONFIG = {
    "timezone": TIMEZONE,
    "working_hours": [{"day_of_week": 1, "start": "09:00", "end": "17:00"}],
    "overrides": [
        {"type": "blocked", "start": "12:00", "end": "13:00", "date": "2026-02-02"},
        {"type": "available", "start": "18:00", "end": "19:00", "recurrence_rule": "FREQ=WEEKLY;BYDAY=TU"},
    ],
    "bookings": [
        {"start": "2026-02-02T10:00:00", "end": "2026-02-02T11:00:00"},
        {"start": "2026-02-02T15:00:00", "end": "2026-02-02T16:00:00", "status": "cancelled"},
        {"start": "2026-02-05T10:00:00", "end": "2026-02-05T11:00:00"},
    ],
    "booking_types": [{"slug": "intro", "name": "Intro call", "duration_minutes": 30}],
    "calendar_file": "busy.json",
}


def _write_config(tmp_path: Path, data: dict) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_from_yaml(self, tmp_path):
        config = AppConfig.load_from_yaml(_write_config(tmp_path, CONFIG))

        assert config.timezone == TIMEZONE
        assert config.overrides[0].type is OverrideType.UNAVAILABLE
        assert config.overrides[0].date == pendulum.date(2026, 2, 2)
        assert config.calendar_file == tmp_path / "busy.json"
        assert config.find_booking_type("INTRO").name == "Intro call"
        assert config.find_booking_type("missing") is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("timezone: [unclosed", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_path)

    def test_root_must_be_mapping(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(timezone="Nowhere/Special")

    @pytest.mark.parametrize(
        "entry",
        [
            {"day_of_week": 7, "start": "09:00", "end": "17:00"},
            {"day_of_week": 1, "start": "9am", "end": "17:00"},
            {"day_of_week": 1, "start": "17:00", "end": "09:00"},
        ],
    )
    def test_invalid_working_hours_rejected(self, entry):
        with pytest.raises(ValidationError):
            AppConfig(working_hours=[entry])

    def test_override_needs_date_or_rule(self):
        with pytest.raises(ValidationError, match="exactly one"):
            AppConfig(overrides=[{"type": "available", "start": "10:00", "end": "11:00"}])

    def test_duplicate_booking_types_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            AppConfig(
                booking_types=[
                    {"slug": "intro", "name": "A"},
                    {"slug": "Intro", "name": "B"},
                ]
            )

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(booking_types=[{"slug": "intro", "name": "A", "duration_minutes": 0}])


class TestConfigScheduleRepository:
    """Tests for ConfigScheduleRepository."""

    def test_serves_schedule_data(self):
        repository = ConfigScheduleRepository(AppConfig(**CONFIG))

        assert repository.get_working_hours()[0].day_of_week == 1
        records = repository.get_overrides()
        assert records[0].date == MONDAY
        assert records[1].is_recurring
        assert repository.get_booking_type("intro").duration_mins == 30
        assert repository.get_booking_type("missing") is None

    def test_bookings_exclude_cancelled_and_other_days(self):
        repository = ConfigScheduleRepository(AppConfig(**CONFIG))

        bookings = repository.get_bookings(at("00:00"), at("00:00", day=MONDAY.add(days=1)))

        assert len(bookings) == 1
        assert bookings[0].start == at("10:00")


class TestJsonCalendarClient:
    """Tests for JsonCalendarClient."""

    def _fetch(self, client: JsonCalendarClient):
        return asyncio.run(
            client.get_busy_times(
                start_time=at("00:00"),
                end_time=at("00:00", day=MONDAY.add(days=1)),
                timezone=TIMEZONE,
            )
        )

    def test_reads_overlapping_events(self, tmp_path):
        data_file = tmp_path / "busy.json"
        data_file.write_text(
            json.dumps(
                [
                    {"start": "2026-02-02T09:30:00", "end": "2026-02-02T10:00:00"},
                    {"start": "2026-02-02T11:00:00+00:00", "end": "2026-02-02T12:00:00+00:00", "transparent": True},
                    {"start": "2026-02-03T09:30:00", "end": "2026-02-03T10:00:00"},
                    {"start": "not a date", "end": "2026-02-02T10:00:00"},
                    {"end": "2026-02-02T10:00:00"},
                ]
            ),
            encoding="utf-8",
        )

        busy = self._fetch(JsonCalendarClient(data_file))

        assert len(busy) == 1
        assert busy[0].start == at("09:30")

    def test_missing_file_means_no_busy_time(self, tmp_path):
        assert self._fetch(JsonCalendarClient(tmp_path / "absent.json")) == []

    def test_corrupt_file_raises(self, tmp_path):
        data_file = tmp_path / "busy.json"
        data_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(CalendarFetchError):
            self._fetch(JsonCalendarClient(data_file))

    def test_non_list_file_raises(self, tmp_path):
        data_file = tmp_path / "busy.json"
        data_file.write_text(json.dumps({"start": "x"}), encoding="utf-8")

        with pytest.raises(CalendarFetchError):
            self._fetch(JsonCalendarClient(data_file))
