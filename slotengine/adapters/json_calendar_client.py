"""
Calendar client that reads external busy blocks from a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import List

import pendulum
from pendulum import DateTime

from ..domain.exceptions import CalendarFetchError
from ..domain.models import TimeRange

logger = logging.getLogger(__name__)


class JsonCalendarClient:
    """
    Client that serves busy times from an exported calendar file.

    The file holds a list of events, each with ISO-8601 ``start`` and ``end``.
    Events flagged ``"transparent": true`` (free time) are ignored.
    """

    def __init__(self, data_file: Path):
        """
        Initialize the client.

        Args:
            data_file: Path to the JSON export
        """
        self.data_file = data_file

    def _load_events(self) -> list:
        """Load raw events; a missing file means no calendar is connected."""
        if not self.data_file.exists():
            logger.debug("Calendar file %s not found, assuming no busy time", self.data_file)
            return []

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                events = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise CalendarFetchError(f"Could not read calendar file {self.data_file}: {exc}") from exc

        if not isinstance(events, list):
            raise CalendarFetchError(f"Calendar file {self.data_file} must contain a list of events")

        return events

    async def get_busy_times(
        self,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "UTC"
    ) -> List[TimeRange]:
        """
        Load busy times overlapping the requested window.

        Args:
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone used for event times without an offset

        Returns:
            List of busy TimeRange objects

        Raises:
            CalendarFetchError: If the file cannot be read or parsed
        """
        busy_times: List[TimeRange] = []

        for event in self._load_events():
            if not isinstance(event, dict) or event.get("transparent"):
                continue

            try:
                event_start = pendulum.parse(event["start"], tz=timezone)
                event_end = pendulum.parse(event["end"], tz=timezone)
                busy = TimeRange(start=event_start, end=event_end)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid calendar event %r: %s", event, exc)
                continue

            # Check if event overlaps with requested time window
            if busy.start < end_time and busy.end > start_time:
                busy_times.append(busy)

        return busy_times
