"""
Adapters layer - Stand-ins for the schedule database and external calendars.
"""

from .config_repository import ConfigScheduleRepository
from .json_calendar_client import JsonCalendarClient

__all__ = ["ConfigScheduleRepository", "JsonCalendarClient"]
