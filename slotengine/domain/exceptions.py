"""
Domain-specific exception hierarchy for the availability engine.
"""


class SlotEngineError(Exception):
    """Base class for all application-level errors."""


class InvalidConfigurationError(SlotEngineError, ValueError):
    """Raised when availability cannot be computed from the given input."""


class BookingTypeNotFoundError(SlotEngineError):
    """Raised when the requested booking type does not exist or is inactive."""


class CalendarFetchError(SlotEngineError):
    """Raised when external calendar busy data cannot be fetched or parsed."""
