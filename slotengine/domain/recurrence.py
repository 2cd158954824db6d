"""
Matching of simple weekly recurrence rules.

Only the ``FREQ=WEEKLY;BYDAY=MO,WE`` subset is understood. Richer rules
(monthly, ordinal weekdays, intervals) must be expanded by the caller.
"""

from datetime import date
from typing import Dict

DAY_CODES: Dict[str, int] = {
    "SU": 0,
    "MO": 1,
    "TU": 2,
    "WE": 3,
    "TH": 4,
    "FR": 5,
    "SA": 6,
}


def weekday_index(day: date) -> int:
    """Return the weekday of ``day`` with 0=Sunday and 6=Saturday."""
    return day.isoweekday() % 7


def _parse_terms(rule: str) -> Dict[str, str]:
    terms: Dict[str, str] = {}
    for part in rule.split(";"):
        key, sep, value = part.partition("=")
        if not sep:
            continue
        terms.setdefault(key.strip(), value.strip())
    return terms


def matches(rule: str, day_of_week: int) -> bool:
    """
    Check whether a weekly recurrence rule applies to a weekday.

    Args:
        rule: Recurrence rule such as ``FREQ=WEEKLY;BYDAY=MO,WE``
        day_of_week: 0=Sunday .. 6=Saturday

    Returns:
        True if FREQ is WEEKLY and the weekday is listed in BYDAY.
        Any other frequency, or a malformed rule, yields False.
    """
    if not isinstance(rule, str) or not isinstance(day_of_week, int):
        return False

    terms = _parse_terms(rule)

    if terms.get("FREQ") != "WEEKLY":
        return False

    by_day = terms.get("BYDAY")
    if not by_day:
        return False

    return any(
        DAY_CODES.get(code.strip()) == day_of_week
        for code in by_day.split(",")
    )
