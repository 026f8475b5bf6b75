"""Chargeable working-day counter."""

from __future__ import annotations

from datetime import date, timedelta

from vacation_backend.common.constants import WEEKEND_DAYS
from vacation_backend.holidays.calendar import HolidayCalendar


def iter_days(start: date, end: date):
    """Yield every date from *start* to *end* inclusive (nothing if reversed)."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def is_working_day(day: date, calendar: HolidayCalendar) -> bool:
    return day.weekday() not in WEEKEND_DAYS and not calendar.is_holiday(day)


def count_chargeable_days(start: date, end: date, calendar: HolidayCalendar) -> int:
    """Count weekdays between *start* and *end* (inclusive) that are not holidays.

    A reversed range counts 0; callers validate ordering first.
    """
    return sum(1 for day in iter_days(start, end) if is_working_day(day, calendar))
