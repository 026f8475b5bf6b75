"""In-memory holiday calendar: fixed yearly holidays merged with custom ones."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from vacation_backend.holidays.fixed import fixed_holidays_for_year


class HolidayCalendar:
    """Answers "is this date a holiday?" for one calculation.

    Build a fresh instance per calculation (see
    ``HolidayService.load_calendar``) so admin edits to custom holidays are
    picked up immediately.
    """

    def __init__(self, custom_dates: Iterable[date] = ()) -> None:
        self._custom: frozenset[date] = frozenset(custom_dates)
        self._fixed_by_year: dict[int, frozenset[date]] = {}

    def _fixed_dates(self, year: int) -> frozenset[date]:
        if year not in self._fixed_by_year:
            self._fixed_by_year[year] = frozenset(
                h.date for h in fixed_holidays_for_year(year)
            )
        return self._fixed_by_year[year]

    def is_holiday(self, day: date) -> bool:
        return day in self._custom or day in self._fixed_dates(day.year)

    def __contains__(self, day: date) -> bool:
        return self.is_holiday(day)
