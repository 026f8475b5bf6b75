"""Official holidays baked into the service, per calendar year.

Spain / Andalucía. These days never count as vacation days. Years that are
not listed simply have no fixed holidays; admins add ad-hoc ones through
the holidays API.
"""

from __future__ import annotations

from datetime import date
from typing import NamedTuple, Optional


class FixedHoliday(NamedTuple):
    date: date
    name: str
    description: Optional[str] = None


FIXED_HOLIDAYS: dict[int, tuple[FixedHoliday, ...]] = {
    2025: (
        FixedHoliday(date(2025, 1, 1), "Año Nuevo", "Año Nuevo"),
        FixedHoliday(date(2025, 1, 6), "Epifanía del Señor", "Día de Reyes"),
        FixedHoliday(
            date(2025, 2, 28), "Día de Andalucía",
            "Día de la Comunidad Autónoma de Andalucía",
        ),
        FixedHoliday(date(2025, 4, 17), "Jueves Santo", "Semana Santa"),
        FixedHoliday(date(2025, 4, 18), "Viernes Santo", "Semana Santa"),
        FixedHoliday(
            date(2025, 5, 1), "Fiesta del Trabajo",
            "Día Internacional de los Trabajadores",
        ),
        FixedHoliday(
            date(2025, 8, 15), "Asunción de la Virgen",
            "Festividad de la Asunción de la Virgen",
        ),
        FixedHoliday(date(2025, 10, 12), "Fiesta Nacional de España", "Día de la Hispanidad"),
        FixedHoliday(date(2025, 11, 1), "Todos los Santos", "Día de Todos los Santos"),
        FixedHoliday(
            date(2025, 12, 6), "Día de la Constitución",
            "Día de la Constitución Española",
        ),
        FixedHoliday(date(2025, 12, 8), "Inmaculada Concepción", "La Inmaculada Concepción"),
        FixedHoliday(
            date(2025, 12, 9), "Inmaculada Concepción (trasladada)",
            "Festivo trasladado por caer en domingo",
        ),
        FixedHoliday(date(2025, 12, 25), "Navidad", "Natividad del Señor"),
    ),
}


def fixed_holidays_for_year(year: int) -> tuple[FixedHoliday, ...]:
    return FIXED_HOLIDAYS.get(year, ())


def fixed_holiday_on(day: date) -> Optional[FixedHoliday]:
    """Return the fixed holiday falling on *day*, if any."""
    for holiday in fixed_holidays_for_year(day.year):
        if holiday.date == day:
            return holiday
    return None
