"""Enums and constants for the vacation service."""

from __future__ import annotations

import enum


# ── Vacation requests ───────────────────────────────────────────────

class VacationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# ── Holidays ────────────────────────────────────────────────────────

class HolidaySource(str, enum.Enum):
    fixed = "fixed"
    custom = "custom"


# ── Calendar ────────────────────────────────────────────────────────

WEEKEND_DAYS = frozenset({5, 6})  # Saturday, Sunday (date.weekday())

# ── Misc constants ──────────────────────────────────────────────────

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
