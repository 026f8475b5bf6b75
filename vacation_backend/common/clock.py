"""Today's date in the office timezone, injectable as a FastAPI dependency."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from vacation_backend.config import settings


def get_today() -> date:
    """Current calendar date in ``settings.TIMEZONE``.

    Routers depend on this instead of calling it inline so tests can
    override it with ``app.dependency_overrides[get_today]``.
    """
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()
