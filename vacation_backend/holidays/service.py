"""Holiday service — calendar loading and custom-holiday CRUD."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_backend.common.audit import create_audit_entry
from vacation_backend.common.constants import HolidaySource
from vacation_backend.common.exceptions import DuplicateHolidayError, NotFoundException
from vacation_backend.holidays.calendar import HolidayCalendar
from vacation_backend.holidays.fixed import (
    FIXED_HOLIDAYS,
    fixed_holiday_on,
    fixed_holidays_for_year,
)
from vacation_backend.holidays.models import Holiday
from vacation_backend.holidays.schemas import HolidayCreate, HolidayOut, HolidayUpdate

logger = logging.getLogger(__name__)


class HolidayService:
    """Static service class for holidays."""

    # ── Calendar ────────────────────────────────────────────────────

    @staticmethod
    async def load_calendar(
        db: AsyncSession,
        start: date,
        end: date,
    ) -> HolidayCalendar:
        """Build a calendar with the custom holidays between *start* and *end*."""
        result = await db.execute(
            select(Holiday.date).where(Holiday.date >= start, Holiday.date <= end)
        )
        return HolidayCalendar(row[0] for row in result.all())

    # ── Queries ─────────────────────────────────────────────────────

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        year: Optional[int] = None,
    ) -> list[HolidayOut]:
        """Fixed and custom holidays, sorted by date."""
        query = select(Holiday).order_by(Holiday.date)
        if year is not None:
            query = query.where(
                Holiday.date >= date(year, 1, 1),
                Holiday.date <= date(year, 12, 31),
            )
        result = await db.execute(query)
        custom = [HolidayOut.model_validate(h) for h in result.scalars().all()]

        years = [year] if year is not None else sorted(
            {h.date.year for h in custom} | set(FIXED_HOLIDAYS)
        )
        fixed = [
            HolidayOut(
                date=h.date,
                name=h.name,
                description=h.description,
                source=HolidaySource.fixed,
            )
            for y in years
            for h in fixed_holidays_for_year(y)
        ]
        return sorted(fixed + custom, key=lambda h: h.date)

    @staticmethod
    async def _get_holiday(db: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
        result = await db.execute(select(Holiday).where(Holiday.id == holiday_id))
        holiday = result.scalars().first()
        if holiday is None:
            raise NotFoundException("Holiday", str(holiday_id))
        return holiday

    @staticmethod
    async def _ensure_date_free(
        db: AsyncSession,
        day: date,
        *,
        ignore_id: Optional[uuid.UUID] = None,
    ) -> None:
        if fixed_holiday_on(day) is not None:
            raise DuplicateHolidayError(day)

        query = select(Holiday.id).where(Holiday.date == day)
        if ignore_id is not None:
            query = query.where(Holiday.id != ignore_id)
        if (await db.execute(query)).first() is not None:
            raise DuplicateHolidayError(day)

    # ── Mutations ───────────────────────────────────────────────────

    @staticmethod
    async def create_holiday(
        db: AsyncSession,
        data: HolidayCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> HolidayOut:
        await HolidayService._ensure_date_free(db, data.date)

        holiday = Holiday(
            date=data.date,
            name=data.name,
            description=data.description,
            created_by=actor_id,
        )
        db.add(holiday)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            new_values={"date": data.date.isoformat(), "name": data.name},
        )
        logger.info("Holiday %s created on %s", holiday.id, holiday.date)
        return HolidayOut.model_validate(holiday)

    @staticmethod
    async def update_holiday(
        db: AsyncSession,
        holiday_id: uuid.UUID,
        data: HolidayUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> HolidayOut:
        holiday = await HolidayService._get_holiday(db, holiday_id)
        await HolidayService._ensure_date_free(db, data.date, ignore_id=holiday.id)

        old_values = {"date": holiday.date.isoformat(), "name": holiday.name}
        holiday.date = data.date
        holiday.name = data.name
        holiday.description = data.description
        holiday.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values={"date": data.date.isoformat(), "name": data.name},
        )
        logger.info("Holiday %s moved to %s", holiday.id, holiday.date)
        return HolidayOut.model_validate(holiday)

    @staticmethod
    async def delete_holiday(
        db: AsyncSession,
        holiday_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        holiday = await HolidayService._get_holiday(db, holiday_id)

        await create_audit_entry(
            db,
            action="delete",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            old_values={"date": holiday.date.isoformat(), "name": holiday.name},
        )
        await db.delete(holiday)
        await db.flush()
        logger.info("Holiday %s deleted", holiday_id)
