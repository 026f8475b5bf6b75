"""Holidays router — calendar listing for everyone, custom-holiday CRUD for admins."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_backend.auth.dependencies import get_current_user, require_admin
from vacation_backend.database import get_db
from vacation_backend.holidays.schemas import HolidayCreate, HolidayOut, HolidayUpdate
from vacation_backend.holidays.service import HolidayService
from vacation_backend.users.models import User

router = APIRouter(prefix="", tags=["holidays"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[HolidayOut])
async def list_holidays(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List fixed and custom holidays, optionally for a single year."""
    return await HolidayService.list_holidays(db, year=year)


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=HolidayOut, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    body: HolidayCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.create_holiday(db, body, actor_id=admin.id)


# ── PUT /{holiday_id} ───────────────────────────────────────────────

@router.put("/{holiday_id}", response_model=HolidayOut)
async def update_holiday(
    holiday_id: uuid.UUID,
    body: HolidayUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Replace a custom holiday. Fixed holidays cannot be edited."""
    return await HolidayService.update_holiday(db, holiday_id, body, actor_id=admin.id)


# ── DELETE /{holiday_id} ────────────────────────────────────────────

@router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday(
    holiday_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await HolidayService.delete_holiday(db, holiday_id, actor_id=admin.id)
