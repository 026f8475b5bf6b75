"""Vacation Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Edit   → request bodies (write)
  - *Out              → response bodies (read)

Range ordering is not checked here; the service raises ``InvalidRangeError``
so every entry point reports it the same way.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from vacation_backend.common.constants import VacationStatus
from vacation_backend.users.schemas import UserBrief


# ═════════════════════════════════════════════════════════════════════
# Requests (write)
# ═════════════════════════════════════════════════════════════════════


class VacationRequestCreate(BaseModel):
    """Payload for an employee's own vacation request."""

    start_date: date = Field(..., description="First day of vacation (inclusive)")
    end_date: date = Field(..., description="Last day of vacation (inclusive)")


class AdminVacationCreate(VacationRequestCreate):
    """Payload for an admin creating an approved vacation for a user."""

    user_id: uuid.UUID


class VacationEdit(VacationRequestCreate):
    """Payload for an admin edit. ``user_id`` reassigns the request."""

    user_id: Optional[uuid.UUID] = None


# ═════════════════════════════════════════════════════════════════════
# Responses (read)
# ═════════════════════════════════════════════════════════════════════


class VacationRequestOut(BaseModel):
    """Full vacation request response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    role: str
    start_date: date
    end_date: date
    status: VacationStatus
    chargeable_days: int
    created_at: datetime
    updated_at: datetime
    created_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[uuid.UUID] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[uuid.UUID] = None


class VacationWithUserOut(VacationRequestOut):
    """Request with its owner embedded, for admin and team listings."""

    user: Optional[UserBrief] = None


class RoleVacationsOut(BaseModel):
    role: str
    requests: list[VacationWithUserOut]


class AvailabilityOut(BaseModel):
    """Read-only preview of whether a request could be approved now."""

    role_available: bool
    has_enough_days: bool
    requested_days: int
    remaining_days: int
    available: bool


class VacationCreatedOut(BaseModel):
    """Result of creating a request; ``message`` tells the user what happens next."""

    request: VacationRequestOut
    remaining_days: int
    message: str


class DecisionOut(BaseModel):
    """Result of approve / reject / edit: the request and its owner's balance."""

    request: VacationRequestOut
    remaining_days: int


class DeleteOut(BaseModel):
    id: uuid.UUID
    days_restored: int
    remaining_days: int
