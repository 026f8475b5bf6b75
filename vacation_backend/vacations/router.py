"""Vacation routers — employee self-service and admin management.

``router`` is mounted at ``/api/v1/vacations`` and ``admin_router`` at
``/api/v1/admin/vacations``. All endpoints require authentication; the
admin router is gated on ``ADMIN_ROLES``.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_backend.auth.dependencies import get_current_user, is_admin, require_admin
from vacation_backend.common.clock import get_today
from vacation_backend.common.constants import VacationStatus
from vacation_backend.common.exceptions import ForbiddenException
from vacation_backend.common.pagination import PaginatedResponse, PaginationParams
from vacation_backend.common.rate_limit import limiter
from vacation_backend.config import settings
from vacation_backend.database import get_db
from vacation_backend.users.models import User
from vacation_backend.vacations.schemas import (
    AdminVacationCreate,
    AvailabilityOut,
    DecisionOut,
    DeleteOut,
    RoleVacationsOut,
    VacationCreatedOut,
    VacationEdit,
    VacationRequestCreate,
    VacationRequestOut,
    VacationWithUserOut,
)
from vacation_backend.vacations.service import VacationService

router = APIRouter(prefix="", tags=["vacations"])
admin_router = APIRouter(prefix="", tags=["admin"])


# ═════════════════════════════════════════════════════════════════════
# Employee endpoints
# ═════════════════════════════════════════════════════════════════════


# ── GET /availability ───────────────────────────────────────────────

@router.get("/availability", response_model=AvailabilityOut)
async def check_availability(
    start: date = Query(..., description="First day (inclusive)"),
    end: date = Query(..., description="Last day (inclusive)"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Preview whether a request for these dates could be approved now."""
    return await VacationService.check_availability(db, user.id, start, end)


# ── POST /requests ──────────────────────────────────────────────────

@router.post(
    "/requests",
    response_model=VacationCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.REQUEST_RATE_LIMIT)
async def create_request(
    request: Request,
    body: VacationRequestCreate,
    user: User = Depends(get_current_user),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Request vacation for the authenticated user."""
    return await VacationService.create_request(db, user.id, body, today=today)


# ── GET /mine ───────────────────────────────────────────────────────

@router.get("/mine", response_model=PaginatedResponse[VacationRequestOut])
async def my_requests(
    status: Optional[VacationStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await VacationService.list_my_requests(db, user.id, pagination, status=status)


# ── GET /role/{role} ────────────────────────────────────────────────

@router.get("/role/{role}", response_model=list[VacationWithUserOut])
async def role_requests(
    role: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Team calendar: pending and approved requests of one role."""
    if role != user.role and not is_admin(user):
        raise ForbiddenException("You can only view vacations of your own role.")
    return await VacationService.list_role_requests(db, role)


# ═════════════════════════════════════════════════════════════════════
# Admin endpoints
# ═════════════════════════════════════════════════════════════════════


# ── GET / ───────────────────────────────────────────────────────────

@admin_router.get("", response_model=list[RoleVacationsOut])
async def list_by_role(
    status: Optional[VacationStatus] = Query(None),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All requests grouped by role."""
    return await VacationService.list_grouped_by_role(db, status=status)


# ── GET /pending ────────────────────────────────────────────────────

@admin_router.get("/pending", response_model=list[VacationWithUserOut])
async def list_pending(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await VacationService.list_pending(db)


# ── POST / ──────────────────────────────────────────────────────────

@admin_router.post("", response_model=DecisionOut, status_code=status.HTTP_201_CREATED)
async def create_for_user(
    body: AdminVacationCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create an approved vacation on behalf of a user (past dates allowed)."""
    return await VacationService.create_on_behalf(db, admin.id, body)


# ── PUT /{request_id}/approve ───────────────────────────────────────

@admin_router.put("/{request_id}/approve", response_model=DecisionOut)
async def approve_request(
    request_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await VacationService.approve_request(db, request_id, admin.id)


# ── PUT /{request_id}/reject ────────────────────────────────────────

@admin_router.put("/{request_id}/reject", response_model=DecisionOut)
async def reject_request(
    request_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await VacationService.reject_request(db, request_id, admin.id)


# ── PUT /{request_id} ───────────────────────────────────────────────

@admin_router.put("/{request_id}", response_model=DecisionOut)
async def edit_request(
    request_id: uuid.UUID,
    body: VacationEdit,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change dates and/or owner; approved requests keep the balance in step."""
    return await VacationService.edit_request(db, request_id, body, admin.id)


# ── DELETE /{request_id} ────────────────────────────────────────────

@admin_router.delete("/{request_id}", response_model=DeleteOut)
async def delete_request(
    request_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await VacationService.delete_request(db, request_id, admin.id)
