"""Vacation service — request lifecycle, admin overrides and listings.

Every mutating operation runs its fallible steps first (range and
working-day validation, capacity read, conditional debit) and only then
touches the request row, so a raised error leaves nothing applied in the
session.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vacation_backend.common.audit import create_audit_entry
from vacation_backend.common.constants import VacationStatus
from vacation_backend.common.exceptions import (
    InsufficientBalanceError,
    InvalidRangeError,
    NoWorkingDaysError,
    NotFoundException,
    NotPendingError,
    PastDateError,
    RoleCapacityExceededError,
)
from vacation_backend.common.pagination import PaginatedResponse, PaginationParams, paginate
from vacation_backend.config import settings
from vacation_backend.holidays.service import HolidayService
from vacation_backend.users.models import User
from vacation_backend.vacations.availability import RoleCapacityPolicy, has_capacity
from vacation_backend.vacations.ledger import BalanceLedger
from vacation_backend.vacations.models import VacationRequest
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
from vacation_backend.vacations.working_days import count_chargeable_days

logger = logging.getLogger(__name__)


def _snapshot(req: VacationRequest) -> dict:
    """JSON-safe view of a request for the audit trail."""
    return {
        "user_id": str(req.user_id),
        "role": req.role,
        "start_date": req.start_date.isoformat(),
        "end_date": req.end_date.isoformat(),
        "status": req.status.value,
        "chargeable_days": req.chargeable_days,
    }


class VacationService:
    """Static service class for vacation requests."""

    # ═════════════════════════════════════════════════════════════════
    # Internal helpers
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalars().first()
        if user is None:
            raise NotFoundException("User", str(user_id))
        return user

    @staticmethod
    async def _get_request(db: AsyncSession, request_id: uuid.UUID) -> VacationRequest:
        result = await db.execute(
            select(VacationRequest).where(VacationRequest.id == request_id)
        )
        req = result.scalars().first()
        if req is None:
            raise NotFoundException("VacationRequest", str(request_id))
        return req

    @staticmethod
    async def count_days(db: AsyncSession, start: date, end: date) -> int:
        """Chargeable days in ``[start, end]`` against the current calendar."""
        calendar = await HolidayService.load_calendar(db, start, end)
        return count_chargeable_days(start, end, calendar)

    @staticmethod
    async def _require_working_days(db: AsyncSession, start: date, end: date) -> int:
        days = await VacationService.count_days(db, start, end)
        if days == 0:
            raise NoWorkingDaysError(start, end)
        return days

    @staticmethod
    async def _ensure_capacity(
        db: AsyncSession,
        role: str,
        start: date,
        end: date,
        *,
        excluding_user_id: Optional[uuid.UUID] = None,
        excluding_request_id: Optional[uuid.UUID] = None,
    ) -> None:
        policy = RoleCapacityPolicy.from_settings()
        ok = await has_capacity(
            db,
            role,
            start,
            end,
            excluding_user_id=excluding_user_id,
            excluding_request_id=excluding_request_id,
            policy=policy,
        )
        if not ok:
            raise RoleCapacityExceededError(role, policy.capacity_for(role))

    # ═════════════════════════════════════════════════════════════════
    # Preview
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def check_availability(
        db: AsyncSession,
        user_id: uuid.UUID,
        start: date,
        end: date,
    ) -> AvailabilityOut:
        """Would a request for ``[start, end]`` be approvable right now? Writes nothing."""
        if start > end:
            raise InvalidRangeError(start, end)

        user = await VacationService._get_user(db, user_id)
        requested = await VacationService.count_days(db, start, end)
        role_available = await has_capacity(db, user.role, start, end)
        has_enough_days = user.remaining_days >= requested

        return AvailabilityOut(
            role_available=role_available,
            has_enough_days=has_enough_days,
            requested_days=requested,
            remaining_days=user.remaining_days,
            available=role_available and has_enough_days,
        )

    # ═════════════════════════════════════════════════════════════════
    # Creation
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def create_request(
        db: AsyncSession,
        user_id: uuid.UUID,
        data: VacationRequestCreate,
        *,
        today: date,
        auto_approve: Optional[bool] = None,
    ) -> VacationCreatedOut:
        """Employee request for their own vacation.

        Created ``pending``. With auto-approval enabled the request is
        approved and debited immediately when the role has room and the
        balance covers it; otherwise it waits for an admin.
        """
        start, end = data.start_date, data.end_date
        if start > end:
            raise InvalidRangeError(start, end)
        if start < today:
            raise PastDateError(start, today)

        days = await VacationService._require_working_days(db, start, end)
        user = await VacationService._get_user(db, user_id)

        if auto_approve is None:
            auto_approve = settings.AUTO_APPROVE_REQUESTS

        now = datetime.now(timezone.utc)
        status = VacationStatus.pending
        balance = user.remaining_days
        if auto_approve and await has_capacity(db, user.role, start, end):
            try:
                balance = await BalanceLedger.debit(db, user.id, days)
                status = VacationStatus.approved
            except InsufficientBalanceError:
                logger.info(
                    "User %s lacks days for auto-approval (%d requested)", user.id, days,
                )

        req = VacationRequest(
            user_id=user.id,
            role=user.role,
            start_date=start,
            end_date=end,
            status=status,
            chargeable_days=days,
            created_by=user.id,
            created_at=now,
            updated_at=now,
        )
        if status == VacationStatus.approved:
            req.approved_at = now
        db.add(req)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="vacation_request",
            entity_id=req.id,
            actor_id=user.id,
            new_values=_snapshot(req),
        )
        logger.info(
            "Vacation request %s created for user %s (%s, %d day(s))",
            req.id, user.id, status.value, days,
        )

        if status == VacationStatus.approved:
            message = "Vacation request approved."
        else:
            message = "Vacation request submitted; it will be reviewed by an administrator."
        return VacationCreatedOut(
            request=VacationRequestOut.model_validate(req),
            remaining_days=balance,
            message=message,
        )

    @staticmethod
    async def create_on_behalf(
        db: AsyncSession,
        admin_id: uuid.UUID,
        data: AdminVacationCreate,
    ) -> DecisionOut:
        """Admin creates an already-approved vacation for a user.

        Past dates are allowed. Capacity and balance are enforced exactly as
        on approval.
        """
        start, end = data.start_date, data.end_date
        if start > end:
            raise InvalidRangeError(start, end)

        days = await VacationService._require_working_days(db, start, end)
        user = await VacationService._get_user(db, data.user_id)
        await VacationService._ensure_capacity(db, user.role, start, end)
        balance = await BalanceLedger.debit(db, user.id, days)

        now = datetime.now(timezone.utc)
        req = VacationRequest(
            user_id=user.id,
            role=user.role,
            start_date=start,
            end_date=end,
            status=VacationStatus.approved,
            chargeable_days=days,
            created_by=admin_id,
            created_at=now,
            updated_at=now,
            approved_at=now,
            approved_by=admin_id,
        )
        db.add(req)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="vacation_request",
            entity_id=req.id,
            actor_id=admin_id,
            new_values=_snapshot(req),
        )
        logger.info(
            "Vacation request %s created by admin %s for user %s (%d day(s))",
            req.id, admin_id, user.id, days,
        )
        return DecisionOut(
            request=VacationRequestOut.model_validate(req),
            remaining_days=balance,
        )

    # ═════════════════════════════════════════════════════════════════
    # Approve / Reject
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def approve_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        admin_id: uuid.UUID,
    ) -> DecisionOut:
        """pending → approved. Debits the owner's balance once."""
        req = await VacationService._get_request(db, request_id)
        if req.status != VacationStatus.pending:
            raise NotPendingError(req.status.value)

        await VacationService._ensure_capacity(db, req.role, req.start_date, req.end_date)
        balance = await BalanceLedger.debit(db, req.user_id, req.chargeable_days)

        now = datetime.now(timezone.utc)
        req.status = VacationStatus.approved
        req.approved_at = now
        req.approved_by = admin_id
        req.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="approve",
            entity_type="vacation_request",
            entity_id=req.id,
            actor_id=admin_id,
            old_values={"status": VacationStatus.pending.value},
            new_values={"status": req.status.value, "remaining_days": balance},
        )
        logger.info("Vacation request %s approved by %s", req.id, admin_id)
        return DecisionOut(
            request=VacationRequestOut.model_validate(req),
            remaining_days=balance,
        )

    @staticmethod
    async def reject_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        admin_id: uuid.UUID,
    ) -> DecisionOut:
        """pending → rejected. No balance effect."""
        req = await VacationService._get_request(db, request_id)
        if req.status != VacationStatus.pending:
            raise NotPendingError(req.status.value)

        now = datetime.now(timezone.utc)
        req.status = VacationStatus.rejected
        req.rejected_at = now
        req.rejected_by = admin_id
        req.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="reject",
            entity_type="vacation_request",
            entity_id=req.id,
            actor_id=admin_id,
            old_values={"status": VacationStatus.pending.value},
            new_values={"status": req.status.value},
        )
        logger.info("Vacation request %s rejected by %s", req.id, admin_id)
        return DecisionOut(
            request=VacationRequestOut.model_validate(req),
            remaining_days=await BalanceLedger.get_balance(db, req.user_id),
        )

    # ═════════════════════════════════════════════════════════════════
    # Admin edit / delete
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def edit_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        data: VacationEdit,
        admin_id: uuid.UUID,
    ) -> DecisionOut:
        """Change dates and/or owner of a request in any state.

        For approved requests the balance follows the change: a date edit
        moves ``old - new`` days, a reassignment debits the new owner in full
        before crediting the old one. Returns the (new) owner's balance.
        """
        start, end = data.start_date, data.end_date
        if start > end:
            raise InvalidRangeError(start, end)

        req = await VacationService._get_request(db, request_id)
        old_user_id = req.user_id
        reassigned = data.user_id is not None and data.user_id != old_user_id
        new_user_id = data.user_id if reassigned else old_user_id

        role = req.role
        if reassigned:
            role = (await VacationService._get_user(db, new_user_id)).role

        days = await VacationService._require_working_days(db, start, end)

        if req.status == VacationStatus.approved:
            if reassigned:
                await VacationService._ensure_capacity(
                    db, role, start, end, excluding_request_id=req.id,
                )
                balance = await BalanceLedger.debit(db, new_user_id, days)
                await BalanceLedger.credit(db, old_user_id, req.chargeable_days)
            else:
                await VacationService._ensure_capacity(
                    db, role, start, end, excluding_user_id=old_user_id,
                )
                delta = req.chargeable_days - days
                if delta < 0:
                    balance = await BalanceLedger.debit(db, old_user_id, -delta)
                elif delta > 0:
                    balance = await BalanceLedger.credit(db, old_user_id, delta)
                else:
                    balance = await BalanceLedger.get_balance(db, old_user_id)
        else:
            balance = await BalanceLedger.get_balance(db, new_user_id)

        old_values = _snapshot(req)
        req.user_id = new_user_id
        req.role = role
        req.start_date = start
        req.end_date = end
        req.chargeable_days = days
        req.updated_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="edit",
            entity_type="vacation_request",
            entity_id=req.id,
            actor_id=admin_id,
            old_values=old_values,
            new_values=_snapshot(req),
        )
        logger.info(
            "Vacation request %s edited by %s: %s..%s, %d day(s)%s",
            req.id, admin_id, start, end, days,
            f", reassigned {old_user_id} -> {new_user_id}" if reassigned else "",
        )
        return DecisionOut(
            request=VacationRequestOut.model_validate(req),
            remaining_days=balance,
        )

    @staticmethod
    async def delete_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        admin_id: uuid.UUID,
    ) -> DeleteOut:
        """Remove a request in any state, restoring its days if it was approved."""
        req = await VacationService._get_request(db, request_id)

        restored = 0
        if req.status == VacationStatus.approved:
            restored = req.chargeable_days
            balance = await BalanceLedger.credit(db, req.user_id, restored)
        else:
            balance = await BalanceLedger.get_balance(db, req.user_id)

        await create_audit_entry(
            db,
            action="delete",
            entity_type="vacation_request",
            entity_id=req.id,
            actor_id=admin_id,
            old_values=_snapshot(req),
            new_values={"days_restored": restored},
        )
        await db.delete(req)
        await db.flush()

        logger.info(
            "Vacation request %s deleted by %s, %d day(s) restored",
            request_id, admin_id, restored,
        )
        return DeleteOut(id=request_id, days_restored=restored, remaining_days=balance)

    # ═════════════════════════════════════════════════════════════════
    # Listings
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def list_my_requests(
        db: AsyncSession,
        user_id: uuid.UUID,
        params: PaginationParams,
        *,
        status: Optional[VacationStatus] = None,
    ) -> PaginatedResponse:
        query = (
            select(VacationRequest)
            .where(VacationRequest.user_id == user_id)
            .order_by(VacationRequest.start_date.desc(), VacationRequest.created_at.desc())
        )
        if status is not None:
            query = query.where(VacationRequest.status == status)
        return await paginate(db, query, params, transform=VacationRequestOut.model_validate)

    @staticmethod
    async def list_pending(db: AsyncSession) -> list[VacationWithUserOut]:
        """Pending requests, oldest first."""
        result = await db.execute(
            select(VacationRequest)
            .where(VacationRequest.status == VacationStatus.pending)
            .options(selectinload(VacationRequest.user))
            .order_by(VacationRequest.created_at)
        )
        return [VacationWithUserOut.model_validate(r) for r in result.scalars().all()]

    @staticmethod
    async def list_grouped_by_role(
        db: AsyncSession,
        *,
        status: Optional[VacationStatus] = None,
    ) -> list[RoleVacationsOut]:
        """All requests bucketed by role, roles alphabetical, dates ascending."""
        query = (
            select(VacationRequest)
            .options(selectinload(VacationRequest.user))
            .order_by(VacationRequest.role, VacationRequest.start_date)
        )
        if status is not None:
            query = query.where(VacationRequest.status == status)
        result = await db.execute(query)

        groups: dict[str, list[VacationWithUserOut]] = defaultdict(list)
        for req in result.scalars().all():
            groups[req.role].append(VacationWithUserOut.model_validate(req))
        return [RoleVacationsOut(role=role, requests=reqs) for role, reqs in groups.items()]

    @staticmethod
    async def list_role_requests(
        db: AsyncSession,
        role: str,
    ) -> list[VacationWithUserOut]:
        """Pending and approved requests of one role, for the team calendar."""
        result = await db.execute(
            select(VacationRequest)
            .where(
                VacationRequest.role == role,
                VacationRequest.status != VacationStatus.rejected,
            )
            .options(selectinload(VacationRequest.user))
            .order_by(VacationRequest.start_date)
        )
        return [VacationWithUserOut.model_validate(r) for r in result.scalars().all()]
