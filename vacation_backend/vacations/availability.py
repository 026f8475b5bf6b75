"""Role availability — per-role caps on concurrently approved vacations."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_backend.common.constants import VacationStatus
from vacation_backend.config import settings
from vacation_backend.vacations.models import VacationRequest


@dataclass(frozen=True)
class RoleCapacityPolicy:
    """How many people of each role may be on approved vacation at once.

    Role names are matched case-insensitively. Uncapped roles are never
    blocked; listed roles use their own limit; anything else gets
    ``default_capacity``.
    """

    uncapped_roles: frozenset[str] = frozenset()
    capacities: dict[str, int] = field(default_factory=dict)
    default_capacity: int = 2

    @classmethod
    def from_settings(cls) -> "RoleCapacityPolicy":
        return cls(
            uncapped_roles=frozenset(r.lower() for r in settings.UNCAPPED_ROLES),
            capacities={k.lower(): v for k, v in settings.ROLE_CAPACITIES.items()},
            default_capacity=settings.DEFAULT_ROLE_CAPACITY,
        )

    def is_uncapped(self, role: str) -> bool:
        return role.lower() in self.uncapped_roles

    def capacity_for(self, role: str) -> int:
        return self.capacities.get(role.lower(), self.default_capacity)


async def count_overlapping_approved(
    db: AsyncSession,
    role: str,
    start: date,
    end: date,
    *,
    excluding_user_id: Optional[uuid.UUID] = None,
    excluding_request_id: Optional[uuid.UUID] = None,
) -> int:
    """Approved requests of exactly *role* whose range overlaps ``[start, end]``."""
    query = select(func.count(VacationRequest.id)).where(
        VacationRequest.role == role,
        VacationRequest.status == VacationStatus.approved,
        VacationRequest.start_date <= end,
        VacationRequest.end_date >= start,
    )
    if excluding_user_id is not None:
        query = query.where(VacationRequest.user_id != excluding_user_id)
    if excluding_request_id is not None:
        query = query.where(VacationRequest.id != excluding_request_id)
    return (await db.execute(query)).scalar_one()


async def has_capacity(
    db: AsyncSession,
    role: str,
    start: date,
    end: date,
    *,
    excluding_user_id: Optional[uuid.UUID] = None,
    excluding_request_id: Optional[uuid.UUID] = None,
    policy: Optional[RoleCapacityPolicy] = None,
) -> bool:
    """True if one more approved request of *role* fits in ``[start, end]``.

    Pending and rejected requests never count. Exclusions are used by edits
    so a request does not block itself.
    """
    policy = policy or RoleCapacityPolicy.from_settings()
    if policy.is_uncapped(role):
        return True

    taken = await count_overlapping_approved(
        db,
        role,
        start,
        end,
        excluding_user_id=excluding_user_id,
        excluding_request_id=excluding_request_id,
    )
    return taken < policy.capacity_for(role)
