"""Balance ledger — the only code path that changes ``User.remaining_days``."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_backend.common.exceptions import InsufficientBalanceError, NotFoundException
from vacation_backend.users.models import User

logger = logging.getLogger(__name__)


class BalanceLedger:
    """Debit and credit vacation days in the caller's transaction."""

    @staticmethod
    async def get_balance(db: AsyncSession, user_id: uuid.UUID) -> int:
        result = await db.execute(select(User.remaining_days).where(User.id == user_id))
        balance = result.scalar_one_or_none()
        if balance is None:
            raise NotFoundException("User", str(user_id))
        return balance

    @staticmethod
    async def debit(db: AsyncSession, user_id: uuid.UUID, days: int) -> int:
        """Subtract *days* from the balance; returns the new balance.

        A single conditional UPDATE, so concurrent debits can never take the
        balance below zero. Raises ``InsufficientBalanceError`` (nothing
        changed) when the user has fewer than *days* left.
        """
        result = await db.execute(
            update(User)
            .where(User.id == user_id, User.remaining_days >= days)
            .values(
                remaining_days=User.remaining_days - days,
                updated_at=datetime.now(timezone.utc),
            )
        )
        if result.rowcount == 0:
            available = await BalanceLedger.get_balance(db, user_id)
            raise InsufficientBalanceError(available=available, requested=days)

        balance = await BalanceLedger.get_balance(db, user_id)
        logger.info("Debited %d day(s) from user %s, balance now %d", days, user_id, balance)
        return balance

    @staticmethod
    async def credit(db: AsyncSession, user_id: uuid.UUID, days: int) -> int:
        """Add *days* back to the balance; returns the new balance."""
        result = await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                remaining_days=User.remaining_days + days,
                updated_at=datetime.now(timezone.utc),
            )
        )
        if result.rowcount == 0:
            raise NotFoundException("User", str(user_id))

        balance = await BalanceLedger.get_balance(db, user_id)
        logger.info("Credited %d day(s) to user %s, balance now %d", days, user_id, balance)
        return balance
