#!/usr/bin/env python3
"""Annual vacation renewal — add the yearly allowance to every user.

Run once a year (e.g. on 1 January):
    0 6 1 1 *

Adds ``ANNUAL_VACATION_DAYS`` (default 23) to each user's balance in a
single UPDATE, then logs the resulting balances. Unused days carry over as
they are; there is no cap or proration.

Usage:
    python scripts/add_annual_vacation_days.py             # +ANNUAL_VACATION_DAYS
    python scripts/add_annual_vacation_days.py --days 25   # custom allowance
    python scripts/add_annual_vacation_days.py --dry-run   # show balances only

Requires .env at project root with DATABASE_URL and JWT_SECRET.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

# ── Path setup ────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_backend.common.logging_config import LOG_DATEFMT, LOG_FORMAT
from vacation_backend.config import settings
from vacation_backend.database import async_session_factory, engine
from vacation_backend.users.models import User

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
logger = logging.getLogger("add_annual_vacation_days")


# ══════════════════════════════════════════════════════════════════════
# Renewal
# ══════════════════════════════════════════════════════════════════════

async def add_annual_days(session: AsyncSession, days: int) -> int:
    """Add *days* to every user's balance. Returns the number of users updated."""
    result = await session.execute(
        update(User).values(
            remaining_days=User.remaining_days + days,
            updated_at=datetime.now(timezone.utc),
        )
    )
    return result.rowcount


async def log_balances(session: AsyncSession) -> None:
    result = await session.execute(
        select(User.name, User.email, User.role, User.remaining_days).order_by(User.name)
    )
    for name, email, role, remaining in result.all():
        logger.info("  %s (%s): %d day(s) — role: %s", name, email, remaining, role)


async def run(days: int, dry_run: bool) -> None:
    try:
        async with async_session_factory() as session:
            if dry_run:
                logger.info("Dry run: no balances changed. Current balances:")
            else:
                updated = await add_annual_days(session, days)
                await session.commit()
                logger.info("%d user(s) updated (+%d day(s) each)", updated, days)
                logger.info("Balances after annual renewal:")
            await log_balances(session)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Add the annual vacation allowance to every user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--days", type=int, default=settings.ANNUAL_VACATION_DAYS,
        help=f"Days to add (default: {settings.ANNUAL_VACATION_DAYS})",
    )
    parser.add_argument("--dry-run", action="store_true", help="Show balances without writing")
    args = parser.parse_args()

    if args.days <= 0:
        parser.error("--days must be positive")

    asyncio.run(run(args.days, args.dry_run))


if __name__ == "__main__":
    main()
