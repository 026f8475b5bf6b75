"""Auth dependencies — JWT validation and the admin capability gate.

Tokens are issued by the external identity layer; this service only
verifies them and resolves the principal to a ``User`` row.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_backend.common.exceptions import ForbiddenException
from vacation_backend.config import settings
from vacation_backend.database import get_db
from vacation_backend.users.models import User


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


def _decode_subject(token: str) -> uuid.UUID:
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type.")

    subject: Optional[str] = payload.get("sub")
    try:
        return uuid.UUID(subject)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token subject.")


def is_admin(user: User) -> bool:
    return user.role in settings.ADMIN_ROLES


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Validate JWT and return the authenticated User."""
    user_id = _decode_subject(_extract_bearer(request))

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()
    if user is None:
        raise HTTPException(status_code=401, detail="User account not found.")
    return user


# ── Admin gate ──────────────────────────────────────────────────────

async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only roles listed in ``settings.ADMIN_ROLES``."""
    if not is_admin(user):
        raise ForbiddenException(
            detail=f"Role '{user.role}' is not permitted. Required: {settings.ADMIN_ROLES}.",
        )
    return user
