"""User Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserBrief(BaseModel):
    """Minimal user info embedded in vacation responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: str


class UserOut(UserBrief):
    """Current user profile with vacation balance."""

    remaining_days: int
    is_admin: bool = False
    updated_at: datetime
