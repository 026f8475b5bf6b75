"""Holiday Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vacation_backend.common.constants import HolidaySource


class HolidayCreate(BaseModel):
    """Payload for creating or replacing a custom holiday."""

    date: date_type
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank.")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class HolidayUpdate(HolidayCreate):
    """PUT payload — same fields as create, all required but description."""


class HolidayOut(BaseModel):
    """A holiday from either source. Fixed holidays have no id."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[uuid.UUID] = None
    date: date_type
    name: str
    description: Optional[str] = None
    source: HolidaySource = HolidaySource.custom
