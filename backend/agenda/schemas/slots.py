# backend/agenda/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class AvailabilitySlotRead(BaseModel):
    """A single bookable start time."""
    day_key: str = Field(description="Local calendar day, YYYY-MM-DD")
    start: datetime
    end: datetime
    label: str  # "HH:MM" in store timezone

    model_config = {"from_attributes": True}


class AvailabilityDayRead(BaseModel):
    """Status of a single day in the horizon."""
    key: str
    date: datetime = Field(description="Local midnight of the day, as an instant")
    weekday: str
    day_number: str
    full_label: str
    has_slots: bool

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    """Availability for one store/service/team member."""
    store_id: int
    service_id: int
    team_member_id: int
    horizon_days: int

    slots_by_day: dict[str, list[AvailabilitySlotRead]]
    days: list[AvailabilityDayRead]
    has_any_slot: bool
    error: str | None = None

    model_config = {"from_attributes": True}


class InvalidateResponse(BaseModel):
    store_id: int
    deleted_keys: int
