# backend/booking_engine/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field


class SlotInfo(BaseModel):
    """Information about a single slot."""
    time: str = Field(description="Local start time in the business timezone, HH:MM")
    start: datetime
    end: datetime
    available: bool
    status: str = Field(description="available / past / booked / too_soon / too_far")

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Response with all candidate slots of a service for a day."""
    business_id: int
    service_id: int
    date: date
    timezone: str
    slots: list[SlotInfo]
    total_slots: int
    available_slots: int

    model_config = {"from_attributes": True}


class SlotsInvalidateResponse(BaseModel):
    business_id: int
    deleted_keys: int
    dates: list[date] | str
