# backend/booking_engine/schemas/bookings.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel


class CancellationCheckRead(BaseModel):
    can_cancel: bool
    reason: Optional[str] = None
    hours_until_booking: float
    policy: str
    required_hours: int
    policy_description: str
    can_reschedule: bool

    model_config = {"from_attributes": True}


class BookingCancel(BaseModel):
    cancelled_by: Literal["customer", "business"]
    reason: Optional[str] = None


class BookingStatusRead(BaseModel):
    id: int
    business_id: int
    service_id: int
    customer_id: int

    start_time: datetime
    end_time: datetime

    status: str
    payment_amount: Optional[float] = None


class SweepRead(BaseModel):
    success: bool = True
    message: str
    count: int
    booking_ids: list[int] = []
