# backend/booking_engine/services/scheduling/records.py
"""
Plain value records handed to the pure scheduling components.

Data-access functions (store.py) build these from ORM rows so the
computations never touch a session or trigger lazy loading.
"""

from dataclasses import dataclass, field
from datetime import datetime

from .blocked import BlockedDate
from .availability import WeeklyAvailabilityRule
from .cancellation import CancellationPolicy
from .config import BookingConfig
from .status import BookingStatus
from .windows import TimeWindow


@dataclass(frozen=True)
class BusinessSchedule:
    """Everything the slot generator needs to know about a business."""
    business_id: int
    timezone: str
    config: BookingConfig
    policy: CancellationPolicy
    rules: list[WeeklyAvailabilityRule] = field(default_factory=list)
    blocked_dates: list[BlockedDate] = field(default_factory=list)


@dataclass(frozen=True)
class ServiceRecord:
    service_id: int
    business_id: int
    duration_minutes: int
    name: str = ""


@dataclass(frozen=True)
class BookingRecord:
    booking_id: int
    business_id: int
    service_id: int
    customer_id: int
    window: TimeWindow
    status: BookingStatus
    payment_amount: float | None = None
    created_at: datetime | None = None
