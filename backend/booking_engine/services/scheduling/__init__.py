# backend/booking_engine/services/scheduling/__init__.py
"""
Booking lifecycle & scheduling engine.

Pure components (no I/O):
  windows       TimeWindow
  availability  weekly rules → working windows for a date
  blocked       blocked dates subtracted from working windows
  slots         candidate slots with availability tags
  cancellation  cancellation policy evaluator

Stateful:
  sweeper       elapsed active bookings → completed
  engine        entry points used by the routers
"""

from .config import BookingConfig, get_booking_config
from .windows import TimeWindow
from .availability import WeeklyAvailabilityRule, resolve_working_windows
from .blocked import BlockedDate, apply_blocked_dates
from .slots import Slot, SlotStatus, generate_slots
from .cancellation import (
    CancellationCheck,
    CancellationPolicy,
    PolicyKind,
    can_cancel,
    can_reschedule,
    get_policy_description,
)
from .status import BookingStatus
from .exceptions import (
    BookingNotCancellableError,
    InvalidTransitionError,
    NotFoundError,
    SchedulingError,
)

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "TimeWindow",
    "WeeklyAvailabilityRule",
    "resolve_working_windows",
    "BlockedDate",
    "apply_blocked_dates",
    "Slot",
    "SlotStatus",
    "generate_slots",
    "CancellationCheck",
    "CancellationPolicy",
    "PolicyKind",
    "can_cancel",
    "can_reschedule",
    "get_policy_description",
    "BookingStatus",
    "BookingNotCancellableError",
    "InvalidTransitionError",
    "NotFoundError",
    "SchedulingError",
]
