# backend/booking_engine/services/scheduling/status.py
"""
Booking status state machine.

    pending ──► confirmed ──► completed   (sweeper only)
       │            ├──────► cancelled   (policy permitting)
       │            └──────► no_show     (manual, after the booking ended)
       ├──────────────────► cancelled
       └──────────────────► completed   (sweeper, only if configured)

Terminal statuses never transition again.
"""

from enum import Enum

from .exceptions import InvalidTransitionError


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


TERMINAL_STATUSES = frozenset({
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
})

# Statuses whose booking still occupies its time window
BLOCKING_STATUSES = frozenset(set(BookingStatus) - {BookingStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    # pending → completed only by the sweeper when it is configured to include pending
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
        BookingStatus.NO_SHOW,
    }),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}


def is_terminal(status: BookingStatus | str) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def can_transition(current: BookingStatus | str, target: BookingStatus | str) -> bool:
    return BookingStatus(target) in ALLOWED_TRANSITIONS[BookingStatus(current)]


def ensure_transition(current: BookingStatus | str, target: BookingStatus | str) -> None:
    """Raise InvalidTransitionError unless current → target is allowed."""
    if not can_transition(current, target):
        allowed = sorted(s.value for s in ALLOWED_TRANSITIONS[BookingStatus(current)])
        raise InvalidTransitionError(
            f"Cannot move booking from '{BookingStatus(current).value}' "
            f"to '{BookingStatus(target).value}'. Allowed: {allowed or 'none'}"
        )
