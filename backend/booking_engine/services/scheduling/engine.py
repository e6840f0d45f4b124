# backend/booking_engine/services/scheduling/engine.py
"""
Entry points used by the HTTP layer.

Each function loads plain records through store.py, hands them to the pure
components and, for the few mutating operations, writes the result back.
`now` is injectable everywhere; it defaults to the current UTC time.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from redis import Redis
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.generated import Bookings, Customers
from ..events import emit_event
from .availability import resolve_working_windows
from .blocked import apply_blocked_dates
from .cache import WorkingWindowsRedisStore
from .cancellation import can_cancel, can_reschedule, get_policy_description
from .exceptions import BookingNotCancellableError, InvalidTransitionError
from .records import BookingRecord, BusinessSchedule
from .slots import Slot, generate_slots
from .status import BookingStatus, ensure_transition
from .store import (
    get_booking_row,
    get_business_row,
    load_business_schedule,
    load_busy_windows,
    load_service,
    policy_for,
    to_booking_record,
    to_db_time,
    utc_now,
)
from .sweeper import SweepResult, sweep
from .windows import TimeWindow

logger = logging.getLogger(__name__)

CANCELLED_BY = ("customer", "business")


# ── Slots ────────────────────────────────────────────────────────────────


def working_windows_for(
    schedule: BusinessSchedule,
    target_date: date,
    redis: Redis | None = None,
) -> list[TimeWindow]:
    """Resolved windows minus blocked dates, served from Redis when available."""
    store = WorkingWindowsRedisStore(redis) if redis is not None else None

    if store is not None:
        cached = store.get_windows(schedule.business_id, target_date)
        if cached is not None:
            return cached

    windows = resolve_working_windows(schedule.rules, target_date, schedule.timezone)
    windows = apply_blocked_dates(windows, schedule.blocked_dates, target_date, schedule.timezone)

    if store is not None:
        store.store_windows(schedule.business_id, target_date, windows)
    return windows


def list_slots(
    db: Session,
    business_id: int,
    service_id: int,
    target_date: date,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> list[Slot]:
    """
    All candidate slots of a service on target_date, tagged with availability.

    Raises:
        NotFoundError: unknown business or service (or service of another business)
    """
    now = now or utc_now()
    schedule = load_business_schedule(db, business_id, target_date)
    service = load_service(db, service_id, business_id)

    windows = working_windows_for(schedule, target_date, redis)
    if not windows:
        return []

    busy = load_busy_windows(db, business_id, windows[0].start, windows[-1].end)

    return generate_slots(
        working_windows=windows,
        duration_minutes=service.duration_minutes,
        busy_windows=busy,
        now=now,
        tz=schedule.timezone,
        config=schedule.config,
    )


# ── Cancellation ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CancellationStatus:
    can_cancel: bool
    reason: str | None
    hours_until_booking: float
    policy: str
    required_hours: int
    policy_description: str
    can_reschedule: bool


def check_cancellation(
    db: Session,
    booking_id: int,
    now: datetime | None = None,
) -> CancellationStatus:
    """
    Raises:
        NotFoundError: booking does not exist
    """
    now = now or utc_now()
    row = get_booking_row(db, booking_id)
    booking = to_booking_record(row)
    policy = policy_for(get_business_row(db, booking.business_id))

    check = can_cancel(booking, policy, now)
    return CancellationStatus(
        can_cancel=check.can_cancel,
        reason=check.reason,
        hours_until_booking=check.hours_until_booking,
        policy=policy.policy_kind.value,
        required_hours=policy.required_hours,
        policy_description=get_policy_description(policy),
        can_reschedule=can_reschedule(booking, policy, now).can_cancel,
    )


def cancel_booking(
    db: Session,
    booking_id: int,
    cancelled_by: str,
    reason: str | None = None,
    now: datetime | None = None,
) -> BookingRecord:
    """
    Cancel a booking if its business policy still allows it.

    Raises:
        NotFoundError: booking does not exist
        ValueError: cancelled_by is not "customer" or "business"
        BookingNotCancellableError: policy check failed
    """
    if cancelled_by not in CANCELLED_BY:
        raise ValueError(f"Invalid cancelled_by value: {cancelled_by!r}")

    now = now or utc_now()
    row = get_booking_row(db, booking_id)
    booking = to_booking_record(row)
    policy = policy_for(get_business_row(db, booking.business_id))

    check = can_cancel(booking, policy, now)
    if not check.can_cancel:
        raise BookingNotCancellableError(check)

    ensure_transition(booking.status, BookingStatus.CANCELLED)

    _guarded_update(
        db,
        booking_id,
        expected=booking.status,
        target=BookingStatus.CANCELLED,
        cancelled_at=to_db_time(now),
        cancelled_by=cancelled_by,
        cancellation_reason=reason or None,
        updated_at=to_db_time(now),
    )
    db.commit()
    db.refresh(row)

    logger.info(f"Booking {booking_id} cancelled by {cancelled_by}")
    emit_event("booking_cancelled", {"booking_id": booking_id, "cancelled_by": cancelled_by})
    return to_booking_record(row)


# ── Status writes ────────────────────────────────────────────────────────


def _guarded_update(
    db: Session,
    booking_id: int,
    expected: BookingStatus,
    target: BookingStatus,
    **values,
) -> None:
    """
    UPDATE the booking only while it still has the `expected` status.

    The caller commits. A concurrent writer that changed the status first
    leaves nothing to update; that is reported as InvalidTransitionError.
    """
    stmt = (
        update(Bookings)
        .where(Bookings.id == booking_id, Bookings.status == expected.value)
        .values(status=target.value, **values)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(stmt)
    except SQLAlchemyError:
        db.rollback()
        raise

    if result.rowcount != 1:
        db.rollback()
        raise InvalidTransitionError(
            f"Booking {booking_id} is no longer '{expected.value}'; cannot move it to '{target.value}'"
        )


# ── No-show ──────────────────────────────────────────────────────────────


def mark_no_show(
    db: Session,
    booking_id: int,
    now: datetime | None = None,
) -> BookingRecord:
    """
    Manually mark a confirmed booking as no-show once it has ended.

    Raises:
        NotFoundError: booking does not exist
        InvalidTransitionError: booking is not confirmed, or has not ended yet
    """
    now = now or utc_now()
    row = get_booking_row(db, booking_id)
    booking = to_booking_record(row)

    ensure_transition(booking.status, BookingStatus.NO_SHOW)
    if booking.window.end > now:
        raise InvalidTransitionError("Cannot mark future booking as no-show")

    _guarded_update(
        db,
        booking_id,
        expected=booking.status,
        target=BookingStatus.NO_SHOW,
        updated_at=to_db_time(now),
    )
    try:
        db.execute(
            update(Customers)
            .where(Customers.id == booking.customer_id)
            .values(no_show_count=func.coalesce(Customers.no_show_count, 0) + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(row)

    logger.info(f"Booking {booking_id} marked as no-show")
    return to_booking_record(row)


# ── Sweep ────────────────────────────────────────────────────────────────


def run_sweep(
    db: Session,
    now: datetime | None = None,
    include_pending: bool | None = None,
) -> SweepResult:
    return sweep(db, now or utc_now(), include_pending)
