# backend/booking_engine/services/scheduling/store.py
"""
Data access for the scheduling engine.

Reads ORM rows and returns plain value records. Instants are stored as
naive UTC in the database and returned as aware UTC datetimes.
SQLAlchemy errors propagate unchanged to the caller.
"""

import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from ...config import settings
from ...models.generated import Availability, BlockedDates, Bookings, Business, Services
from .availability import WeeklyAvailabilityRule
from .blocked import BlockedDate
from .cancellation import CancellationPolicy
from .config import BookingConfig
from .exceptions import NotFoundError
from .records import BookingRecord, BusinessSchedule, ServiceRecord
from .status import BLOCKING_STATUSES, BookingStatus
from .windows import TimeWindow, as_utc

logger = logging.getLogger(__name__)


def to_db_time(instant: datetime) -> datetime:
    """Aware (or naive UTC) datetime → naive UTC for storage."""
    return as_utc(instant).replace(tzinfo=None)


def from_db_time(value: datetime | str) -> datetime:
    """Stored naive UTC value → aware UTC datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return as_utc(value)


# ── Business ─────────────────────────────────────────────────────────────


def get_business_row(db: Session, business_id: int) -> Business:
    business = db.get(Business, business_id)
    if not business:
        raise NotFoundError("Business", business_id)
    return business


def resolve_timezone(business: Business) -> str:
    """Business timezone, or the configured default when unset or unknown."""
    name = business.timezone or settings.default_timezone
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            f"Business {business.id}: unknown timezone {name!r}, "
            f"using {settings.default_timezone}"
        )
        return settings.default_timezone
    return name


def policy_for(business: Business) -> CancellationPolicy:
    return CancellationPolicy.from_settings(
        business.cancellation_policy,
        business.cancellation_hours,
    )


def load_business_schedule(
    db: Session,
    business_id: int,
    target_date: date | None = None,
) -> BusinessSchedule:
    """
    Load availability rules, blocked dates and settings of a business.

    With target_date, only blocked dates of that day are loaded.
    """
    business = get_business_row(db, business_id)

    rules = [
        WeeklyAvailabilityRule(
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
            business_id=row.business_id,
            is_available=bool(row.is_available),
        )
        for row in (
            db.query(Availability)
            .filter(Availability.business_id == business_id)
            .order_by(Availability.day_of_week, Availability.start_time)
            .all()
        )
    ]

    query = db.query(BlockedDates).filter(BlockedDates.business_id == business_id)
    if target_date is not None:
        query = query.filter(BlockedDates.date == target_date.isoformat())

    blocked = [
        BlockedDate(
            date=date.fromisoformat(row.date),
            start_time=row.start_time,
            end_time=row.end_time,
            business_id=row.business_id,
            reason=row.reason,
        )
        for row in query.order_by(BlockedDates.date).all()
    ]

    return BusinessSchedule(
        business_id=business.id,
        timezone=resolve_timezone(business),
        config=BookingConfig.from_business(business),
        policy=policy_for(business),
        rules=rules,
        blocked_dates=blocked,
    )


# ── Service ──────────────────────────────────────────────────────────────


def load_service(db: Session, service_id: int, business_id: int | None = None) -> ServiceRecord:
    """Get an active service, optionally checking it belongs to business_id."""
    service = db.get(Services, service_id)
    if (
        not service
        or not service.is_active
        or (business_id is not None and service.business_id != business_id)
    ):
        raise NotFoundError("Service", service_id)

    return ServiceRecord(
        service_id=service.id,
        business_id=service.business_id,
        duration_minutes=service.duration_minutes,
        name=service.name,
    )


# ── Bookings ─────────────────────────────────────────────────────────────


def get_booking_row(db: Session, booking_id: int) -> Bookings:
    booking = db.get(Bookings, booking_id)
    if not booking:
        raise NotFoundError("Booking", booking_id)
    return booking


def to_booking_record(row: Bookings) -> BookingRecord:
    return BookingRecord(
        booking_id=row.id,
        business_id=row.business_id,
        service_id=row.service_id,
        customer_id=row.customer_id,
        window=TimeWindow(from_db_time(row.start_time), from_db_time(row.end_time)),
        status=BookingStatus(row.status),
        payment_amount=row.payment_amount,
        created_at=from_db_time(row.created_at) if row.created_at else None,
    )


def load_busy_windows(
    db: Session,
    business_id: int,
    range_start: datetime,
    range_end: datetime,
) -> list[TimeWindow]:
    """Windows of bookings that still occupy time and intersect [range_start, range_end)."""
    rows = (
        db.query(Bookings.start_time, Bookings.end_time)
        .filter(
            Bookings.business_id == business_id,
            Bookings.status.in_([s.value for s in BLOCKING_STATUSES]),
            Bookings.start_time < to_db_time(range_end),
            Bookings.end_time > to_db_time(range_start),
        )
        .order_by(Bookings.start_time)
        .all()
    )
    return [
        TimeWindow(from_db_time(start), from_db_time(end))
        for start, end in rows
        if from_db_time(start) < from_db_time(end)
    ]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
