# backend/booking_engine/services/scheduling/sweeper.py
"""
Lifecycle sweeper.

Moves every active booking whose end time has passed to `completed` in a
single UPDATE ... WHERE status IN (active) AND end_time <= now, inside one
transaction. The status predicate makes the sweep idempotent: a second
run, or an overlapping one, finds nothing left to change.

sweeper_loop() runs it periodically as an asyncio task in the app lifespan
(synchronous DB work via asyncio.to_thread). The HTTP cron endpoint calls
sweep() directly.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import settings
from ...database import SessionLocal
from ...models.generated import Bookings
from ..events import emit_event
from .status import BookingStatus, ensure_transition
from .store import to_db_time, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    count: int
    booking_ids: list[int] = field(default_factory=list)


def active_statuses(include_pending: bool) -> list[BookingStatus]:
    statuses = [BookingStatus.CONFIRMED]
    if include_pending:
        statuses.append(BookingStatus.PENDING)
    return statuses


def sweep(
    db: Session,
    now: datetime,
    include_pending: bool | None = None,
) -> SweepResult:
    """
    Complete all elapsed active bookings.

    Raises:
        SQLAlchemyError: store failure; the transaction is rolled back and
        the sweep can simply be retried.
    """
    if include_pending is None:
        include_pending = settings.sweep_include_pending

    statuses = active_statuses(include_pending)
    for status in statuses:
        ensure_transition(status, BookingStatus.COMPLETED)

    cutoff = to_db_time(now)
    stmt = (
        update(Bookings)
        .where(
            Bookings.status.in_([s.value for s in statuses]),
            Bookings.end_time <= cutoff,
        )
        .values(status=BookingStatus.COMPLETED.value, updated_at=cutoff)
        .returning(Bookings.id)
        .execution_options(synchronize_session=False)
    )

    try:
        booking_ids = sorted(db.execute(stmt).scalars().all())
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Sweep failed, transaction rolled back")
        raise

    for booking_id in booking_ids:
        emit_event("booking_completed", {"booking_id": booking_id})

    logger.info(f"Auto-completed {len(booking_ids)} past bookings (cutoff={cutoff.isoformat()})")
    return SweepResult(count=len(booking_ids), booking_ids=booking_ids)


async def sweeper_loop(interval_seconds: int | None = None) -> None:
    """Periodic loop that completes elapsed bookings."""
    interval = interval_seconds or settings.sweep_interval_seconds
    logger.info(f"sweeper_loop started (interval={interval}s)")

    try:
        while True:
            try:
                await asyncio.to_thread(_sweep_once)
            except asyncio.CancelledError:
                logger.info("sweeper_loop cancelled")
                raise
            except Exception:
                logger.exception("sweeper_loop error")

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        pass


def _sweep_once() -> SweepResult:
    """Run one sweep with its own session (synchronous)."""
    db = SessionLocal()
    try:
        return sweep(db, utc_now())
    finally:
        db.close()
