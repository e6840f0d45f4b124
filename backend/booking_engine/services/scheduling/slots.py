# backend/booking_engine/services/scheduling/slots.py
"""
Slot generator.

Walks each working window in fixed steps and emits a candidate of the
service's length at every step, as long as the candidate fits entirely
inside the window. Every candidate is listed; the ones that cannot be
booked are tagged with the first matching reason:

  past      start < now
  booked    overlaps an existing non-cancelled booking
  too_soon  start < now + min_notice_hours
  too_far   start's local date > now's local date + max_advance_days

Pure function: same input → same output, no I/O.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from .availability import get_zone
from .config import BookingConfig, get_booking_config
from .windows import TimeWindow, as_utc

logger = logging.getLogger(__name__)


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    PAST = "past"
    BOOKED = "booked"
    TOO_SOON = "too_soon"
    TOO_FAR = "too_far"


@dataclass(frozen=True)
class Slot:
    window: TimeWindow
    status: SlotStatus = SlotStatus.AVAILABLE

    @property
    def available(self) -> bool:
        return self.status is SlotStatus.AVAILABLE

    @property
    def start(self) -> datetime:
        return self.window.start

    @property
    def end(self) -> datetime:
        return self.window.end


def generate_slots(
    working_windows: list[TimeWindow],
    duration_minutes: int,
    busy_windows: list[TimeWindow],
    now: datetime,
    tz: ZoneInfo | str,
    config: BookingConfig | None = None,
) -> list[Slot]:
    """
    Generate candidate slots for one date.

    Args:
        working_windows: Resolved windows with blocked intervals already removed
        duration_minutes: Service duration, the length of every slot
        busy_windows: Windows of existing bookings that still occupy time
        now: Injected wall clock
        tz: Business timezone, used for the advance-window date comparison
        config: Business constraints (defaults when None)

    Returns:
        Chronologically sorted slots.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

    config = config or get_booking_config()
    zone = get_zone(tz)
    now = as_utc(now)

    step = timedelta(minutes=config.step_minutes)
    length = timedelta(minutes=duration_minutes)
    earliest_bookable = now + timedelta(hours=config.min_notice_hours)
    last_bookable_date = now.astimezone(zone).date() + timedelta(days=config.max_advance_days)

    slots: list[Slot] = []

    for window in working_windows:
        count = 0
        start = window.start
        while start + length <= window.end:
            candidate = TimeWindow(start, start + length)
            slots.append(Slot(
                window=candidate,
                status=_slot_status(
                    candidate, busy_windows, now, earliest_bookable, last_bookable_date, zone
                ),
            ))
            count += 1
            start += step

        logger.debug(
            f"Window {window.start.isoformat()}-{window.end.isoformat()}: "
            f"{count} candidates (step={config.step_minutes}min, duration={duration_minutes}min)"
        )

    return sorted(slots, key=lambda s: s.window)


def _slot_status(
    candidate: TimeWindow,
    busy_windows: list[TimeWindow],
    now: datetime,
    earliest_bookable: datetime,
    last_bookable_date,
    zone: ZoneInfo,
) -> SlotStatus:
    if candidate.start < now:
        return SlotStatus.PAST
    if any(candidate.overlaps(busy) for busy in busy_windows):
        return SlotStatus.BOOKED
    if candidate.start < earliest_bookable:
        return SlotStatus.TOO_SOON
    if candidate.start.astimezone(zone).date() > last_bookable_date:
        return SlotStatus.TOO_FAR
    return SlotStatus.AVAILABLE
