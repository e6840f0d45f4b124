# backend/booking_engine/services/scheduling/blocked.py
"""
Blocked-date filter.

A blocked date without times closes the whole day. With times it removes
only that sub-interval, truncating or splitting working windows. A record
with just one bound is open-ended towards midnight on the missing side.
"""

import logging
from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from .availability import local_to_instant
from .config import time_str_to_minutes
from .windows import TimeWindow

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BlockedDate:
    date: date
    start_time: str | None = None
    end_time: str | None = None
    business_id: int | None = None
    reason: str | None = None

    @property
    def is_full_day(self) -> bool:
        return not self.start_time and not self.end_time


def blocked_windows(
    blocked: list[BlockedDate],
    target_date: date,
    tz: ZoneInfo | str,
) -> list[TimeWindow] | None:
    """
    Convert blocked records of target_date into absolute windows.

    Returns:
        None if the whole day is blocked, otherwise the list of blocked windows.
    """
    result: list[TimeWindow] = []

    for record in blocked:
        if record.date != target_date:
            continue
        if record.is_full_day:
            return None

        try:
            start_min = time_str_to_minutes(record.start_time) if record.start_time else 0
            end_min = time_str_to_minutes(record.end_time) if record.end_time else MINUTES_PER_DAY
        except ValueError:
            logger.warning(
                f"Blocked date with unparseable times ignored "
                f"(business={record.business_id}, date={record.date}, "
                f"{record.start_time!r}-{record.end_time!r})"
            )
            continue

        if start_min >= end_min:
            logger.warning(
                f"Blocked date with empty interval ignored "
                f"(business={record.business_id}, date={record.date}, "
                f"{record.start_time}-{record.end_time})"
            )
            continue

        result.append(TimeWindow(
            local_to_instant(target_date, start_min, tz),
            local_to_instant(target_date, end_min, tz),
        ))

    return result


def apply_blocked_dates(
    windows: list[TimeWindow],
    blocked: list[BlockedDate],
    target_date: date,
    tz: ZoneInfo | str,
) -> list[TimeWindow]:
    """Subtract blocked intervals of target_date from working windows."""
    if not windows:
        return []

    blocks = blocked_windows(blocked, target_date, tz)
    if blocks is None:
        return []

    remaining = list(windows)
    for block in blocks:
        remaining = [piece for window in remaining for piece in window.subtract(block)]

    return sorted(remaining)
