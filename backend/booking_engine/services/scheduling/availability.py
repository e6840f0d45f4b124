# backend/booking_engine/services/scheduling/availability.py
"""
Availability resolver.

Turns a business's weekly recurring rules ("Mon 09:00-17:00") into absolute
working windows for one calendar date. Local times of day are interpreted in
the business timezone and returned as UTC instants, so the result never
depends on the host timezone.

A malformed rule is skipped and logged; the rest of the day stays bookable.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from .config import time_str_to_minutes
from .windows import TimeWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeeklyAvailabilityRule:
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    start_time: str  # "HH:MM" local
    end_time: str
    business_id: int | None = None
    is_available: bool = True


def day_of_week(target_date: date) -> int:
    """Day index with Sunday = 0 (Python's weekday() has Monday = 0)."""
    return (target_date.weekday() + 1) % 7


def get_zone(tz: ZoneInfo | str) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


def local_to_instant(target_date: date, minutes: int, tz: ZoneInfo | str) -> datetime:
    """
    Convert "minutes after local midnight of target_date" to a UTC instant.

    Aware-datetime arithmetic is wall-clock arithmetic, so the UTC offset is
    the one in force at the resulting local time (DST-correct).
    """
    midnight = datetime.combine(target_date, time.min, tzinfo=get_zone(tz))
    return (midnight + timedelta(minutes=minutes)).astimezone(timezone.utc)


def resolve_working_windows(
    rules: list[WeeklyAvailabilityRule],
    target_date: date,
    tz: ZoneInfo | str,
) -> list[TimeWindow]:
    """
    Resolve working windows for target_date.

    Returns:
        Chronologically sorted windows. Empty list = closed that day.
    """
    weekday = day_of_week(target_date)
    windows: list[TimeWindow] = []

    for rule in rules:
        if rule.day_of_week != weekday or not rule.is_available:
            continue

        try:
            start_min = time_str_to_minutes(rule.start_time)
            end_min = time_str_to_minutes(rule.end_time)
        except (ValueError, AttributeError):
            logger.warning(
                f"Skipping availability rule with unparseable times "
                f"(business={rule.business_id}, day={rule.day_of_week}, "
                f"{rule.start_time!r}-{rule.end_time!r})"
            )
            continue

        if start_min == end_min:
            continue

        if start_min > end_min:
            logger.warning(
                f"Skipping availability rule with start after end "
                f"(business={rule.business_id}, day={rule.day_of_week}, "
                f"{rule.start_time}-{rule.end_time})"
            )
            continue

        start = local_to_instant(target_date, start_min, tz)
        end = local_to_instant(target_date, end_min, tz)
        if start >= end:
            # Collapsed by a DST transition
            continue

        windows.append(TimeWindow(start, end))

    return sorted(windows)
