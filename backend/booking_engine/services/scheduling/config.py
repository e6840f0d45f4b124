# backend/booking_engine/services/scheduling/config.py
"""
Booking configuration for slot generation.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingConfig:
    """
    Per-business constraints applied by the slot generator.

    Attributes:
        slot_step_minutes: Grid step between candidate starts
        min_notice_hours: Minimum hours between now and a bookable start (0..168)
        max_advance_days: How many days past today a start may lie (1..365)
        buffer_minutes: Extra gap added to every step (0..120)
    """
    slot_step_minutes: int = 30
    min_notice_hours: int = 0
    max_advance_days: int = 30
    buffer_minutes: int = 0

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes <= 0:
            raise ValueError(f"slot_step_minutes must be positive, got {self.slot_step_minutes}")
        if not 0 <= self.min_notice_hours <= 168:
            raise ValueError(f"min_notice_hours must be between 0 and 168, got {self.min_notice_hours}")
        if not 1 <= self.max_advance_days <= 365:
            raise ValueError(f"max_advance_days must be between 1 and 365, got {self.max_advance_days}")
        if not 0 <= self.buffer_minutes <= 120:
            raise ValueError(f"buffer_minutes must be between 0 and 120, got {self.buffer_minutes}")

    @property
    def step_minutes(self) -> int:
        """Distance between two consecutive candidate starts."""
        return self.slot_step_minutes + self.buffer_minutes

    @classmethod
    def from_business(cls, business) -> "BookingConfig":
        """
        Build config from a business record.

        Unset columns fall back to defaults. Out-of-range values are logged
        and replaced by the default, so one bad setting never breaks slot
        listing for the business.
        """
        defaults = get_booking_config()
        business_id = getattr(business, "id", None)
        return cls(
            slot_step_minutes=_checked(
                business_id, "slot_duration", business.slot_duration,
                defaults.slot_step_minutes, 1, None,
            ),
            min_notice_hours=_checked(
                business_id, "min_notice_hours", business.min_notice_hours,
                defaults.min_notice_hours, 0, 168,
            ),
            max_advance_days=_checked(
                business_id, "max_advance_days", business.max_advance_days,
                defaults.max_advance_days, 1, 365,
            ),
            buffer_minutes=_checked(
                business_id, "buffer_minutes", business.buffer_minutes,
                defaults.buffer_minutes, 0, 120,
            ),
        )


def _checked(business_id, name: str, value, default: int, low: int, high: int | None) -> int:
    if value is None:
        return default
    if value < low or (high is not None and value > high):
        logger.warning(
            f"Business {business_id}: {name}={value} out of range, using default {default}"
        )
        return default
    return value


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get default booking configuration (singleton)."""
    return BookingConfig()


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hours, minutes = value.strip().split(":")
    hour, minute = int(hours), int(minutes)
    if not (0 <= hour <= 24 and 0 <= minute < 60) or (hour == 24 and minute):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hour * 60 + minute
