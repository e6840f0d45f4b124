# backend/booking_engine/services/scheduling/windows.py
"""
Half-open time interval [start, end) shared by every scheduling component.

Instants are timezone-aware datetimes; comparisons between windows from
different zones are exact because aware datetimes compare by UTC instant.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


def as_utc(instant: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


@dataclass(frozen=True, order=True)
class TimeWindow:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeWindow requires timezone-aware datetimes")
        if not self.start < self.end:
            raise ValueError(f"TimeWindow start must be before end: {self.start} >= {self.end}")

    @classmethod
    def of(cls, start: datetime, minutes: int) -> "TimeWindow":
        return cls(start, start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_minutes(self) -> float:
        return self.duration.total_seconds() / 60

    def overlaps(self, other: "TimeWindow") -> bool:
        """Half-open intersection test; touching windows do not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def subtract(self, other: "TimeWindow") -> list["TimeWindow"]:
        """
        Remove `other` from this window.

        Returns 0, 1 or 2 windows: nothing left, a truncated window,
        or the two halves around `other`.
        """
        if not self.overlaps(other):
            return [self]

        pieces = []
        if self.start < other.start:
            pieces.append(TimeWindow(self.start, other.start))
        if other.end < self.end:
            pieces.append(TimeWindow(other.end, self.end))
        return pieces
