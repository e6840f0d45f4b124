# backend/booking_engine/services/scheduling/cancellation.py
"""
Cancellation policy evaluator.

Decides whether a booking may still be cancelled and how much lead time is
left. "Not cancellable" is a normal result with a reason, never an error.
Rescheduling uses the same rules.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .status import BookingStatus, TERMINAL_STATUSES
from .windows import as_utc

logger = logging.getLogger(__name__)

DEFAULT_REQUIRED_HOURS = 24


class PolicyKind(str, Enum):
    FLEXIBLE = "flexible"
    MODERATE = "moderate"
    STRICT = "strict"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CancellationPolicy:
    policy_kind: PolicyKind = PolicyKind.FLEXIBLE
    required_hours: int = DEFAULT_REQUIRED_HOURS

    def __post_init__(self):
        if self.required_hours < 0:
            raise ValueError(f"required_hours must be >= 0, got {self.required_hours}")

    @classmethod
    def from_settings(
        cls,
        policy_kind: str | None,
        required_hours: int | None,
    ) -> "CancellationPolicy":
        """Build a policy from raw business columns; unset values get defaults."""
        if not policy_kind:
            kind = PolicyKind.FLEXIBLE
        else:
            try:
                kind = PolicyKind(policy_kind)
            except ValueError:
                logger.warning(f"Unknown cancellation policy {policy_kind!r}, treating as custom")
                kind = PolicyKind.CUSTOM

        if required_hours is None or required_hours < 0:
            required_hours = DEFAULT_REQUIRED_HOURS

        return cls(policy_kind=kind, required_hours=required_hours)


@dataclass(frozen=True)
class CancellationCheck:
    can_cancel: bool
    hours_until_booking: float
    reason: str | None = None


def hours_until(start: datetime, now: datetime) -> float:
    """Lead time in hours; negative once start has passed."""
    return (as_utc(start) - as_utc(now)).total_seconds() / 3600


def can_cancel(booking, policy: CancellationPolicy | None, now: datetime) -> CancellationCheck:
    """
    Evaluate cancellation for a booking.

    `booking` needs `status` and `window.start` (a BookingRecord).
    hours_until_booking is rounded to 2 decimals; the threshold
    comparisons use the exact value.
    """
    policy = policy or CancellationPolicy()
    status = BookingStatus(booking.status)
    hours = hours_until(booking.window.start, now)
    rounded = round(hours, 2)

    if status in TERMINAL_STATUSES:
        return CancellationCheck(
            can_cancel=False,
            hours_until_booking=rounded,
            reason=f"booking already {status.value}",
        )

    if hours < 0:
        return CancellationCheck(
            can_cancel=False,
            hours_until_booking=rounded,
            reason="booking has already started/passed",
        )

    if hours < policy.required_hours:
        return CancellationCheck(
            can_cancel=False,
            hours_until_booking=rounded,
            reason=(
                f"Cancellations must be made at least {_hours_text(policy.required_hours)} "
                f"in advance; only {_truncated(hours):.2f} hours remain"
            ),
        )

    return CancellationCheck(can_cancel=True, hours_until_booking=rounded)


def _truncated(hours: float) -> float:
    """Hours cut (not rounded) to 2 decimals."""
    return math.floor(hours * 100) / 100


def can_reschedule(booking, policy: CancellationPolicy | None, now: datetime) -> CancellationCheck:
    return can_cancel(booking, policy, now)


_POLICY_LABELS = {
    PolicyKind.FLEXIBLE: "",
    PolicyKind.MODERATE: "Moderate policy: ",
    PolicyKind.STRICT: "Strict policy: ",
    PolicyKind.CUSTOM: "",
}


def get_policy_description(policy: CancellationPolicy | None) -> str:
    """Human-readable sentence for a policy."""
    policy = policy or CancellationPolicy()

    if policy.required_hours == 0:
        rule = "You can cancel or reschedule anytime before your appointment."
    else:
        rule = f"Cancellations must be made at least {_hours_text(policy.required_hours)} in advance."

    label = _POLICY_LABELS[policy.policy_kind]
    if label:
        rule = label + rule[0].lower() + rule[1:]
    return rule


def _hours_text(hours: int) -> str:
    return f"{hours} hour" if hours == 1 else f"{hours} hours"
