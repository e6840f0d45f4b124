"""Errors raised by the scheduling engine."""


class SchedulingError(Exception):
    """Base class for scheduling engine errors."""


class NotFoundError(SchedulingError):
    """A referenced business, service or booking does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidTransitionError(SchedulingError):
    """Raised when a booking status change is not allowed from its current status."""


class BookingNotCancellableError(SchedulingError):
    """Raised by the cancel operation when the policy check denies it."""

    def __init__(self, check):
        self.check = check
        super().__init__(check.reason or "Booking cannot be cancelled")
