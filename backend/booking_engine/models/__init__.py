from .generated import (
    Base,
    BlockedDates,
    Availability,
    Bookings,
    Business,
    Customers,
    Services,
)

__all__ = [
    "Base",
    "Availability",
    "BlockedDates",
    "Bookings",
    "Business",
    "Customers",
    "Services",
]
