"""Shared test fixtures and factories."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_engine.database import get_db
from booking_engine.main import app
from booking_engine.models.generated import (
    Availability,
    Base,
    BlockedDates,
    Bookings,
    Business,
    Customers,
    Services,
)
from booking_engine.services.scheduling.store import to_db_time

UTC = timezone.utc

# Monday
MONDAY = datetime(2025, 3, 17, tzinfo=UTC).date()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ── Factories ────────────────────────────────────────────────────────────


def make_business(db, slug: str = "studio", tz: str = "UTC", **kwargs) -> Business:
    business = Business(name=kwargs.pop("name", "Studio"), slug=slug, timezone=tz, **kwargs)
    db.add(business)
    db.commit()
    db.refresh(business)
    return business


def make_service(db, business: Business, duration_minutes: int = 30, **kwargs) -> Services:
    service = Services(
        business_id=business.id,
        name=kwargs.pop("name", "Haircut"),
        duration_minutes=duration_minutes,
        price=kwargs.pop("price", 25.0),
        **kwargs,
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def make_customer(db, business: Business, phone: str = "+15550100", **kwargs) -> Customers:
    customer = Customers(
        business_id=business.id,
        name=kwargs.pop("name", "Jane Doe"),
        phone=phone,
        **kwargs,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def make_rule(
    db,
    business: Business,
    day_of_week: int,
    start_time: str = "09:00",
    end_time: str = "17:00",
    is_available: int = 1,
) -> Availability:
    rule = Availability(
        business_id=business.id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        is_available=is_available,
    )
    db.add(rule)
    db.commit()
    return rule


def make_blocked(
    db,
    business: Business,
    day,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> BlockedDates:
    blocked = BlockedDates(
        business_id=business.id,
        date=day.isoformat(),
        start_time=start_time,
        end_time=end_time,
    )
    db.add(blocked)
    db.commit()
    return blocked


def make_booking(
    db,
    business: Business,
    service: Services,
    customer: Customers,
    start: datetime,
    minutes: Optional[int] = None,
    status: str = "confirmed",
) -> Bookings:
    minutes = minutes or service.duration_minutes
    booking = Bookings(
        business_id=business.id,
        service_id=service.id,
        customer_id=customer.id,
        start_time=to_db_time(start),
        end_time=to_db_time(start + timedelta(minutes=minutes)),
        status=status,
        payment_amount=service.price,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def at(hour: int, minute: int = 0, day=MONDAY) -> datetime:
    """UTC instant on the test Monday."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)
