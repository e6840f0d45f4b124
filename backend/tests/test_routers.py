"""HTTP tests for the slots, bookings and cron endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from booking_engine.config import settings
from tests.conftest import make_booking, make_business, make_customer, make_rule, make_service


@pytest.fixture
def shop(db):
    business = make_business(db)
    for day in range(7):
        make_rule(db, business, day_of_week=day)
    service = make_service(db, business)
    customer = make_customer(db, business)
    return business, service, customer


def next_week() -> datetime:
    """09:00 UTC one week from today."""
    day = datetime.now(timezone.utc).date() + timedelta(days=7)
    return datetime(day.year, day.month, day.day, 9, tzinfo=timezone.utc)


class TestSlotsEndpoint:
    def test_lists_day(self, client, shop):
        business, service, _ = shop
        start = next_week()

        response = client.get(
            f"/public/availability/{business.id}/slots",
            params={"service_id": service.id, "date": start.date().isoformat()},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["timezone"] == "UTC"
        assert body["total_slots"] == 16
        assert body["available_slots"] == 16
        assert body["slots"][0]["time"] == "09:00"
        assert body["slots"][-1]["time"] == "16:30"

    def test_booked_slot_reported(self, client, db, shop):
        business, service, customer = shop
        start = next_week()
        make_booking(db, business, service, customer, start + timedelta(hours=1))

        response = client.get(
            f"/public/availability/{business.id}/slots",
            params={"service_id": service.id, "date": start.date().isoformat()},
        )

        body = response.json()
        assert body["available_slots"] == 15
        booked = [s for s in body["slots"] if not s["available"]]
        assert [(s["time"], s["status"]) for s in booked] == [("10:00", "booked")]

    def test_unknown_service(self, client, shop):
        business, _, _ = shop
        response = client.get(
            f"/public/availability/{business.id}/slots",
            params={"service_id": 999, "date": next_week().date().isoformat()},
        )
        assert response.status_code == 404

    def test_unknown_timezone_served_in_default(self, client, db, monkeypatch):
        monkeypatch.setattr(settings, "default_timezone", "UTC")
        business = make_business(db, slug="mars", tz="Mars/Olympus")
        for day in range(7):
            make_rule(db, business, day_of_week=day)
        service = make_service(db, business)

        response = client.get(
            f"/public/availability/{business.id}/slots",
            params={"service_id": service.id, "date": next_week().date().isoformat()},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["timezone"] == "UTC"
        assert body["slots"][0]["time"] == "09:00"

    def test_date_required(self, client, shop):
        business, service, _ = shop
        response = client.get(
            f"/public/availability/{business.id}/slots",
            params={"service_id": service.id},
        )
        assert response.status_code == 422


class TestBookingEndpoints:
    def test_check_cancellation(self, client, db, shop):
        business, service, customer = shop
        booking = make_booking(db, business, service, customer, next_week())

        response = client.get(f"/bookings/{booking.id}/check-cancellation")

        assert response.status_code == 200
        body = response.json()
        assert body["can_cancel"] is True
        assert body["policy"] == "flexible"
        assert body["required_hours"] == 24
        assert body["can_reschedule"] is True

    def test_check_cancellation_missing(self, client):
        assert client.get("/bookings/404/check-cancellation").status_code == 404

    def test_cancel(self, client, db, shop):
        business, service, customer = shop
        booking = make_booking(db, business, service, customer, next_week())

        response = client.post(
            f"/bookings/{booking.id}/cancel",
            json={"cancelled_by": "customer", "reason": "Sick"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_cancel_too_late(self, client, db, shop):
        business, service, customer = shop
        soon = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(hours=2)
        booking = make_booking(db, business, service, customer, soon)

        response = client.post(f"/bookings/{booking.id}/cancel", json={"cancelled_by": "business"})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["can_cancel"] is False
        assert "24 hours" in detail["error"]

    def test_cancel_rejects_unknown_actor(self, client, db, shop):
        business, service, customer = shop
        booking = make_booking(db, business, service, customer, next_week())

        response = client.post(f"/bookings/{booking.id}/cancel", json={"cancelled_by": "robot"})

        assert response.status_code == 422

    def test_no_show_for_future_booking(self, client, db, shop):
        business, service, customer = shop
        booking = make_booking(db, business, service, customer, next_week())

        response = client.post(f"/bookings/{booking.id}/no-show")

        assert response.status_code == 400

    def test_no_show(self, client, db, shop):
        business, service, customer = shop
        past = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(hours=3)
        booking = make_booking(db, business, service, customer, past)

        response = client.post(f"/bookings/{booking.id}/no-show")

        assert response.status_code == 200
        assert response.json()["status"] == "no_show"


class TestCronEndpoint:
    def test_requires_secret_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "cron_secret", "s3cret")

        assert client.post("/cron/complete-bookings").status_code == 401
        response = client.post(
            "/cron/complete-bookings",
            headers={"Authorization": "Bearer wrong"},
        )
        assert response.status_code == 401

    def test_completes_elapsed_bookings(self, client, db, shop, monkeypatch):
        monkeypatch.setattr(settings, "cron_secret", "s3cret")
        monkeypatch.setattr(settings, "sweep_include_pending", False)
        business, service, customer = shop
        past = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(hours=3)
        booking = make_booking(db, business, service, customer, past)

        response = client.get(
            "/cron/complete-bookings",
            headers={"Authorization": "Bearer s3cret"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert body["booking_ids"] == [booking.id]
        assert body["message"] == "Completed 1 bookings"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] in ("ok", "degraded")


class TestInvalidateEndpoint:
    def test_specific_dates(self, client):
        redis = MagicMock()
        redis.delete.return_value = 2

        with patch("booking_engine.routers.slots.redis_client", redis):
            response = client.post(
                "/slots/invalidate",
                params={"business_id": 1, "dates": ["2025-03-17", "2025-03-18"]},
            )

        assert response.status_code == 200
        body = response.json()
        assert body == {"business_id": 1, "deleted_keys": 2, "dates": ["2025-03-17", "2025-03-18"]}
        redis.delete.assert_called_once_with(
            "slots:windows:1:2025-03-17",
            "slots:windows:1:2025-03-18",
        )

    def test_all_dates(self, client):
        redis = MagicMock()
        redis.keys.return_value = ["slots:windows:1:2025-03-17"]
        redis.delete.return_value = 1

        with patch("booking_engine.routers.slots.redis_client", redis):
            response = client.post("/slots/invalidate", params={"business_id": 1})

        assert response.json()["dates"] == "all"
        assert response.json()["deleted_keys"] == 1
        redis.keys.assert_called_once_with("slots:windows:1:*")

    def test_without_redis(self, client):
        with patch("booking_engine.routers.slots.redis_client", None):
            response = client.post("/slots/invalidate", params={"business_id": 1})

        assert response.status_code == 200
        assert response.json()["deleted_keys"] == 0
