"""Tests for the lifecycle sweeper."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from booking_engine.models.generated import Bookings
from booking_engine.services.scheduling.sweeper import SweepResult, _sweep_once, sweep, sweeper_loop
from tests.conftest import at, make_booking, make_business, make_customer, make_service


@pytest.fixture
def setup(db):
    business = make_business(db)
    service = make_service(db, business, duration_minutes=60)
    customer = make_customer(db, business)
    return db, business, service, customer


def status_of(db, booking_id: int) -> str:
    db.expire_all()
    return db.get(Bookings, booking_id).status


class TestSweep:
    def test_completes_elapsed_confirmed_bookings(self, setup):
        db, business, service, customer = setup
        done = make_booking(db, business, service, customer, at(9))
        running = make_booking(db, business, service, customer, at(11, 30))
        future = make_booking(db, business, service, customer, at(15))

        result = sweep(db, at(12), include_pending=False)

        assert result.count == 1
        assert result.booking_ids == [done.id]
        assert status_of(db, done.id) == "completed"
        assert status_of(db, running.id) == "confirmed"
        assert status_of(db, future.id) == "confirmed"

    def test_end_equal_to_now_is_elapsed(self, setup):
        db, business, service, customer = setup
        booking = make_booking(db, business, service, customer, at(11))

        assert sweep(db, at(12), include_pending=False).count == 1
        assert status_of(db, booking.id) == "completed"

    def test_second_run_is_noop(self, setup):
        db, business, service, customer = setup
        make_booking(db, business, service, customer, at(8))
        make_booking(db, business, service, customer, at(9))

        assert sweep(db, at(12), include_pending=False).count == 2
        assert sweep(db, at(12), include_pending=False).count == 0

    def test_terminal_and_pending_untouched_by_default(self, setup):
        db, business, service, customer = setup
        cancelled = make_booking(db, business, service, customer, at(8), status="cancelled")
        no_show = make_booking(db, business, service, customer, at(8), status="no_show")
        pending = make_booking(db, business, service, customer, at(8), status="pending")

        assert sweep(db, at(12), include_pending=False).count == 0
        assert status_of(db, cancelled.id) == "cancelled"
        assert status_of(db, no_show.id) == "no_show"
        assert status_of(db, pending.id) == "pending"

    def test_pending_included_when_configured(self, setup):
        db, business, service, customer = setup
        pending = make_booking(db, business, service, customer, at(8), status="pending")

        assert sweep(db, at(12), include_pending=True).count == 1
        assert status_of(db, pending.id) == "completed"

    def test_emits_event_per_completed_booking(self, setup):
        db, business, service, customer = setup
        booking = make_booking(db, business, service, customer, at(8))

        with patch("booking_engine.services.scheduling.sweeper.emit_event") as emit:
            sweep(db, at(12), include_pending=False)

        emit.assert_called_once_with("booking_completed", {"booking_id": booking.id})

    def test_store_failure_rolls_back_and_propagates(self):
        db = MagicMock()
        db.execute.side_effect = OperationalError("UPDATE", {}, Exception("database is locked"))

        with pytest.raises(OperationalError):
            sweep(db, at(12), include_pending=False)

        db.rollback.assert_called_once()
        db.commit.assert_not_called()


class TestSweeperLoop:
    def test_survives_errors_and_stops_on_cancel(self):
        calls = []

        def fake_sweep_once():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("database is locked")
            return SweepResult(count=0)

        async def scenario():
            with patch("booking_engine.services.scheduling.sweeper._sweep_once", side_effect=fake_sweep_once):
                task = asyncio.create_task(sweeper_loop(interval_seconds=0.01))
                for _ in range(500):
                    if len(calls) >= 3:
                        break
                    await asyncio.sleep(0.01)
                task.cancel()
                await task
            return task

        task = asyncio.run(scenario())

        assert len(calls) >= 3
        assert task.done()
        assert not task.cancelled()

    def test_sweep_once_closes_its_session(self):
        session = MagicMock()
        with patch("booking_engine.services.scheduling.sweeper.SessionLocal", return_value=session), \
                patch("booking_engine.services.scheduling.sweeper.sweep", side_effect=OperationalError("UPDATE", {}, Exception("locked"))):
            with pytest.raises(OperationalError):
                _sweep_once()

        session.close.assert_called_once()

    def test_sweep_once_returns_result(self):
        session = MagicMock()
        result = SweepResult(count=2, booking_ids=[1, 2])
        with patch("booking_engine.services.scheduling.sweeper.SessionLocal", return_value=session), \
                patch("booking_engine.services.scheduling.sweeper.sweep", return_value=result) as sweep_mock:
            assert _sweep_once() is result

        assert sweep_mock.call_args.args[0] is session
        session.close.assert_called_once()
