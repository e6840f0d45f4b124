# backend/booking_engine/routers/bookings.py
"""
Booking lifecycle endpoints.

Creating and editing bookings lives elsewhere; these endpoints only read
cancellation eligibility and perform the status changes the engine owns.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.bookings import BookingCancel, BookingStatusRead, CancellationCheckRead
from ..services.scheduling.engine import cancel_booking, check_cancellation, mark_no_show
from ..services.scheduling.exceptions import (
    BookingNotCancellableError,
    InvalidTransitionError,
    NotFoundError,
)
from ..services.scheduling.records import BookingRecord

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _to_read(booking: BookingRecord) -> BookingStatusRead:
    return BookingStatusRead(
        id=booking.booking_id,
        business_id=booking.business_id,
        service_id=booking.service_id,
        customer_id=booking.customer_id,
        start_time=booking.window.start,
        end_time=booking.window.end,
        status=booking.status.value,
        payment_amount=booking.payment_amount,
    )


@router.get("/{id}/check-cancellation", response_model=CancellationCheckRead)
def get_cancellation_check(id: int, db: Session = Depends(get_db)):
    try:
        result = check_cancellation(db, id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Booking not found")
    return CancellationCheckRead.model_validate(result)


@router.post("/{id}/cancel", response_model=BookingStatusRead)
def post_cancel_booking(
    id: int,
    data: BookingCancel,
    db: Session = Depends(get_db),
):
    try:
        booking = cancel_booking(db, id, data.cancelled_by, data.reason)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Booking not found")
    except BookingNotCancellableError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": e.check.reason, "can_cancel": False},
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _to_read(booking)


@router.post("/{id}/no-show", response_model=BookingStatusRead)
def post_no_show(id: int, db: Session = Depends(get_db)):
    try:
        booking = mark_no_show(db, id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Booking not found")
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _to_read(booking)
