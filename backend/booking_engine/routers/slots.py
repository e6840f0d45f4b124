# backend/booking_engine/routers/slots.py
"""
Slots API endpoints.

GET  /public/availability/{business_id}/slots - Candidate slots of a service for a day
POST /slots/invalidate                         - Drop cached working windows (admin)
"""

from datetime import date
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import redis_client
from ..schemas.slots import SlotInfo, SlotsDayResponse, SlotsInvalidateResponse
from ..services.scheduling.cache import invalidate_business_cache
from ..services.scheduling.engine import list_slots
from ..services.scheduling.exceptions import NotFoundError
from ..services.scheduling.store import get_business_row, resolve_timezone


router = APIRouter(tags=["slots"])


@router.get("/public/availability/{business_id}/slots", response_model=SlotsDayResponse)
def get_slots_day(
    business_id: int,
    service_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get all candidate slots for a service on a specific day."""
    try:
        slots = list_slots(
            db=db,
            business_id=business_id,
            service_id=service_id,
            target_date=target_date,
            redis=redis_client,
        )
        tz_name = resolve_timezone(get_business_row(db, business_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    zone = ZoneInfo(tz_name)
    items = [
        SlotInfo(
            time=slot.start.astimezone(zone).strftime("%H:%M"),
            start=slot.start,
            end=slot.end,
            available=slot.available,
            status=slot.status.value,
        )
        for slot in slots
    ]

    return SlotsDayResponse(
        business_id=business_id,
        service_id=service_id,
        date=target_date,
        timezone=tz_name,
        slots=items,
        total_slots=len(items),
        available_slots=sum(1 for item in items if item.available),
    )


@router.post("/slots/invalidate", response_model=SlotsInvalidateResponse)
def invalidate_slots_cache(
    business_id: int,
    dates: list[date] | None = Query(None),
):
    """Manually invalidate cached working windows for a business (admin endpoint)."""
    deleted = invalidate_business_cache(redis_client, business_id, dates)

    return SlotsInvalidateResponse(
        business_id=business_id,
        deleted_keys=deleted,
        dates=dates if dates else "all",
    )
