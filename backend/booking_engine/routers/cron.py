# backend/booking_engine/routers/cron.py
"""
Cron endpoints, called by an external scheduler (e.g. hourly).

Guarded by `Authorization: Bearer <CRON_SECRET>`. With no secret
configured the endpoint is open, which is meant for local development only.
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas.bookings import SweepRead
from ..services.scheduling.engine import run_sweep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


def verify_cron_secret(authorization: str | None = Header(None)) -> None:
    secret = settings.cron_secret
    if not secret:
        return

    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        logger.warning("Rejected cron call with missing or invalid secret")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.api_route(
    "/complete-bookings",
    methods=["GET", "POST"],
    response_model=SweepRead,
    dependencies=[Depends(verify_cron_secret)],
)
def complete_bookings(db: Session = Depends(get_db)):
    result = run_sweep(db)
    return SweepRead(
        message=f"Completed {result.count} bookings",
        count=result.count,
        booking_ids=result.booking_ids,
    )
