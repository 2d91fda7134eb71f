from fastapi import Depends
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from .clock import Clock, SystemClock


def get_clock(settings: Settings = Depends(get_settings)) -> Clock:
    """Clock used to decide "today"; overridden in tests"""
    return SystemClock(settings.timezone)


def get_reservation_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
):
    from ..services.reservation_service import ReservationService

    return ReservationService(db, settings=settings, clock=clock)
