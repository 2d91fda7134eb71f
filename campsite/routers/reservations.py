from fastapi import APIRouter, Depends, Query, Request, status
from typing import Optional
from datetime import date
import logging

from ..schemas.reservation import (
    ReservationRequest, ReservationResponse, AvailableDatesResponse, ErrorResponse
)
from ..services.reservation_service import ReservationService
from ..utils.dependencies import get_reservation_service
from ..utils.rate_limiter import limiter, get_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/reservations",
    tags=["Reservations"],
    responses={
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.get("", response_model=AvailableDatesResponse)
@limiter.limit(get_rate_limit("availability"))
def get_available_dates(
    request: Request,
    from_date: Optional[date] = Query(None, description="First day, yyyy-MM-dd (default: earliest bookable day)"),
    to_date: Optional[date] = Query(None, description="Last day, yyyy-MM-dd (default: latest bookable day)"),
    service: ReservationService = Depends(get_reservation_service)
):
    """
    Available days of the campsite.

    Bounds that are missing or outside the bookable horizon are moved to its edges.
    """
    start, end = service.availability.default_window(from_date, to_date)
    logger.info(f"Fetching available dates {start} -> {end}")

    available = service.get_available_dates(start, end)
    return AvailableDatesResponse(from_date=start, to_date=end, available_dates=available)


@router.post(
    "",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
@limiter.limit(get_rate_limit("reservation_create"))
def create_reservation(
    request: Request,
    reservation_data: ReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Reserve the campsite for 1 to 3 nights"""
    reservation = service.create_reservation(
        check_in=reservation_data.check_in_date,
        check_out=reservation_data.check_out_date,
        guest_name=reservation_data.guest_name,
        guest_email=reservation_data.guest_email,
    )
    return ReservationResponse.from_model(reservation)


@router.get(
    "/{reservation_id}",
    response_model=ReservationResponse,
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(get_rate_limit("reservation_get"))
def get_reservation(
    request: Request,
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service)
):
    reservation = service.get_reservation(reservation_id)
    return ReservationResponse.from_model(reservation)


@router.patch(
    "/{reservation_id}",
    response_model=ReservationResponse,
    responses={404: {"model": ErrorResponse}, 405: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(get_rate_limit("reservation_update"))
def update_reservation(
    request: Request,
    reservation_id: str,
    reservation_data: ReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Change the dates and contact details of an active reservation"""
    reservation = service.update_reservation(
        reservation_id,
        check_in=reservation_data.check_in_date,
        check_out=reservation_data.check_out_date,
        guest_name=reservation_data.guest_name,
        guest_email=reservation_data.guest_email,
    )
    return ReservationResponse.from_model(reservation)


@router.delete(
    "/{reservation_id}",
    response_model=ReservationResponse,
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(get_rate_limit("reservation_cancel"))
def cancel_reservation(
    request: Request,
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service)
):
    """Cancel a reservation; its days become available again"""
    reservation = service.cancel_reservation(reservation_id)
    return ReservationResponse.from_model(reservation)
