from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
import re


def _strip_markup(v):
    """Remove script tags and inline event handlers from free text"""
    if isinstance(v, str):
        v = re.sub(r'<script[^>]*>.*?</script>', '', v, flags=re.IGNORECASE | re.DOTALL)
        v = re.sub(r'on\w+\s*=', '', v, flags=re.IGNORECASE)
    return v


class ReservationRequest(BaseModel):
    """
    Body for creating or updating a reservation.

    Dates stay strings here; format and booking rules are checked by the
    reservation core so every rule violation carries its own message.
    """
    guest_name: Optional[str] = Field(None, max_length=200, description="Guest full name", examples=["John Doe"])
    guest_email: Optional[EmailStr] = Field(None, description="Guest email address", examples=["john.doe@example.com"])
    check_in_date: Optional[str] = Field(None, description="Check-in date, yyyy-MM-dd", examples=["2026-03-20"])
    check_out_date: Optional[str] = Field(None, description="Check-out date, yyyy-MM-dd", examples=["2026-03-22"])

    @field_validator('guest_name', mode='before')
    @classmethod
    def sanitize_text_fields(cls, v):
        return _strip_markup(v)


class ReservationResponse(BaseModel):
    id: str
    guest_name: str
    guest_email: str
    check_in_date: date
    check_out_date: date
    active: bool
    status: str
    cancelled_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, reservation) -> "ReservationResponse":
        return cls(
            id=reservation.id,
            guest_name=reservation.guest_name,
            guest_email=reservation.guest_email,
            check_in_date=reservation.check_in_date,
            check_out_date=reservation.check_out_date,
            active=reservation.is_active,
            status=reservation.status,
            cancelled_date=reservation.cancelled_date,
            created_at=reservation.created_at,
            updated_at=reservation.updated_at,
        )


class AvailableDatesResponse(BaseModel):
    from_date: date = Field(..., description="First day of the window")
    to_date: date = Field(..., description="Last day of the window (inclusive)")
    available_dates: List[date] = Field(default_factory=list, description="Free days, ascending")


class ErrorResponse(BaseModel):
    timestamp: datetime
    status: int
    error: str
    details: List[str] = Field(default_factory=list)
