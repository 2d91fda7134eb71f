from .reservation import ReservationRequest, ReservationResponse, AvailableDatesResponse, ErrorResponse

__all__ = ["ReservationRequest", "ReservationResponse", "AvailableDatesResponse", "ErrorResponse"]
