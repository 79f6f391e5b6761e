from .events.models import Event
from .seating.models import Seat, SeatBooking, BookingStatus

__all__ = ("Event", "Seat", "SeatBooking", "BookingStatus")
