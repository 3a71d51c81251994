"""Domain errors raised by the booking core.

Each error carries the HTTP status the web layer answers with; the core
itself never builds responses.
"""

from fastapi import status


class BookingError(Exception):
    """Base class for booking admission errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Booking request rejected"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRange(BookingError):
    default_message = "End time must be after start time"


class RoomNotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Room not found"


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Booking not found"


class InvalidState(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Only pending bookings may be modified"


class SlotTaken(BookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Room is already booked for this time period"


class MissingReason(BookingError):
    default_message = "Rejection reason is required"
