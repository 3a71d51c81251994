from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from datetime import date, datetime, timedelta
from sqlalchemy.orm import Session
from roombooker.db import get_db
from roombooker.models.booking import Booking
from roombooker.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
    TimeSlot,
)
from roombooker.services.bookings import BookingLifecycle, ListOrder
from roombooker.services.conflicts import approved_bookings
from roombooker.services.rooms import get_live_room
from roombooker.utils.auth import get_current_user, require_admin
from roombooker.utils.booking_status import BookingStatus
from roombooker.utils.scheduler import business_day, iter_free_slots
from roombooker.utils.validation_helpers import query_window
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


def get_lifecycle(db: Session = Depends(get_db)) -> BookingLifecycle:
    return BookingLifecycle(db)


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
    description="Request a room for a time interval. The booking starts out pending. Requires authentication."
)
def create_booking(
    booking: BookingCreate,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: dict = Depends(get_current_user),
):
    """
    Request a room for a time interval.
    Requires authentication.

    - **room_id**: ID of the room to book.
    - **start_time** / **end_time**: half-open interval, end after start.
    - **booker_name**, **booker_email**, **booker_phone**: requester details.
    - **purpose**: Purpose of the booking.

    Fails with 409 when an approved booking already holds an overlapping slot.
    Other pending requests for the same slot do not block.
    """
    logger.debug(f"Creating booking for user: {current_user['username']}, room_id: {booking.room_id}")
    return lifecycle.create(**booking.model_dump())


@router.get(
    "/",
    response_model=List[BookingResponse],
    summary="List bookings",
    description="Administrative listing, newest first, with search and filters."
)
def get_bookings(
    response: Response,
    search: Optional[str] = None,
    booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
    room_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: dict = Depends(get_current_user),
):
    """
    Retrieve live bookings ordered by creation time, newest first.

    - **search**: matches booker name, email, purpose or room name.
    - **status**: Pending, Approved or Rejected.
    - **room_id**: restrict to one room.
    - **skip** / **limit**: pagination; the total is sent in `X-Total-Count`.
    """
    total, bookings = lifecycle.search(search, booking_status, room_id, skip, limit)
    response.headers["X-Total-Count"] = str(total)
    logger.debug(f"Retrieved {len(bookings)} of {total} bookings")
    return bookings


@router.get(
    "/history",
    response_model=List[BookingResponse],
    summary="Booking history",
    description="Bookings by requester email and/or room, latest start first."
)
def get_booking_history(
    response: Response,
    email: Optional[str] = None,
    room_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: dict = Depends(get_current_user),
):
    total, bookings = lifecycle.history(email, room_id, skip, limit)
    response.headers["X-Total-Count"] = str(total)
    return bookings


@router.get(
    "/room/{room_id}",
    response_model=List[BookingResponse],
    summary="Room schedule",
    description="Live bookings of a room in start order, optionally limited to a window."
)
def get_room_schedule(
    room_id: int,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    """
    List a room's bookings by start time.

    - **start_time** / **end_time**: only bookings overlapping that window
      are returned; give both or neither.
    """
    window = query_window(start_time, end_time)
    return list(lifecycle.list_for_room(room_id, window, ListOrder.START))


@router.get(
    "/available_slots/",
    response_model=List[TimeSlot],
    summary="List available time slots",
    description="Free slots of a room on a date, between 08:00 and 18:00 UTC. Requires authentication."
)
def get_available_slots(
    room_id: int,
    date: date,
    duration: int = 60,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    List available time slots for a room.

    - **room_id**: ID of the room to check availability for.
    - **date**: Date to check availability (e.g., 2025-05-04).
    - **duration**: Duration of each slot in minutes (default: 60).

    Only approved bookings occupy time; pending requests leave slots open.
    """
    logger.debug(f"Fetching available slots for room_id: {room_id}, date: {date}, duration: {duration} minutes, user: {current_user['username']}")

    if duration <= 0:
        logger.error(f"Invalid duration: {duration}, must be positive")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duration must be positive")

    get_live_room(db, room_id)
    day = business_day(date)
    bookings = (
        approved_bookings(db, room_id)
        .filter(Booking.start_time < day.end, Booking.end_time > day.start)
        .order_by(Booking.start_time)
        .all()
    )

    slots = [
        {"start_time": start, "end_time": end}
        for start, end in iter_free_slots(bookings, day, timedelta(minutes=duration))
    ]
    logger.debug(f"Found {len(slots)} available slots for room_id: {room_id}")
    return slots


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking by ID",
    description="Retrieve a specific booking by its ID."
)
def get_booking(
    booking_id: int,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    """
    Retrieve a specific booking by ID.

    - **booking_id**: ID of the booking to retrieve.
    """
    return lifecycle.get(booking_id)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update a booking",
    description="Change a pending booking. Only the supplied fields are updated. Requires authentication."
)
def update_booking(
    booking_id: int,
    booking_update: BookingUpdate,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: dict = Depends(get_current_user),
):
    """
    Update a pending booking.
    Requires authentication.

    Approved or rejected bookings answer 409. Overlaps are not checked until
    the booking is approved.
    """
    logger.debug(f"User {current_user['username']} updating booking {booking_id}")
    return lifecycle.update(booking_id, booking_update.model_dump(exclude_unset=True))


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Approve or reject a booking",
    description="Administrator decision on a booking. Approval fails with 409 when the slot is taken."
)
def decide_booking(
    booking_id: int,
    decision: BookingStatusUpdate,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: dict = Depends(require_admin),
):
    """
    Approve or reject a booking.
    Requires the administrator role.

    - **status**: Approved or Rejected.
    - **rejection_reason**: required when rejecting.
    """
    logger.debug(f"Admin {current_user['username']} sets booking {booking_id} to {decision.status.value}")
    return lifecycle.decide(booking_id, decision.status, decision.rejection_reason)


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a booking",
    description="Soft-delete a booking. Requires the administrator role."
)
def delete_booking(
    booking_id: int,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    current_user: dict = Depends(require_admin),
):
    """
    Soft-delete a booking; it disappears from listings and conflict checks.
    Requires the administrator role.

    - **booking_id**: ID of the booking to delete.
    """
    lifecycle.soft_delete(booking_id)
    logger.debug(f"Admin {current_user['username']} deleted booking {booking_id}")
    return None
