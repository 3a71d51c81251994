"""Conflict detection between a candidate interval and approved bookings."""

from typing import List, Optional

from sqlalchemy.orm import Session
from roombooker.models.booking import Booking
from roombooker.utils.booking_status import BookingStatus
from roombooker.utils.interval import TimeInterval
from roombooker.utils.soft_delete import live


def approved_bookings(db: Session, room_id: int):
    """Query over the approved, live bookings of a room."""
    return live(db, Booking).filter(
        Booking.room_id == room_id,
        Booking.status == BookingStatus.APPROVED,
    )


def conflicting_bookings(
    db: Session,
    room_id: int,
    candidate: TimeInterval,
    exclude_booking_id: Optional[int] = None,
) -> List[Booking]:
    """
    Approved bookings of ``room_id`` whose interval overlaps ``candidate``.

    Pending and rejected bookings never hold a slot, so competing requests
    can coexist until one of them is approved.
    """
    query = approved_bookings(db, room_id).filter(
        Booking.start_time < candidate.end,
        Booking.end_time > candidate.start,
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    return [b for b in query.all() if candidate.overlaps(b.interval)]


def has_conflict(
    db: Session,
    room_id: int,
    candidate: TimeInterval,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    return bool(conflicting_bookings(db, room_id, candidate, exclude_booking_id))
