"""
Booking lifecycle: admission, edits, approval decisions and soft delete.

The service works on one SQLAlchemy session and raises the errors from
``roombooker.utils.errors``; callers are expected to have checked roles
before calling ``decide`` or ``soft_delete``.
"""

import enum
import logging
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from roombooker.models.booking import Booking
from roombooker.models.room import Room
from roombooker.services.conflicts import conflicting_bookings
from roombooker.services.locks import room_locks
from roombooker.services.rooms import get_live_room
from roombooker.utils.booking_status import (
    BookingStatus,
    assert_editable,
    assert_transition,
)
from roombooker.utils.errors import (
    BookingError,
    MissingReason,
    NotFound,
    RoomNotFound,
    SlotTaken,
)
from roombooker.utils.interval import TimeInterval, utcnow
from roombooker.utils.soft_delete import get_live, live

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "room_id",
    "booker_name",
    "booker_email",
    "booker_phone",
    "purpose",
    "start_time",
    "end_time",
)


class ListOrder(str, enum.Enum):
    START = "start"  # availability views
    CREATED = "created"  # administrative views


class BookingSequence:
    """Lazy view over a booking query; every iteration re-runs the query."""

    def __init__(self, query: Query):
        self._query = query

    def __iter__(self) -> Iterator[Booking]:
        return iter(self._query.yield_per(100))

    def count(self) -> int:
        return self._query.order_by(None).count()


class BookingLifecycle:
    def __init__(self, db: Session):
        self.db = db

    def get(self, booking_id: int) -> Booking:
        booking = get_live(self.db, Booking, booking_id)
        if booking is None:
            raise NotFound(f"Booking not found: {booking_id}")
        return booking

    def create(
        self,
        room_id: int,
        start_time: datetime,
        end_time: datetime,
        booker_name: str,
        booker_email: str,
        purpose: str,
        booker_phone: Optional[str] = None,
    ) -> Booking:
        get_live_room(self.db, room_id)
        interval = TimeInterval(start_time, end_time)

        blocking = conflicting_bookings(self.db, room_id, interval)
        if blocking:
            logger.error(
                f"Booking for room_id {room_id} at {interval.start}-{interval.end} "
                f"overlaps approved booking(s) {[b.id for b in blocking]}"
            )
            raise SlotTaken()

        booking = Booking(
            room_id=room_id,
            booker_name=booker_name,
            booker_email=booker_email,
            booker_phone=booker_phone,
            purpose=purpose,
            start_time=interval.start,
            end_time=interval.end,
            status=BookingStatus.PENDING,
            created_at=utcnow(),
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        logger.debug(f"Created pending booking {booking.id} for room_id {room_id}")
        return booking

    def update(self, booking_id: int, changes: dict) -> Booking:
        """
        Apply a partial update to a pending booking.

        Keys missing from ``changes`` or mapped to ``None`` are left alone.
        Overlaps are not checked here; they are settled when the booking is
        approved. The booking's current room and, when it moves, the target
        room are locked so an approval cannot run against stale values.
        """
        changes = {
            key: value
            for key, value in changes.items()
            if key in UPDATABLE_FIELDS and value is not None
        }
        while True:
            booking = self.get(booking_id)
            rooms = {booking.room_id, changes.get("room_id", booking.room_id)}
            with room_locks.hold(*rooms):
                try:
                    updated = self._update(booking_id, changes, rooms)
                except BookingError:
                    self.db.rollback()
                    raise
            if updated is not None:
                return updated
            logger.debug(f"Booking {booking_id} changed room while waiting for a lock, retrying update")

    def _update(self, booking_id: int, changes: dict, locked_rooms: set) -> Optional[Booking]:
        self.db.rollback()
        booking = self.get(booking_id)
        if booking.room_id not in locked_rooms:
            return None
        assert_editable(booking.status)

        if "room_id" in changes:
            get_live_room(self.db, changes["room_id"])

        TimeInterval(
            changes.get("start_time", booking.start_time),
            changes.get("end_time", booking.end_time),
        )

        for key, value in changes.items():
            setattr(booking, key, value)
        booking.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(booking)
        logger.debug(f"Updated booking {booking_id}: {sorted(changes)}")
        return booking

    def decide(
        self,
        booking_id: int,
        new_status: BookingStatus,
        rejection_reason: Optional[str] = None,
    ) -> Booking:
        new_status = BookingStatus(new_status)
        booking = self.get(booking_id)
        assert_transition(booking.status, new_status)

        while True:
            room_id = booking.room_id
            with room_locks.hold(room_id):
                try:
                    decided = self._decide(booking_id, room_id, new_status, rejection_reason)
                except BookingError:
                    self.db.rollback()
                    raise
            if decided is not None:
                return decided
            logger.debug(f"Booking {booking_id} moved off room_id {room_id}, retrying decision")
            booking = self.get(booking_id)

    def _decide(
        self,
        booking_id: int,
        locked_room_id: int,
        new_status: BookingStatus,
        rejection_reason: Optional[str],
    ) -> Optional[Booking]:
        # Drop whatever this session read before the lock was taken.
        self.db.rollback()
        booking = self.get(booking_id)
        if booking.room_id != locked_room_id:
            return None
        assert_transition(booking.status, new_status)

        if new_status is BookingStatus.REJECTED:
            return self._reject(booking, rejection_reason)
        return self._approve(booking)

    def _reject(self, booking: Booking, reason: Optional[str]) -> Booking:
        reason = (reason or "").strip()
        if not reason:
            logger.error(f"Rejection of booking {booking.id} without a reason")
            raise MissingReason()

        booking.status = BookingStatus.REJECTED
        booking.rejection_reason = reason
        booking.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(booking)
        logger.debug(f"Rejected booking {booking.id}")
        return booking

    def _approve(self, booking: Booking) -> Booking:
        # Row lock on the room for backends that support SELECT ... FOR UPDATE.
        room = (
            live(self.db, Room)
            .filter(Room.id == booking.room_id)
            .with_for_update()
            .first()
        )
        if room is None:
            raise RoomNotFound(f"Room not found: {booking.room_id}")

        blocking = conflicting_bookings(
            self.db, booking.room_id, booking.interval, exclude_booking_id=booking.id
        )
        if blocking:
            logger.error(
                f"Cannot approve booking {booking.id}: slot taken by {[b.id for b in blocking]}"
            )
            raise SlotTaken()

        booking.status = BookingStatus.APPROVED
        booking.rejection_reason = None
        booking.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(booking)
        logger.debug(f"Approved booking {booking.id} for room_id {booking.room_id}")
        return booking

    def soft_delete(self, booking_id: int) -> None:
        booking = self.get(booking_id)
        booking.retire(utcnow())
        self.db.commit()
        logger.debug(f"Soft-deleted booking {booking_id}")

    def list_for_room(
        self,
        room_id: int,
        window: Optional[TimeInterval] = None,
        order: ListOrder = ListOrder.START,
    ) -> BookingSequence:
        get_live_room(self.db, room_id)
        query = live(self.db, Booking).filter(Booking.room_id == room_id)
        if window is not None:
            query = query.filter(
                Booking.start_time < window.end,
                Booking.end_time > window.start,
            )
        if ListOrder(order) is ListOrder.START:
            query = query.order_by(Booking.start_time.asc(), Booking.id.asc())
        else:
            query = query.order_by(Booking.created_at.desc(), Booking.id.desc())
        return BookingSequence(query)

    def search(
        self,
        search: Optional[str] = None,
        status: Optional[BookingStatus] = None,
        room_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[int, List[Booking]]:
        query = live(self.db, Booking).join(Room, Booking.room_id == Room.id)
        if search:
            query = query.filter(
                or_(
                    Booking.booker_name.contains(search),
                    Booking.booker_email.contains(search),
                    Booking.purpose.contains(search),
                    Room.name.contains(search),
                )
            )
        if status is not None:
            query = query.filter(Booking.status == BookingStatus(status))
        if room_id is not None:
            query = query.filter(Booking.room_id == room_id)

        total = query.count()
        items = (
            query.order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return total, items

    def history(
        self,
        email: Optional[str] = None,
        room_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[int, List[Booking]]:
        query = live(self.db, Booking)
        if email:
            query = query.filter(Booking.booker_email == email)
        if room_id is not None:
            query = query.filter(Booking.room_id == room_id)

        total = query.count()
        items = (
            query.order_by(Booking.start_time.desc(), Booking.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return total, items
