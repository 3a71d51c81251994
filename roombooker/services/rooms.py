"""Room lookups used by the booking core.

A soft-deleted room does not exist as far as bookings are concerned.
"""

from sqlalchemy.orm import Session
from roombooker.models.room import Room
from roombooker.utils.errors import RoomNotFound
from roombooker.utils.soft_delete import get_live


def get_live_room(db: Session, room_id: int) -> Room:
    room = get_live(db, Room, room_id)
    if room is None:
        raise RoomNotFound(f"Room not found: {room_id}")
    return room


def room_exists(db: Session, room_id: int) -> bool:
    return get_live(db, Room, room_id) is not None


def is_room_active(db: Session, room_id: int) -> bool:
    room = get_live(db, Room, room_id)
    return room is not None and room.is_active
