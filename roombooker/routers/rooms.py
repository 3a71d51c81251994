import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from roombooker.db import get_db
from roombooker.models.room import Room, RoomStatus
from roombooker.schemas.room import RoomCreate, RoomUpdate, RoomResponse
from roombooker.services.conflicts import has_conflict
from roombooker.utils.auth import require_admin
from roombooker.utils.interval import utcnow
from roombooker.utils.soft_delete import get_live, live
from roombooker.utils.validation_helpers import query_window

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
)


def get_room_or_404(db: Session, room_id: int) -> Room:
    room = get_live(db, Room, room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(room: RoomCreate, db: Session = Depends(get_db), current_user: dict = Depends(require_admin)):
    """
    Create a new room.
    Requires the administrator role.
    """
    db_room = Room(**room.model_dump(mode="json"), created_at=utcnow())
    db.add(db_room)
    db.commit()
    db.refresh(db_room)
    logger.debug(f"Room {db_room.id} created by {current_user['username']}")
    return db_room


@router.get("/", response_model=List[RoomResponse])
def get_rooms(
    response: Response,
    search: Optional[str] = None,
    room_status: Optional[RoomStatus] = Query(default=None, alias="status"),
    min_capacity: Optional[int] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    """
    List live rooms ordered by name.

    When ``start_time`` and ``end_time`` are given, rooms holding an
    approved booking in that window are left out. Giving only one of them
    is a 400.
    """
    query = live(db, Room)
    if search:
        query = query.filter(
            or_(
                Room.name.contains(search),
                Room.location.contains(search),
                Room.description.contains(search),
            )
        )
    if room_status is not None:
        query = query.filter(Room.status == room_status.value)
    if min_capacity is not None:
        query = query.filter(Room.capacity >= min_capacity)

    window = query_window(start_time, end_time)
    if window is not None:
        rooms = query.order_by(Room.name).all()
        rooms = [room for room in rooms if not has_conflict(db, room.id, window)]
        response.headers["X-Total-Count"] = str(len(rooms))
        return rooms[skip:skip + limit]

    response.headers["X-Total-Count"] = str(query.count())
    return query.order_by(Room.name).offset(skip).limit(limit).all()


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: int, db: Session = Depends(get_db)):
    """
    Retrieve a specific room by ID.
    """
    return get_room_or_404(db, room_id)


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(room_id: int, room_update: RoomUpdate, db: Session = Depends(get_db), current_user: dict = Depends(require_admin)):
    """
    Update a room's details.
    Requires the administrator role.
    """
    db_room = get_room_or_404(db, room_id)

    update_data = room_update.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    for key, value in update_data.items():
        setattr(db_room, key, value)
    db_room.updated_at = utcnow()

    db.commit()
    db.refresh(db_room)
    logger.debug(f"Room {room_id} updated by {current_user['username']}: {sorted(update_data)}")
    return db_room


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(room_id: int, db: Session = Depends(get_db), current_user: dict = Depends(require_admin)):
    """
    Soft-delete a room; its bookings stay in the database.
    Requires the administrator role.
    """
    db_room = get_room_or_404(db, room_id)
    db_room.retire(utcnow())
    db.commit()
    logger.debug(f"Room {room_id} soft-deleted by {current_user['username']}")
    return None
