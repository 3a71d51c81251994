import enum

from sqlalchemy.orm import relationship
from sqlalchemy import Column, DateTime, Integer, String
from roombooker.db import Base
from roombooker.utils.interval import utcnow
from roombooker.utils.soft_delete import SoftDeleteMixin


class RoomStatus(str, enum.Enum):
    AVAILABLE = "Tersedia"
    UNAVAILABLE = "Tidak Tersedia"


class Room(SoftDeleteMixin, Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True, nullable=False)
    location = Column(String(200), nullable=False)
    capacity = Column(Integer, nullable=False)
    description = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=RoomStatus.AVAILABLE.value)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True)

    bookings = relationship("Booking", back_populates="room")

    @property
    def is_active(self) -> bool:
        return not self.retired and self.status == RoomStatus.AVAILABLE.value
