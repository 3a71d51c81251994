from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from roombooker.db import Base
from roombooker.utils.booking_status import BookingStatus
from roombooker.utils.interval import TimeInterval, utcnow
from roombooker.utils.soft_delete import SoftDeleteMixin


class Booking(SoftDeleteMixin, Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    booker_name = Column(String(100), nullable=False)
    booker_email = Column(String(100), nullable=False, index=True)
    booker_phone = Column(String(50), nullable=True)
    purpose = Column(String(500), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    rejection_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True)

    room = relationship("Room", back_populates="bookings")

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.of(self)
