from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from roombooker.schemas.room import RoomResponse
from roombooker.utils.booking_status import BookingStatus
from roombooker.utils.validation_helpers import normalize_instant, strip_required


class BookingBase(BaseModel):
    room_id: int
    booker_name: str = Field(max_length=100)
    booker_email: EmailStr
    booker_phone: Optional[str] = Field(default=None, max_length=50)
    purpose: str = Field(max_length=500)
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def check_instant(cls, value):
        return normalize_instant(value)

    @field_validator("booker_name", "purpose")
    @classmethod
    def check_required_text(cls, value):
        return strip_required(value)


class BookingCreate(BookingBase):
    pass


class BookingUpdate(BaseModel):
    room_id: Optional[int] = None
    booker_name: Optional[str] = Field(default=None, max_length=100)
    booker_email: Optional[EmailStr] = None
    booker_phone: Optional[str] = Field(default=None, max_length=50)
    purpose: Optional[str] = Field(default=None, max_length=500)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_instant(cls, value):
        return normalize_instant(value)

    @field_validator("booker_name", "purpose")
    @classmethod
    def check_required_text(cls, value):
        return strip_required(value)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    rejection_reason: Optional[str] = Field(default=None, max_length=500)


class BookingResponse(BaseModel):
    id: int
    room_id: int
    booker_name: str
    booker_email: str
    booker_phone: Optional[str] = None
    purpose: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    room: Optional[RoomResponse] = None

    model_config = ConfigDict(from_attributes=True)


class TimeSlot(BaseModel):
    start_time: datetime
    end_time: datetime
