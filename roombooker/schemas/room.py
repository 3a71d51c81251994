from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from roombooker.models.room import RoomStatus


class RoomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=200)
    capacity: int = Field(gt=0, le=1000)
    description: Optional[str] = Field(default=None, max_length=500)
    status: RoomStatus = RoomStatus.AVAILABLE


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    capacity: Optional[int] = Field(default=None, gt=0, le=1000)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[RoomStatus] = None


class RoomResponse(RoomBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
