from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from datetime import datetime
from typing import Optional
from roombooker.models.user import UserRole


class UserRegister(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    full_name: str = Field(default="", max_length=100)
    password: str = Field(min_length=6)


class UserCreate(UserRegister):
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(default=None, max_length=100)
    role: Optional[UserRole] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)
    confirm_new_password: str

    @field_validator("confirm_new_password")
    @classmethod
    def check_confirmation(cls, value, info: ValidationInfo):
        if value != info.data.get("new_password"):
            raise ValueError("does not match new_password")
        return value


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    full_name: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: UserRole
