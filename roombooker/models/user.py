import enum

from sqlalchemy import Column, DateTime, Integer, String
from roombooker.db import Base
from roombooker.utils.interval import utcnow
from roombooker.utils.soft_delete import SoftDeleteMixin


class UserRole(str, enum.Enum):
    ADMIN = "Admin"
    USER = "User"


class User(SoftDeleteMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    full_name = Column(String(100), nullable=False, default="")
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True)
