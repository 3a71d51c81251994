import logging
import os
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from roombooker.db import get_db
from roombooker.models.user import User, UserRole
from roombooker.utils.soft_delete import live

logger = logging.getLogger(__name__)

# JWT configuration
SECRET_KEY = os.getenv("ROOMBOOKER_SECRET_KEY", "change-me-roombooker-secret-key")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ROOMBOOKER_TOKEN_MINUTES", "30"))

# Seeded administrator
ADMIN_USERNAME = os.getenv("ROOMBOOKER_ADMIN_USERNAME", "admin")
ADMIN_EMAIL = os.getenv("ROOMBOOKER_ADMIN_EMAIL", "admin@roombooker.local")
ADMIN_PASSWORD = os.getenv("ROOMBOOKER_ADMIN_PASSWORD", "admin123")

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer scheme for JWT token
bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="Enter 'Bearer <your_jwt_token>'. Obtain the token via /auth/login.",
)


def verify_password(plain_password, hashed_password):
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    """Hash a password for storage."""
    return pwd_context.hash(password)


def create_access_token(data: dict):
    """Create a JWT access token with an expiration time."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def seed_admin(db: Session):
    """Create the default administrator when no admin account exists."""
    if live(db, User).filter(User.role == UserRole.ADMIN.value).first():
        return
    db.add(
        User(
            username=ADMIN_USERNAME,
            email=ADMIN_EMAIL,
            full_name="Administrator",
            hashed_password=get_password_hash(ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
        )
    )
    db.commit()
    logger.info(f"Seeded administrator account '{ADMIN_USERNAME}'")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
):
    """Verify JWT token from Bearer header and return the current user."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token = credentials.credentials
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user = live(db, User).filter(User.username == username).first()
    if user is None:
        raise credentials_exception
    return {"id": user.id, "username": user.username, "role": user.role}


def require_admin(current_user: dict = Depends(get_current_user)):
    """Allow only administrators through."""
    if current_user["role"] != UserRole.ADMIN.value:
        logger.error(f"User {current_user['username']} is not an administrator")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return current_user
