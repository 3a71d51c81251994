import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from roombooker.db import get_db
from roombooker.models.user import User, UserRole
from roombooker.schemas.user import ChangePasswordRequest, Token, UserRegister, UserResponse
from roombooker.utils.auth import (
    create_access_token,
    get_current_user,
    get_password_hash,
    verify_password,
)
from roombooker.utils.interval import utcnow
from roombooker.utils.soft_delete import live

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    Exchange username and password (form fields) for a bearer token.
    """
    user = live(db, User).filter(User.username == form_data.username).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.error(f"Failed login for username: {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token({"sub": user.username, "role": user.role})
    return {"access_token": token, "token_type": "bearer", "role": user.role}


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new account with the ``User`` role.
    """
    if db.query(User).filter(User.username == payload.username).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user = User(
        username=payload.username,
        email=payload.email,
        full_name=payload.full_name,
        hashed_password=get_password_hash(payload.password),
        role=UserRole.USER.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.debug(f"Registered user: {user.username}")
    return user


@router.get("/me", response_model=UserResponse)
def me(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    """
    Return the authenticated account.
    """
    return live(db, User).filter(User.id == current_user["id"]).first()


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Replace the authenticated account's password after checking the current one.
    """
    user = live(db, User).filter(User.id == current_user["id"]).first()
    if not verify_password(payload.current_password, user.hashed_password):
        logger.error(f"Wrong current password for user: {current_user['username']}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    user.hashed_password = get_password_hash(payload.new_password)
    user.updated_at = utcnow()
    db.commit()
    logger.debug(f"Password changed for user: {current_user['username']}")
    return None
