import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from roombooker.db import get_db
from roombooker.models.user import User, UserRole
from roombooker.schemas.user import UserCreate, UserResponse, UserUpdate
from roombooker.utils.auth import get_password_hash, require_admin
from roombooker.utils.interval import utcnow
from roombooker.utils.soft_delete import get_live, live

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_admin)],
)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = get_live(db, User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def ensure_unique(db: Session, username: Optional[str] = None, email: Optional[str] = None, exclude_id: Optional[int] = None):
    """Usernames and emails are unique across all rows, retired ones included."""
    query = db.query(User)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if username is not None and query.filter(User.username == username).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")
    if email is not None and query.filter(User.email == email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")


@router.get("/", response_model=List[UserResponse])
def get_users(
    response: Response,
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    skip: int = 0,
    limit: int = Query(default=10, gt=0, le=100),
    db: Session = Depends(get_db),
):
    """
    List live accounts ordered by username.

    - **search**: matches username, email or full name.
    - **role**: Admin or User.
    - **skip** / **limit**: pagination; the total is sent in `X-Total-Count`.
    """
    query = live(db, User)
    if search:
        query = query.filter(
            or_(
                User.username.contains(search),
                User.email.contains(search),
                User.full_name.contains(search),
            )
        )
    if role is not None:
        query = query.filter(User.role == role.value)

    response.headers["X-Total-Count"] = str(query.count())
    return query.order_by(User.username).offset(skip).limit(limit).all()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return get_user_or_404(db, user_id)


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db), current_user: dict = Depends(require_admin)):
    """
    Create an account with any role.
    """
    ensure_unique(db, username=payload.username, email=payload.email)
    user = User(
        username=payload.username,
        email=payload.email,
        full_name=payload.full_name,
        hashed_password=get_password_hash(payload.password),
        role=payload.role.value,
        created_at=utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.debug(f"User {user.username} ({user.role}) created by {current_user['username']}")
    return user


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: int, user_update: UserUpdate, db: Session = Depends(get_db), current_user: dict = Depends(require_admin)):
    """
    Update email, full name or role. Only the supplied fields change.
    """
    db_user = get_user_or_404(db, user_id)
    update_data = user_update.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if "email" in update_data:
        ensure_unique(db, email=update_data["email"], exclude_id=user_id)

    for key, value in update_data.items():
        setattr(db_user, key, value)
    db_user.updated_at = utcnow()

    db.commit()
    db.refresh(db_user)
    logger.debug(f"User {user_id} updated by {current_user['username']}: {sorted(update_data)}")
    return db_user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: dict = Depends(require_admin)):
    """
    Soft-delete an account. Administrators cannot delete themselves.
    """
    db_user = get_user_or_404(db, user_id)
    if db_user.id == current_user["id"]:
        logger.error(f"Admin {current_user['username']} tried to delete their own account")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    db_user.retire(utcnow())
    db.commit()
    logger.debug(f"User {user_id} soft-deleted by {current_user['username']}")
    return None
