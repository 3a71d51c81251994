import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


SQLALCHEMY_DATABASE_URL = os.getenv(
    "ROOMBOOKER_DATABASE_URL", "sqlite:///./data/rooms_booking.db"
)


def make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_database():
    """Create tables and seed the default administrator."""
    # pylint: disable=import-outside-toplevel
    from roombooker.models import booking, room, user  # noqa: F401  register tables
    from roombooker.utils.auth import seed_admin

    if SQLALCHEMY_DATABASE_URL.startswith("sqlite:///./data"):
        os.makedirs("./data", exist_ok=True)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()


def get_db():
    """Provide a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
