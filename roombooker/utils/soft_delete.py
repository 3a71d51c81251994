"""Soft delete: records are retired with a timestamp, never removed.

Every query for live rows goes through ``live`` so the ``deleted_at`` filter
exists in exactly one place.
"""

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import Query, Session

from roombooker.utils.interval import utcnow


class SoftDeleteMixin:
    deleted_at = Column(DateTime, nullable=True)

    @property
    def retired(self) -> bool:
        return self.deleted_at is not None

    def retire(self, now=None):
        self.deleted_at = now or utcnow()


def live(db: Session, model) -> Query:
    """Query over ``model`` rows that have not been retired."""
    return db.query(model).filter(model.deleted_at.is_(None))


def get_live(db: Session, model, record_id: int):
    return live(db, model).filter(model.id == record_id).first()
