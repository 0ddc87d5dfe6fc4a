"""SQLAlchemy declarative base and shared mixins."""
from datetime import datetime, timezone
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite stores datetimes without an offset."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class CreatedAtMixin:
    """Adds created_at column, set at insert time."""
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)


class TimestampMixin(CreatedAtMixin):
    """Adds created_at and updated_at columns."""
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
