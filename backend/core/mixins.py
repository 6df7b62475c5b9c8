from datetime import datetime

from sqlalchemy import Column, DateTime


def utcnow() -> datetime:
    """Naive UTC, the one clock used for stored timestamps and comparisons."""
    return datetime.utcnow()


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow,
                        onupdate=utcnow, nullable=False)


class CreatedAtMixin:
    """For append-only rows that are never updated."""
    created_at = Column(DateTime, default=utcnow, nullable=False)
