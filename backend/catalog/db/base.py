"""SQLAlchemy declarative base and shared column mixins."""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all catalog ORM models."""

    pass


class IntIDMixin:
    """Auto-incrementing integer primary key."""

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )


class CreatedAtMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class VersionMixin:
    """Optimistic-concurrency counter, bumped by one on every update."""

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
