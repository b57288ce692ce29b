"""
Base model shared by every ledger table.

Ids are 15-character opaque strings assigned by the application, never by
the database.
Timestamps are stored with their UTC offset.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from churchledger.db.base import Base


def generate_id() -> str:
    """Generate an id for a new church, member, transaction or tithe record."""
    return uuid.uuid4().hex[:15]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """``created``/``updated`` audit timestamps; ledger ordering breaks ties on ``created``."""
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )
    updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )


class BaseModel(Base, TimestampMixin):
    """Abstract base for ledger tables: string id plus audit timestamps."""
    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(15),
        primary_key=True,
        default=generate_id
    )
