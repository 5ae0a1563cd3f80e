"""
Base model classes and mixins.

Provides Base declarative class, IDMixin and TimestampMixin.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only auto-increments an INTEGER PRIMARY KEY.
BigIntID = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamps.

    Automatically sets created_at on insert and updated_at on update.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated",
    )


class IDMixin:
    """
    Mixin that adds a numeric auto-increment primary key.

    Identifiers are shared with the rest of the hosting service, which
    addresses users, organizations and repositories by int64 ids.
    """

    id: Mapped[int] = mapped_column(
        BigIntID,
        primary_key=True,
        autoincrement=True,
        doc="Unique identifier for the record",
    )
