"""
User ORM model.

Individual accounts and organizations share this identity table; the type
column tells them apart.
"""

from __future__ import annotations

import enum

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from orgmembers.models.base import Base, IDMixin, TimestampMixin


class UserType(enum.IntEnum):
    """Kind of account stored in the user table."""

    individual = 0
    organization = 1


class User(Base, IDMixin, TimestampMixin):
    """An account: a person, or an organization acting as a group container."""

    __tablename__ = "user"

    type: Mapped[int] = mapped_column(
        Integer, nullable=False, default=UserType.individual, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    lower_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Organization counters. num_members is only ever written by the
    # membership recount.
    num_members: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    num_teams: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.name!r} type={UserType(self.type).name}>"
