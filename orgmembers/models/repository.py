"""
Repository, Watch and Access ORM models.
"""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orgmembers.models.base import Base, BigIntID, IDMixin, TimestampMixin


class AccessMode(enum.IntEnum):
    """Permission level a user holds on a repository."""

    none = 0
    read = 1
    write = 2
    admin = 3
    owner = 4


class Repository(Base, IDMixin, TimestampMixin):
    """A repository owned by a user or an organization."""

    __tablename__ = "repository"
    __table_args__ = (
        UniqueConstraint("owner_id", "lower_name", name="repository_owner_name_unique"),
    )

    owner_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lower_name: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_unlisted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    num_watches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Repository id={self.id} name={self.name!r} owner_id={self.owner_id}>"


class Watch(Base, IDMixin):
    """A user's subscription to a repository."""

    __tablename__ = "watch"
    __table_args__ = (
        UniqueConstraint("user_id", "repo_id", name="watch_user_repo_unique"),
    )

    user_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    repo_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("repository.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Watch user_id={self.user_id} repo_id={self.repo_id}>"


class Access(Base, IDMixin):
    """Cached effective permission of a user on a repository."""

    __tablename__ = "access"
    __table_args__ = (
        UniqueConstraint("user_id", "repo_id", name="access_user_repo_unique"),
    )

    user_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    repo_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("repository.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mode: Mapped[int] = mapped_column(Integer, nullable=False, default=AccessMode.none)

    def __repr__(self) -> str:
        return f"<Access user_id={self.user_id} repo_id={self.repo_id} mode={self.mode}>"
