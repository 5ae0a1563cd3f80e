"""
OrgUser ORM model.
"""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orgmembers.models.base import Base, BigIntID, IDMixin


class OrgUser(Base, IDMixin):
    """Join table linking users to the organizations they are members of."""

    __tablename__ = "org_user"
    __table_args__ = (
        UniqueConstraint("uid", "org_id", name="org_user_user_org_unique"),
    )

    user_id: Mapped[int] = mapped_column(
        "uid",
        BigIntID,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    org_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_owner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    num_teams: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<OrgUser org_id={self.org_id} user_id={self.user_id} "
            f"is_owner={self.is_owner}>"
        )
