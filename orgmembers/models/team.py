"""
Team, TeamUser and TeamRepo ORM models.

Teams are managed elsewhere; the membership engine reads them to resolve
repository access and keeps the Owners team in step with owner removals.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orgmembers.models.base import Base, BigIntID, IDMixin
from orgmembers.models.repository import AccessMode

TEAM_NAME_OWNERS = "Owners"


class Team(Base, IDMixin):
    """A named group of members within one organization."""

    __tablename__ = "team"
    __table_args__ = (
        UniqueConstraint("org_id", "lower_name", name="team_org_name_unique"),
    )

    org_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lower_name: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    authorize: Mapped[int] = mapped_column(Integer, nullable=False, default=AccessMode.read)
    num_repos: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    num_members: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def is_owner_team(self) -> bool:
        return self.lower_name == TEAM_NAME_OWNERS.lower()

    def __repr__(self) -> str:
        return f"<Team id={self.id} name={self.name!r} org_id={self.org_id}>"


class TeamUser(Base, IDMixin):
    """Membership of a user in a team."""

    __tablename__ = "team_user"
    __table_args__ = (
        UniqueConstraint("team_id", "uid", name="team_user_team_user_unique"),
    )

    org_id: Mapped[int] = mapped_column(BigIntID, nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        "uid",
        BigIntID,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<TeamUser team_id={self.team_id} user_id={self.user_id}>"


class TeamRepo(Base, IDMixin):
    """Grant of a repository to a team."""

    __tablename__ = "team_repo"
    __table_args__ = (
        UniqueConstraint("team_id", "repo_id", name="team_repo_team_repo_unique"),
    )

    org_id: Mapped[int] = mapped_column(BigIntID, nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
    )
    repo_id: Mapped[int] = mapped_column(
        BigIntID,
        ForeignKey("repository.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<TeamRepo team_id={self.team_id} repo_id={self.repo_id}>"
