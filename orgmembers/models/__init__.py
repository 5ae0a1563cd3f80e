"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from orgmembers.models.base import Base, IDMixin, TimestampMixin
from orgmembers.models.user import User, UserType
from orgmembers.models.repository import Access, AccessMode, Repository, Watch
from orgmembers.models.member import OrgUser
from orgmembers.models.team import TEAM_NAME_OWNERS, Team, TeamRepo, TeamUser

__all__ = [
    "Base",
    "IDMixin",
    "TimestampMixin",
    "User",
    "UserType",
    "OrgUser",
    "Team",
    "TeamUser",
    "TeamRepo",
    "TEAM_NAME_OWNERS",
    "Repository",
    "Watch",
    "Access",
    "AccessMode",
]
