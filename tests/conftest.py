"""
Pytest configuration for orgmembers tests.

Every test gets a fresh SQLite database file, so separate sessions really
contend for the database lock the way concurrent requests would.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from orgmembers.core.database import DatabaseSessionManager
from orgmembers.core.dependencies import get_current_user_id, get_db_manager
from orgmembers.main import app
from orgmembers.models import (
    TEAM_NAME_OWNERS,
    Access,
    AccessMode,
    OrgUser,
    Repository,
    Team,
    TeamRepo,
    TeamUser,
    User,
    UserType,
    Watch,
)
from orgmembers.services.access_service import AccessService
from orgmembers.services.organization_service import OrganizationService


@pytest.fixture
async def db_manager(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'orgmembers.db'}",
        connect_args={"timeout": 30},
    )
    manager = DatabaseSessionManager(engine)
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def session_factory(db_manager):
    return db_manager.session_factory


@pytest.fixture
def org_service(session_factory) -> OrganizationService:
    return OrganizationService(session_factory=session_factory)


@pytest.fixture
def access_service(session_factory) -> AccessService:
    return AccessService(session_factory=session_factory)


# ---------------------------------------------------------------------------
# Data factory
# ---------------------------------------------------------------------------

class Factory:
    """Seeds rows the engine only reads: users, teams, repositories, watches."""

    def __init__(self, session_factory, org_service: OrganizationService) -> None:
        self.session_factory = session_factory
        self.org_service = org_service

    async def _add(self, obj):
        async with self.session_factory.begin() as db:
            db.add(obj)
        return obj

    async def user(self, name: str, full_name: str = "") -> User:
        return await self._add(
            User(name=name, lower_name=name.lower(), full_name=full_name, email=f"{name}@example.com")
        )

    async def org(
        self,
        name: str,
        full_name: str = "",
        owners: list[User] = (),
        members: list[User] = (),
    ) -> User:
        """Create an organization with an Owners team, through add_member."""
        org = await self._add(
            User(
                name=name,
                lower_name=name.lower(),
                full_name=full_name,
                type=UserType.organization,
            )
        )
        owners_team = await self.team(org, TEAM_NAME_OWNERS, members=list(owners), authorize=AccessMode.owner)
        for user in [*owners, *members]:
            await self.org_service.add_member(org.id, user.id)
        async with self.session_factory.begin() as db:
            for user in owners:
                ou = (
                    await db.execute(
                        select(OrgUser).where(OrgUser.org_id == org.id, OrgUser.user_id == user.id)
                    )
                ).scalar_one()
                ou.is_owner = True
                ou.num_teams = 1
        org.owners_team = owners_team
        return org

    async def team(
        self,
        org: User,
        name: str,
        members: list[User] = (),
        repos: list[Repository] = (),
        authorize: AccessMode = AccessMode.read,
    ) -> Team:
        async with self.session_factory.begin() as db:
            team = Team(
                org_id=org.id,
                name=name,
                lower_name=name.lower(),
                authorize=authorize,
                num_members=len(members),
                num_repos=len(repos),
            )
            db.add(team)
            await db.flush()
            for user in members:
                db.add(TeamUser(org_id=org.id, team_id=team.id, user_id=user.id))
            for repo in repos:
                db.add(TeamRepo(org_id=org.id, team_id=team.id, repo_id=repo.id))
        return team

    async def repo(
        self,
        owner: User,
        name: str,
        is_private: bool = False,
        is_unlisted: bool = False,
        updated_at: datetime | None = None,
    ) -> Repository:
        repo = Repository(
            owner_id=owner.id,
            name=name,
            lower_name=name.lower(),
            is_private=is_private,
            is_unlisted=is_unlisted,
        )
        if updated_at is not None:
            repo.updated_at = updated_at
        return await self._add(repo)

    async def watch(self, user: User, repo: Repository) -> None:
        async with self.session_factory.begin() as db:
            db.add(Watch(user_id=user.id, repo_id=repo.id))
            stored = await db.get(Repository, repo.id)
            stored.num_watches += 1

    async def grant(self, user: User, repo: Repository, mode: AccessMode = AccessMode.read) -> None:
        await self._add(Access(user_id=user.id, repo_id=repo.id, mode=mode))

    # -- inspection ---------------------------------------------------------

    async def get(self, model, ident):
        async with self.session_factory() as db:
            return await db.get(model, ident)

    async def num_members(self, org: User) -> int:
        return (await self.get(User, org.id)).num_members

    async def live_members(self, org: User) -> int:
        async with self.session_factory() as db:
            result = await db.execute(
                select(func.count()).select_from(OrgUser).where(OrgUser.org_id == org.id)
            )
            return result.scalar_one()

    async def count(self, model, **filters) -> int:
        async with self.session_factory() as db:
            stmt = select(func.count()).select_from(model).filter_by(**filters)
            return (await db.execute(stmt)).scalar_one()


@pytest.fixture
def factory(session_factory, org_service) -> Factory:
    return Factory(session_factory, org_service)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(db_manager):
    """API client with the database overridden; no acting user until as_user()."""
    app.dependency_overrides[get_db_manager] = lambda: db_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """Act as the given user for subsequent requests."""

    def _as_user(user: User) -> None:
        app.dependency_overrides[get_current_user_id] = lambda: user.id

    return _as_user
