"""
Repository access queries.

A user may see an organization's repository when the repository is visible
organization-wide (neither private nor unlisted) or when it is granted to a
team the user belongs to in that organization.
"""

from __future__ import annotations

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orgmembers.core.database import storage_errors
from orgmembers.models.repository import Repository
from orgmembers.models.team import TeamRepo, TeamUser


def _publicly_visible():
    return and_(Repository.is_private.is_(False), Repository.is_unlisted.is_(False))


def team_repository_ids(org_id: int, user_id: int) -> Select:
    """Ids of repositories granted to any team the user belongs to in the org."""
    return (
        select(TeamRepo.repo_id)
        .join(TeamUser, TeamUser.team_id == TeamRepo.team_id)
        .where(TeamUser.org_id == org_id, TeamUser.user_id == user_id)
    )


def accessible_repositories_query(org_id: int, user_id: int) -> Select:
    """
    Repositories of the organization the user has access to.

    Equivalent SQL:

        SELECT * FROM repository
        WHERE owner_id = :org_id
        AND (
                (is_private = FALSE AND is_unlisted = FALSE)
             OR id IN (
                    SELECT team_repo.repo_id FROM team_repo
                    JOIN team_user ON team_user.team_id = team_repo.team_id
                    WHERE team_user.org_id = :org_id AND team_user.uid = :user_id
                )
        )

    The outer query never joins team_repo, so a repository granted to several
    of the user's teams is returned once.
    """
    return select(Repository).where(
        Repository.owner_id == org_id,
        or_(_publicly_visible(), Repository.id.in_(team_repository_ids(org_id, user_id))),
    )


def team_only_repository_ids(org_id: int, user_id: int) -> Select:
    """
    Ids of the accessible repositories the user reaches only through a team.

    These are the repositories the user stops seeing once they leave the
    organization; publicly visible ones stay reachable.
    """
    return (
        accessible_repositories_query(org_id, user_id)
        .with_only_columns(Repository.id)
        .where(~_publicly_visible())
    )


class AccessService:
    """Read-only queries over the repositories a member can reach."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def accessible_repositories_by_user(
        self,
        org_id: int,
        user_id: int,
        page: int,
        page_size: int,
        skip_count: bool = False,
    ) -> tuple[list[Repository], int]:
        """
        Return a page of the repositories the user can access, newest first.

        page is 1-based; paging applies only when both page and page_size are
        positive, otherwise every repository is returned. With skip_count the
        second query is not issued and the returned total is 0, which callers
        must not display.
        """
        stmt = accessible_repositories_query(org_id, user_id)

        page_stmt = stmt.order_by(Repository.updated_at.desc(), Repository.id.desc())
        if page > 0 and page_size > 0:
            page_stmt = page_stmt.limit(page_size).offset((page - 1) * page_size)

        async with self.session_factory() as db:
            with storage_errors("list repositories"):
                result = await db.execute(page_stmt)
                repos = list(result.scalars().all())

            if skip_count:
                return repos, 0

            with storage_errors("count repositories"):
                count_stmt = select(func.count()).select_from(stmt.subquery())
                total = (await db.execute(count_stmt)).scalar_one()

        return repos, total
