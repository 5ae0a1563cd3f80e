"""
Organization business logic.

Membership mutations, the owner invariant, member counters and the
organization directory. Every mutation runs in one transaction that first
locks the organization row, so concurrent requests against the same
organization serialize their check-then-act sequences.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, insert, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orgmembers.core.database import storage_errors
from orgmembers.core.exceptions import InvalidArgumentError, LastOwnerError, TeamNotFoundError
from orgmembers.models.member import OrgUser
from orgmembers.models.repository import Access, Repository, Watch
from orgmembers.models.team import TEAM_NAME_OWNERS, Team, TeamUser
from orgmembers.models.user import User, UserType
from orgmembers.services.access_service import team_only_repository_ids

logger = logging.getLogger(__name__)

_INSERT_IGNORING_CONFLICTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class OrganizationService:
    """Handles organization membership and directory operations."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    # -----------------------------------------------------------------------
    # Add Member
    # -----------------------------------------------------------------------

    async def add_member(self, org_id: int, user_id: int) -> None:
        """
        Add a user to the organization.

        Adding an existing member is a no-op: the insert relies on the
        (uid, org_id) unique constraint and only a row that was actually
        inserted triggers the member recount.
        """
        # The outer block also covers the commit on leaving begin().
        with storage_errors("add organization member"):
            async with self.session_factory.begin() as tx:
                await self._lock_organization(tx, org_id)

                with storage_errors("upsert"):
                    inserted = await self._insert_org_user(tx, org_id, user_id)

                if inserted:
                    await self._recount_members(tx, org_id)

        if inserted:
            logger.info("Added member: org_id=%s user_id=%s", org_id, user_id)
        else:
            logger.debug("Membership already exists: org_id=%s user_id=%s", org_id, user_id)

    # -----------------------------------------------------------------------
    # Remove Member
    # -----------------------------------------------------------------------

    async def remove_member(self, org_id: int, user_id: int) -> None:
        """
        Remove a user from the organization.

        - Not a member: succeeds without touching anything
        - Last member of the Owners team: raises LastOwnerError
        - Otherwise, in one transaction: drops watches and access grants on
          repositories the user only reached through a team, leaves the
          Owners team, deletes the membership and recounts members
        """
        with storage_errors("remove organization member"):
            async with self.session_factory.begin() as tx:
                await self._lock_organization(tx, org_id)

                with storage_errors("check organization membership"):
                    ou = await self._get_org_user(tx, org_id, user_id)
                if ou is None:
                    logger.debug("Not a member: org_id=%s user_id=%s", org_id, user_id)
                    return

                owners = None
                if ou.is_owner:
                    owners = await self._get_team_by_name(tx, org_id, TEAM_NAME_OWNERS)
                    if owners.num_members == 1:
                        logger.warning(
                            "Refused to remove last owner: org_id=%s user_id=%s", org_id, user_id
                        )
                        raise LastOwnerError(org_id, user_id)

                await self._purge_repository_access(tx, org_id, user_id)

                # TODO: drop the user from the organization's other teams too.
                if owners is not None:
                    await self._leave_team(tx, owners, user_id)

                with storage_errors("delete organization membership"):
                    await tx.execute(
                        delete(OrgUser)
                        .where(OrgUser.user_id == user_id, OrgUser.org_id == org_id)
                        .execution_options(synchronize_session=False)
                    )

                await self._recount_members(tx, org_id)

        logger.info("Removed member: org_id=%s user_id=%s", org_id, user_id)

    # -----------------------------------------------------------------------
    # Membership predicates
    # -----------------------------------------------------------------------

    async def is_owned_by(self, org_id: int, user_id: int) -> bool:
        """True if the user is an owner of the organization. Lookup failures read as False."""
        ou = await self._find_org_user(org_id, user_id)
        return ou is not None and ou.is_owner

    async def has_member(self, org_id: int, user_id: int) -> bool:
        """True if the user is a member of the organization. Lookup failures read as False."""
        return await self._find_org_user(org_id, user_id) is not None

    # -----------------------------------------------------------------------
    # List Members
    # -----------------------------------------------------------------------

    async def list_members(self, org_id: int, limit: int = 0) -> list[User]:
        """
        Members of the organization ordered by user id.

        Equivalent SQL:

            SELECT "user".* FROM "user"
            JOIN org_user ON org_user.uid = "user".id
            WHERE org_user.org_id = :org_id
            ORDER BY "user".id ASC
            [LIMIT :limit]
        """
        stmt = (
            select(User)
            .join(OrgUser, OrgUser.user_id == User.id)
            .where(OrgUser.org_id == org_id)
            .order_by(User.id.asc())
        )
        if limit > 0:
            stmt = stmt.limit(limit)

        async with self.session_factory() as db:
            with storage_errors("list organization members"):
                result = await db.execute(stmt)
                return list(result.scalars().all())

    # -----------------------------------------------------------------------
    # Directory
    # -----------------------------------------------------------------------

    async def search_by_name(
        self,
        keyword: str,
        page: int,
        page_size: int,
        order_by: str = "",
    ) -> tuple[list[User], int]:
        """
        Organizations whose username or full name contains the keyword.

        Matching is case-insensitive. order_by is a raw ORDER BY clause
        (e.g. "id DESC") and must come from an allow-list on the caller's
        side. An empty keyword matches nothing; % and _ match themselves.
        """
        if not keyword:
            return [], 0

        pattern = f"%{_escape_like(keyword.lower())}%"
        stmt = select(User).where(
            User.type == UserType.organization,
            (User.lower_name.ilike(pattern, escape="\\"))
            | (User.full_name.ilike(pattern, escape="\\")),
        )
        count_stmt = select(func.count()).select_from(stmt.subquery())

        if order_by:
            stmt = stmt.order_by(text(order_by))
        if page > 0 and page_size > 0:
            stmt = stmt.limit(page_size).offset((page - 1) * page_size)

        async with self.session_factory() as db:
            with storage_errors("search organizations"):
                total = (await db.execute(count_stmt)).scalar_one()
                result = await db.execute(stmt)
                orgs = list(result.scalars().all())

        return orgs, total

    async def list_organizations(
        self, member_id: int, include_private_members: bool = False
    ) -> list[User]:
        """
        Organizations the user belongs to, ordered by organization id.

        Unless include_private_members is set, only memberships the user made
        public are considered.
        """
        if member_id <= 0:
            raise InvalidArgumentError("MemberID must be greater than 0")

        stmt = (
            select(User)
            .join(OrgUser, OrgUser.org_id == User.id)
            .where(OrgUser.user_id == member_id)
            .order_by(User.id.asc())
        )
        if not include_private_members:
            stmt = stmt.where(OrgUser.is_public.is_(True))

        async with self.session_factory() as db:
            with storage_errors("list organizations"):
                result = await db.execute(stmt)
                return list(result.scalars().all())

    async def count_by_user(self, user_id: int) -> int:
        """Number of organizations the user is a member of, public or not."""
        async with self.session_factory() as db:
            with storage_errors("count organizations"):
                result = await db.execute(
                    select(func.count()).select_from(OrgUser).where(OrgUser.user_id == user_id)
                )
                return result.scalar_one()

    # -----------------------------------------------------------------------
    # Teams
    # -----------------------------------------------------------------------

    async def get_team_by_name(self, org_id: int, name: str) -> Team:
        """Team of the organization with the given name, compared case-insensitively."""
        async with self.session_factory() as db:
            return await self._get_team_by_name(db, org_id, name)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _lock_organization(self, tx: AsyncSession, org_id: int) -> None:
        # A no-op write: row lock on PostgreSQL, database write lock on SQLite.
        with storage_errors("lock organization"):
            await tx.execute(
                update(User)
                .where(User.id == org_id)
                .values(num_members=User.num_members, updated_at=User.updated_at)
                .execution_options(synchronize_session=False)
            )

    async def _insert_org_user(self, tx: AsyncSession, org_id: int, user_id: int) -> bool:
        """Insert the membership row; False if it already existed."""
        values = {"uid": user_id, "org_id": org_id}
        insert_fn = _INSERT_IGNORING_CONFLICTS.get(tx.get_bind().dialect.name)
        if insert_fn is not None:
            stmt = (
                insert_fn(OrgUser.__table__)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["uid", "org_id"])
            )
            result = await tx.execute(stmt)
            return result.rowcount > 0

        try:
            async with tx.begin_nested():
                await tx.execute(insert(OrgUser.__table__).values(**values))
        except IntegrityError:
            return False
        return True

    async def _recount_members(self, tx: AsyncSession, org_id: int) -> None:
        """
        Rewrite the organization's member counter from the live rows.

        Equivalent SQL:

            UPDATE "user"
            SET num_members = (SELECT COUNT(*) FROM org_user WHERE org_id = :org_id)
            WHERE id = :org_id
        """
        live_count = (
            select(func.count())
            .select_from(OrgUser)
            .where(OrgUser.org_id == org_id)
            .scalar_subquery()
        )
        with storage_errors('update "user.num_members"'):
            await tx.execute(
                update(User)
                .where(User.id == org_id)
                .values(num_members=live_count, updated_at=User.updated_at)
                .execution_options(synchronize_session=False)
            )

    async def _purge_repository_access(self, tx: AsyncSession, org_id: int, user_id: int) -> None:
        """Drop the user's watches and access grants on team-only repositories."""
        repo_ids = team_only_repository_ids(org_id, user_id)

        with storage_errors("unwatch repositories"):
            result = await tx.execute(
                select(Watch.repo_id).where(Watch.user_id == user_id, Watch.repo_id.in_(repo_ids))
            )
            watched = list(result.scalars().all())
            if watched:
                await tx.execute(
                    delete(Watch)
                    .where(Watch.user_id == user_id, Watch.repo_id.in_(watched))
                    .execution_options(synchronize_session=False)
                )

        if watched:
            with storage_errors('decrease "repository.num_watches"'):
                await tx.execute(
                    update(Repository)
                    .where(Repository.id.in_(watched))
                    .values(
                        num_watches=Repository.num_watches - 1,
                        updated_at=Repository.updated_at,
                    )
                    .execution_options(synchronize_session=False)
                )

        with storage_errors("delete repository accesses"):
            await tx.execute(
                delete(Access)
                .where(Access.user_id == user_id, Access.repo_id.in_(repo_ids))
                .execution_options(synchronize_session=False)
            )

    async def _leave_team(self, tx: AsyncSession, team: Team, user_id: int) -> None:
        """Delete the user's team membership and recount the team's members."""
        live_count = (
            select(func.count())
            .select_from(TeamUser)
            .where(TeamUser.team_id == team.id)
            .scalar_subquery()
        )
        with storage_errors("leave team"):
            await tx.execute(
                delete(TeamUser)
                .where(TeamUser.team_id == team.id, TeamUser.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            await tx.execute(
                update(Team)
                .where(Team.id == team.id)
                .values(num_members=live_count)
                .execution_options(synchronize_session=False)
            )

    async def _get_org_user(self, db: AsyncSession, org_id: int, user_id: int) -> OrgUser | None:
        result = await db.execute(
            select(OrgUser).where(OrgUser.org_id == org_id, OrgUser.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def _find_org_user(self, org_id: int, user_id: int) -> OrgUser | None:
        try:
            async with self.session_factory() as db:
                return await self._get_org_user(db, org_id, user_id)
        except SQLAlchemyError as exc:
            logger.debug(
                "Membership lookup failed: org_id=%s user_id=%s: %s", org_id, user_id, exc
            )
            return None

    async def _get_team_by_name(self, db: AsyncSession, org_id: int, name: str) -> Team:
        with storage_errors("get team by name"):
            result = await db.execute(
                select(Team).where(Team.org_id == org_id, Team.lower_name == name.lower())
            )
            team = result.scalar_one_or_none()
        if team is None:
            raise TeamNotFoundError(org_id, name)
        return team
