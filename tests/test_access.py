"""
Repository access query tests.

A member sees every publicly visible repository of the organization plus
the ones granted to their teams, each exactly once, newest first.
"""

from datetime import datetime, timedelta

import pytest

from orgmembers.models import Repository


BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
async def org_with_repos(factory):
    alice = await factory.user("alice")
    dan = await factory.user("dan")
    org = await factory.org("acme", owners=[alice], members=[dan])
    other = await factory.org("globex", owners=[alice])

    public = await factory.repo(org, "public", updated_at=BASE_TIME)
    private = await factory.repo(org, "private", is_private=True, updated_at=BASE_TIME + timedelta(hours=1))
    unlisted = await factory.repo(org, "unlisted", is_unlisted=True, updated_at=BASE_TIME + timedelta(hours=2))
    hidden = await factory.repo(org, "hidden", is_private=True, updated_at=BASE_TIME + timedelta(hours=3))
    foreign = await factory.repo(other, "foreign", updated_at=BASE_TIME + timedelta(hours=4))

    await factory.team(org, "dev", members=[dan], repos=[private, unlisted])
    await factory.team(org, "ops", members=[dan], repos=[private, public])

    return {
        "org": org,
        "dan": dan,
        "alice": alice,
        "public": public,
        "private": private,
        "unlisted": unlisted,
        "hidden": hidden,
        "foreign": foreign,
    }


async def test_union_without_duplicates(access_service, org_with_repos):
    d = org_with_repos

    repos, total = await access_service.accessible_repositories_by_user(
        d["org"].id, d["dan"].id, page=1, page_size=10
    )

    assert [r.name for r in repos] == ["unlisted", "private", "public"]
    assert total == 3


async def test_user_without_teams_sees_public_only(access_service, org_with_repos):
    d = org_with_repos

    repos, total = await access_service.accessible_repositories_by_user(
        d["org"].id, d["alice"].id, page=1, page_size=10
    )

    assert [r.name for r in repos] == ["public"]
    assert total == 1


async def test_ties_on_updated_at_break_by_id(access_service, factory):
    alice = await factory.user("alice")
    org = await factory.org("acme", owners=[alice])
    first = await factory.repo(org, "first", updated_at=BASE_TIME)
    second = await factory.repo(org, "second", updated_at=BASE_TIME)

    repos, _ = await access_service.accessible_repositories_by_user(org.id, alice.id, 1, 10)

    assert [r.id for r in repos] == [second.id, first.id]


async def test_pagination(access_service, org_with_repos):
    d = org_with_repos

    page1, total1 = await access_service.accessible_repositories_by_user(d["org"].id, d["dan"].id, 1, 2)
    page2, total2 = await access_service.accessible_repositories_by_user(d["org"].id, d["dan"].id, 2, 2)
    page3, _ = await access_service.accessible_repositories_by_user(d["org"].id, d["dan"].id, 3, 2)

    assert [r.name for r in page1] == ["unlisted", "private"]
    assert [r.name for r in page2] == ["public"]
    assert page3 == []
    assert total1 == total2 == 3


async def test_non_positive_page_size_returns_everything(access_service, org_with_repos):
    d = org_with_repos

    repos, total = await access_service.accessible_repositories_by_user(d["org"].id, d["dan"].id, 1, 0)

    assert len(repos) == 3
    assert total == 3


async def test_skip_count(access_service, org_with_repos):
    d = org_with_repos

    repos, total = await access_service.accessible_repositories_by_user(
        d["org"].id, d["dan"].id, 1, 1, skip_count=True
    )

    assert [r.name for r in repos] == ["unlisted"]
    assert total == 0


async def test_private_team_repo_scenario(access_service, factory):
    alice = await factory.user("alice")
    dan = await factory.user("dan")
    org = await factory.org("acme", owners=[alice], members=[dan])
    r1 = await factory.repo(org, "r1", is_private=True)
    await factory.team(org, "t1", members=[dan], repos=[r1])

    repos, total = await access_service.accessible_repositories_by_user(org.id, dan.id, 1, 10)
    assert [r.id for r in repos] == [r1.id]
    assert total == 1

    outsider, total = await access_service.accessible_repositories_by_user(org.id, alice.id, 1, 10)
    assert outsider == []
    assert total == 0


async def test_visibility_toggle_for_non_member(access_service, factory, session_factory):
    alice = await factory.user("alice")
    dan = await factory.user("dan")
    acme = await factory.org("acme", owners=[alice])
    r1 = await factory.repo(acme, "r1", is_private=True)
    await factory.team(acme, "devs", members=[alice], repos=[r1])

    repos, total = await access_service.accessible_repositories_by_user(acme.id, dan.id, 1, 10)
    assert repos == []
    assert total == 0

    async with session_factory.begin() as db:
        stored = await db.get(Repository, r1.id)
        stored.is_private = False
        stored.is_unlisted = False

    repos, total = await access_service.accessible_repositories_by_user(acme.id, dan.id, 1, 10)
    assert [r.id for r in repos] == [r1.id]
    assert total == 1
