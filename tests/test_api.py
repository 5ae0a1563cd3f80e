"""
HTTP adapter tests.

Run the FastAPI app over httpx's ASGI transport against the per-test
database, acting as a given user through dependency overrides.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from orgmembers.core.database import DatabaseSessionManager
from orgmembers.core.dependencies import get_db_manager
from orgmembers.main import app
from orgmembers.models import OrgUser


@pytest.fixture
async def acme(factory):
    alice = await factory.user("alice")
    bob = await factory.user("bob")
    carol = await factory.user("carol")
    dan = await factory.user("dan")
    org = await factory.org("acme", full_name="Acme Corporation", owners=[alice, bob], members=[carol])
    return org, alice, bob, carol, dan


# ---------------------------------------------------------------------------
# Health and authentication
# ---------------------------------------------------------------------------

async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "ok"


async def test_health_reports_unreachable_database(client, tmp_path):
    broken = DatabaseSessionManager(
        create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
    )
    app.dependency_overrides[get_db_manager] = lambda: broken
    try:
        response = await client.get("/health")
    finally:
        await broken.close()

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"


async def test_unauthenticated_request_is_rejected(client, acme):
    org = acme[0]

    response = await client.get(f"/api/v1/organizations/{org.id}/repositories")

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "NOT_AUTHENTICATED"


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

async def test_list_members(client, acme):
    org, alice, bob, carol, _ = acme

    response = await client.get(f"/api/v1/organizations/{org.id}/members")

    assert response.status_code == 200
    body = response.json()
    assert [m["id"] for m in body["members"]] == [alice.id, bob.id, carol.id]
    assert body["total"] == 3


async def test_owner_adds_member(client, as_user, factory, acme):
    org, alice, _, _, dan = acme
    as_user(alice)

    response = await client.put(f"/api/v1/organizations/{org.id}/members/{dan.id}")

    assert response.status_code == 204
    assert await factory.count(OrgUser, org_id=org.id, user_id=dan.id) == 1
    assert await factory.num_members(org) == 4


async def test_non_owner_cannot_add_member(client, as_user, factory, acme):
    org, _, _, carol, dan = acme
    as_user(carol)

    response = await client.put(f"/api/v1/organizations/{org.id}/members/{dan.id}")

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "NOT_AN_OWNER"
    assert await factory.count(OrgUser, org_id=org.id, user_id=dan.id) == 0


async def test_member_leaves_on_their_own(client, as_user, factory, acme):
    org, _, _, carol, _ = acme
    as_user(carol)

    response = await client.delete(f"/api/v1/organizations/{org.id}/members/{carol.id}")

    assert response.status_code == 204
    assert await factory.num_members(org) == 2


async def test_member_cannot_remove_others(client, as_user, acme):
    org, alice, _, carol, _ = acme
    as_user(carol)

    response = await client.delete(f"/api/v1/organizations/{org.id}/members/{alice.id}")

    assert response.status_code == 403


async def test_last_owner_removal_conflicts(client, as_user, acme):
    org, alice, bob, _, _ = acme
    as_user(alice)

    first = await client.delete(f"/api/v1/organizations/{org.id}/members/{bob.id}")
    second = await client.delete(f"/api/v1/organizations/{org.id}/members/{alice.id}")

    assert first.status_code == 204
    assert second.status_code == 409
    assert second.json()["detail"]["code"] == "LAST_OWNER"


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------

async def test_list_repositories(client, as_user, factory, acme):
    org, _, _, carol, _ = acme
    secret = await factory.repo(org, "secret", is_private=True)
    await factory.repo(org, "hidden", is_private=True)
    await factory.team(org, "dev", members=[carol], repos=[secret])
    as_user(carol)

    response = await client.get(f"/api/v1/organizations/{org.id}/repositories")

    assert response.status_code == 200
    body = response.json()
    assert [r["name"] for r in body["repositories"]] == ["secret"]
    assert body["total"] == 1


async def test_list_repositories_without_count(client, as_user, acme):
    org, alice, _, _, _ = acme
    as_user(alice)

    response = await client.get(
        f"/api/v1/organizations/{org.id}/repositories", params={"skip_count": "true"}
    )

    assert response.status_code == 200
    assert response.json()["total"] is None


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------

async def test_search_organizations(client, acme):
    org = acme[0]

    response = await client.get("/api/v1/organizations", params={"q": "corporation"})

    assert response.status_code == 200
    body = response.json()
    assert [o["id"] for o in body["organizations"]] == [org.id]
    assert body["organizations"][0]["num_members"] == 3
    assert body["total"] == 1


async def test_user_organizations_hide_private_memberships_from_others(client, as_user, acme):
    org, alice, _, carol, _ = acme

    as_user(alice)
    other = await client.get(f"/api/v1/users/{carol.id}/organizations", params={"include_private": "true"})
    as_user(carol)
    own = await client.get(f"/api/v1/users/{carol.id}/organizations", params={"include_private": "true"})

    assert other.json() == {"organizations": [], "total": 0}
    assert [o["id"] for o in own.json()["organizations"]] == [org.id]
    assert own.json()["total"] == 1
