"""
Organization schemas.

Response models for organization, member and repository listing endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class OrganizationResponse(BaseModel):
    """Organization view over a user row of the organization type."""

    id: int
    name: str
    full_name: str
    num_members: int
    num_teams: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationSearchResponse(BaseModel):
    """Response for GET /organizations."""

    organizations: list[OrganizationResponse]
    total: int
    page: int
    page_size: int


class UserOrganizationsResponse(BaseModel):
    """Response for GET /users/{user_id}/organizations."""

    organizations: list[OrganizationResponse]
    total: int


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class MemberResponse(BaseModel):
    """A member of an organization."""

    id: int
    name: str
    full_name: str
    email: str

    model_config = {"from_attributes": True}


class MembersListResponse(BaseModel):
    """Response for GET /organizations/{org_id}/members."""

    members: list[MemberResponse]
    total: int


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------

class RepositoryResponse(BaseModel):
    """Repository summary as seen by an organization member."""

    id: int
    owner_id: int
    name: str
    description: str
    is_private: bool
    is_unlisted: bool
    num_watches: int
    updated_at: datetime

    model_config = {"from_attributes": True}


class RepositoryListResponse(BaseModel):
    """
    Response for GET /organizations/{org_id}/repositories.

    total is None when the caller asked to skip counting.
    """

    repositories: list[RepositoryResponse]
    total: int | None
    page: int
    page_size: int
