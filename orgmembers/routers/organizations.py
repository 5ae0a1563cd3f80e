"""
Organization endpoints.

Directory search, member management and the repositories a member can see.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from orgmembers.core.config import settings
from orgmembers.core.dependencies import (
    get_access_service,
    get_current_user_id,
    get_org_service,
    require_org_owner,
)
from orgmembers.schemas.organization import (
    MemberResponse,
    MembersListResponse,
    OrganizationResponse,
    OrganizationSearchResponse,
    RepositoryListResponse,
    RepositoryResponse,
)
from orgmembers.services.access_service import AccessService
from orgmembers.services.organization_service import OrganizationService

router = APIRouter()


# ---------------------------------------------------------------------------
# Search Organizations
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=OrganizationSearchResponse,
    summary="Search organizations by name",
)
async def search_organizations(
    q: str = Query(default="", max_length=100),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationSearchResponse:
    """Case-insensitive match on username and full name, newest first."""
    orgs, total = await service.search_by_name(q, page, page_size, order_by="id DESC")
    return OrganizationSearchResponse(
        organizations=[OrganizationResponse.model_validate(o) for o in orgs],
        total=total,
        page=page,
        page_size=page_size,
    )


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

@router.get(
    "/{org_id}/members",
    response_model=MembersListResponse,
    summary="List organization members",
)
async def list_members(
    org_id: int,
    limit: int = Query(default=0, ge=0),
    service: OrganizationService = Depends(get_org_service),
) -> MembersListResponse:
    """List members ordered by user id. limit=0 returns everyone."""
    members = await service.list_members(org_id, limit=limit)
    return MembersListResponse(
        members=[MemberResponse.model_validate(m) for m in members],
        total=len(members),
    )


@router.put(
    "/{org_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Add a member",
)
async def add_member(
    org_id: int,
    user_id: int,
    _: int = Depends(require_org_owner),
    service: OrganizationService = Depends(get_org_service),
) -> None:
    """Add a user to the organization. Requires Owner. Re-adding is a no-op."""
    await service.add_member(org_id, user_id)


@router.delete(
    "/{org_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member",
)
async def remove_member(
    org_id: int,
    user_id: int,
    current_user_id: int = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_org_service),
) -> None:
    """
    Remove a member from the organization.

    - Owners may remove anyone; members may remove themselves
    - Removing the last owner is rejected with 409
    """
    if current_user_id != user_id and not await service.is_owned_by(org_id, current_user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "NOT_AN_OWNER", "message": "Organization owner required"},
        )
    await service.remove_member(org_id, user_id)


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------

@router.get(
    "/{org_id}/repositories",
    response_model=RepositoryListResponse,
    summary="List repositories the current user can access",
)
async def list_repositories(
    org_id: int,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    skip_count: bool = Query(default=False),
    current_user_id: int = Depends(get_current_user_id),
    service: AccessService = Depends(get_access_service),
) -> RepositoryListResponse:
    """Repositories visible organization-wide or granted to one of the user's teams."""
    repos, total = await service.accessible_repositories_by_user(
        org_id, current_user_id, page, page_size, skip_count=skip_count
    )
    return RepositoryListResponse(
        repositories=[RepositoryResponse.model_validate(r) for r in repos],
        total=None if skip_count else total,
        page=page,
        page_size=page_size,
    )
