"""
User-scoped organization endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from orgmembers.core.dependencies import get_current_user_id, get_org_service
from orgmembers.schemas.organization import OrganizationResponse, UserOrganizationsResponse
from orgmembers.services.organization_service import OrganizationService

router = APIRouter()


@router.get(
    "/{user_id}/organizations",
    response_model=UserOrganizationsResponse,
    summary="List organizations a user belongs to",
)
async def list_user_organizations(
    user_id: int,
    include_private: bool = Query(default=False),
    current_user_id: int = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_org_service),
) -> UserOrganizationsResponse:
    """
    List a user's organizations.

    Private memberships are only listed when users look at themselves. total
    counts the memberships the caller is allowed to see.
    """
    include_private_members = include_private and current_user_id == user_id
    orgs = await service.list_organizations(user_id, include_private_members=include_private_members)
    if include_private_members:
        total = await service.count_by_user(user_id)
    else:
        total = len(orgs)
    return UserOrganizationsResponse(
        organizations=[OrganizationResponse.model_validate(o) for o in orgs],
        total=total,
    )
