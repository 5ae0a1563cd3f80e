"""
FastAPI dependency injection functions.

Provides the engine services and the acting user. Authentication happens
upstream: whatever authenticates the request stores the user id on
request.state.user_id before it reaches these routes.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from orgmembers.core.database import DatabaseSessionManager
from orgmembers.services.access_service import AccessService
from orgmembers.services.organization_service import OrganizationService

# ---------------------------------------------------------------------------
# Storage and services
# ---------------------------------------------------------------------------


def get_db_manager(request: Request) -> DatabaseSessionManager:
    """Return the DatabaseSessionManager created by the application lifespan."""
    db: DatabaseSessionManager | None = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("Database not initialized")
    return db


def get_org_service(
    db: DatabaseSessionManager = Depends(get_db_manager),
) -> OrganizationService:
    """Dependency that constructs OrganizationService."""
    return OrganizationService(session_factory=db.session_factory)


def get_access_service(
    db: DatabaseSessionManager = Depends(get_db_manager),
) -> AccessService:
    """Dependency that constructs AccessService."""
    return AccessService(session_factory=db.session_factory)


# ---------------------------------------------------------------------------
# Acting user
# ---------------------------------------------------------------------------


async def get_current_user_id(request: Request) -> int:
    """
    Return the id of the authenticated user.

    Raises 401 if upstream authentication did not identify a user.
    """
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "NOT_AUTHENTICATED", "message": "Authentication required"},
        )
    return int(user_id)


async def require_org_owner(
    org_id: int,
    current_user_id: int = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_org_service),
) -> int:
    """Allow the request only if the acting user owns the organization."""
    if not await service.is_owned_by(org_id, current_user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "NOT_AN_OWNER", "message": "Organization owner required"},
        )
    return current_user_id
