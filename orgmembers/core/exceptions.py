"""
Error hierarchy for the organization membership engine.

Every error carries a machine-readable code and the HTTP status the API layer
maps it to. Handlers render them with to_response().
"""

from __future__ import annotations

from typing import Any


class OrgMembersError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, code: str, http_status: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> dict[str, Any]:
        return {"detail": {"code": self.code, "message": self.message}}


class LastOwnerError(OrgMembersError):
    """Removing the member would leave the organization without an owner."""

    def __init__(self, org_id: int, user_id: int) -> None:
        self.args_map = {"orgID": org_id, "userID": user_id}
        super().__init__(
            f"user is the last owner of the organization: {self.args_map}",
            "LAST_OWNER",
            409,
        )
        self.org_id = org_id
        self.user_id = user_id


class TeamNotFoundError(OrgMembersError):
    """The requested team does not exist in the organization."""

    not_found = True

    def __init__(self, org_id: int, name: str) -> None:
        self.args_map = {"orgID": org_id, "name": name}
        super().__init__(
            f"team does not exist: {self.args_map}",
            "TEAM_NOT_FOUND",
            404,
        )
        self.org_id = org_id
        self.name = name


class InvalidArgumentError(OrgMembersError):
    """Caller-supplied parameters violate a precondition."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "INVALID_ARGUMENT", 400)


class StorageError(OrgMembersError):
    """
    An underlying storage failure, wrapped with the operation that hit it.

    Raised with ``raise StorageError(...) from exc`` so the driver error stays
    available as ``__cause__``.
    """

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        message = operation if cause is None else f"{operation}: {cause}"
        super().__init__(message, "STORAGE_ERROR", 500)
        self.operation = operation
