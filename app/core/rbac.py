# app/core/rbac.py

from enum import Enum
from typing import Iterable

from loguru import logger

from app.core.constants import REQUEST_VISIBILITY_MAP
from app.core.exceptions import Unauthorized
from app.models.enums import UserRole


class Action(str, Enum):
    CreateRequest = "create_request"
    ListRequests = "list_requests"
    ViewRequest = "view_request"
    AddReply = "add_reply"
    AssignTechnician = "assign_technician"
    ChangeStatus = "change_status"
    ViewAnalytics = "view_analytics"
    ManageMasterData = "manage_master_data"
    ManageUsers = "manage_users"


ALL_ROLES = frozenset(UserRole)

PERMISSIONS: dict[Action, frozenset[UserRole]] = {
    Action.CreateRequest: ALL_ROLES,
    Action.ListRequests: ALL_ROLES,
    Action.ViewRequest: ALL_ROLES,
    Action.AddReply: ALL_ROLES,
    Action.AssignTechnician: frozenset({UserRole.Admin, UserRole.HOD}),
    Action.ChangeStatus: frozenset({UserRole.Admin, UserRole.HOD, UserRole.Technician}),
    Action.ViewAnalytics: frozenset({UserRole.Admin, UserRole.HOD}),
    Action.ManageMasterData: frozenset({UserRole.Admin}),
    Action.ManageUsers: frozenset({UserRole.Admin}),
}


def has_role(user, allowed: Iterable[UserRole]) -> bool:
    """Pure membership test on the user's resolved role."""
    return UserRole.parse(user.role) in set(allowed)


def can(user, action: Action) -> bool:
    return has_role(user, PERMISSIONS[action])


def require(user, action: Action) -> None:
    if not can(user, action):
        logger.warning(
            f"Access denied: user {user.id} ({UserRole.parse(user.role).value}) -> {action.value}"
        )
        raise Unauthorized(f"Access denied for role '{UserRole.parse(user.role).value}'")


def visibility_scope(user) -> str:
    return REQUEST_VISIBILITY_MAP[UserRole.parse(user.role)]
