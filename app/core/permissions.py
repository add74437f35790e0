"""
Role Capabilities

Every role maps to an explicit set of capabilities. Endpoints require a
capability, never a role name, so granting a new role access is a change to
ROLE_CAPABILITIES only.
"""
from enum import Enum
from typing import Dict, FrozenSet

from app.core.errors import ForbiddenError
from app.models.user import User, UserRole


class Capability(str, Enum):
    VIEW_DIRECTORY = "view_directory"
    VIEW_PROJECTS = "view_projects"
    MANAGE_USERS = "manage_users"
    MANAGE_PROJECTS = "manage_projects"


ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[Capability]] = {
    UserRole.ADMIN: frozenset(Capability),
    UserRole.MANAGER: frozenset({Capability.VIEW_DIRECTORY, Capability.VIEW_PROJECTS}),
    UserRole.EMPLOYEE: frozenset({Capability.VIEW_DIRECTORY, Capability.VIEW_PROJECTS}),
}

_unmapped = set(UserRole) - set(ROLE_CAPABILITIES)
if _unmapped:
    raise RuntimeError(f"Roles without a capability entry: {sorted(r.value for r in _unmapped)}")


# Request-body field names (camelCase, as clients send them)
SELF_PROFILE_FIELDS: FrozenSet[str] = frozenset({
    "firstName", "lastName", "email", "phone", "skills",
})

ADMIN_USER_FIELDS: FrozenSet[str] = frozenset({
    "firstName", "lastName", "phone", "skills",
    "role", "designation", "department", "manager",
    "currentProject", "pastProjects", "dateOfJoining",
    "totalExperience", "location", "isActive",
})


def has_capability(user: User, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES[UserRole(user.role)]


def editable_user_fields(actor: User, target: User) -> FrozenSet[str]:
    """
    Pick the field allow-list ``actor`` may change on ``target``.

    User managers get the administrative set (even on their own record);
    everyone else may only touch their own profile fields.
    """
    if has_capability(actor, Capability.MANAGE_USERS):
        return ADMIN_USER_FIELDS
    if actor.id == target.id:
        return SELF_PROFILE_FIELDS
    raise ForbiddenError("You do not have permission to update this user")
