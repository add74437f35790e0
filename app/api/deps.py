"""
API Dependencies Module

This module provides FastAPI dependency functions for authentication and
authorization. The authenticated user is returned from the dependency and
passed explicitly to services; nothing is stored on the request.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlmodel import Session

from app.core.config import settings
from app.core.errors import ErrorCode, ForbiddenError, UnauthorizedError
from app.core.permissions import Capability, has_capability
from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import User

# auto_error=False so a missing header is reported through our error envelope
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False,
)


def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(reusable_oauth2),
) -> User:
    """
    Dependency that authenticates the bearer token and loads its user.

    Checks run in a fixed order and stop at the first failure:
    1. A bearer token must be present
    2. Its signature and expiry must verify (one generic message for both)
    3. The user it names must still exist
    4. The user must be active (reported with the ACCOUNT_DISABLED code)

    Raises:
        UnauthorizedError 401: For any of the failures above
    """
    if not token:
        raise UnauthorizedError("You are not logged in! Please log in to get access.")

    try:
        user_id = decode_access_token(token)
    except JWTError:
        raise UnauthorizedError("Invalid or expired token. Please log in again.")

    user = db.get(User, user_id)
    if not user:
        raise UnauthorizedError("The user belonging to this token no longer exists.")

    if not user.is_active:
        raise UnauthorizedError("Your account has been disabled", ErrorCode.ACCOUNT_DISABLED)

    return user


class CapabilityChecker:
    """
    Dependency factory for capability checks.

    Usage: Depends(CapabilityChecker(Capability.MANAGE_USERS))
    """
    def __init__(self, capability: Capability):
        self.capability = capability

    def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        if not has_capability(current_user, self.capability):
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user


can_view_directory = CapabilityChecker(Capability.VIEW_DIRECTORY)
can_view_projects = CapabilityChecker(Capability.VIEW_PROJECTS)
can_manage_users = CapabilityChecker(Capability.MANAGE_USERS)
can_manage_projects = CapabilityChecker(Capability.MANAGE_PROJECTS)
