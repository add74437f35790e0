"""
Admin User Endpoints Module

User management for holders of the MANAGE_USERS capability: creation with a
generated employee code, filtered listing, updates, enabling/disabling
accounts and password resets. Users are never deleted; disable them instead.
"""
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.api import deps
from app.api.responses import success
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import AdminUserCreate, AdminUserUpdate, ResetPasswordIn, StatusIn
from app.services import users as user_service
from app.validators.common import reject_query_params
from app.validators.users import validate_user_list_query

router = APIRouter()


@router.post("", response_model=dict[str, Any], status_code=201)
def create_user(
    payload: AdminUserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_users),
) -> Any:
    """
    Create a new user.

    The password is hashed, an employee code is generated, and optional
    ``manager`` / ``currentProject`` references (id or code) are resolved.

    Raises:
        409: If a user with this email already exists
        404: If a referenced manager or project does not exist
    """
    user = user_service.create_user(db, payload.to_payload())
    return success({"user": user_service.serialize_user(db, user)}, "User created successfully")


@router.get("", response_model=dict[str, Any])
def read_users(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_users),
) -> Any:
    """
    List users with optional filters.

    Query parameters:
        role: ADMIN, MANAGER or EMPLOYEE
        isActive: "true" or "false"
        search: case-insensitive match on name, email or employee code
    """
    params = request.query_params
    validate_user_list_query(params)
    is_active = params.get("isActive")
    users = user_service.list_users(
        db,
        role=params.get("role") or None,
        is_active=is_active.lower() == "true" if is_active else None,
        search=params.get("search"),
    )
    return success({"users": user_service.serialize_users(db, users)}, results=len(users))


@router.get("/{identifier}", response_model=dict[str, Any])
def read_user(
    identifier: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_users),
) -> Any:
    reject_query_params(request.query_params, "GET /admin/users/:id")
    user = user_service.get_user(db, identifier)
    return success({"user": user_service.serialize_user(db, user)})


@router.patch("/{identifier}", response_model=dict[str, Any])
def update_user(
    identifier: str,
    payload: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_users),
) -> Any:
    """
    Update administrative fields of a user.

    ``pastProjects`` entries are merged into the existing list rather than
    replacing it; ``manager`` and ``currentProject`` accept null to clear them.
    """
    target = user_service.get_user(db, identifier)
    user = user_service.update_user(db, target, payload.to_payload(), current_user)
    return success({"user": user_service.serialize_user(db, user)}, "User updated successfully")


@router.patch("/{identifier}/status", response_model=dict[str, Any])
def update_user_status(
    identifier: str,
    payload: StatusIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_users),
) -> Any:
    """
    Enable or disable a user account. Disabled users cannot log in and their
    existing tokens stop working.
    """
    target = user_service.get_user(db, identifier)
    is_active = payload.is_active
    user = user_service.update_user_status(db, target, is_active, current_user)
    return success(
        {"user": user_service.serialize_user(db, user)},
        f"User {'enabled' if is_active else 'disabled'} successfully",
    )


@router.post("/{identifier}/reset-password", response_model=dict[str, Any])
def reset_password(
    identifier: str,
    payload: ResetPasswordIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_users),
) -> Any:
    """
    Set a new password for a user and require them to change it at next login.
    """
    target = user_service.get_user(db, identifier)
    user_service.reset_password(db, target, payload.new_password)
    return success(message="Password reset successfully")
