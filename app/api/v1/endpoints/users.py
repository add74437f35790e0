"""
User Endpoints Module

Employee directory, self-registration and profile management. Users can be
addressed by internal id or by employee code (EMP-YYYY-XXXX) anywhere an
identifier is accepted.
"""
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.api import deps
from app.api.responses import success
from app.core.permissions import editable_user_fields
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import ProfileUpdate, RegistrationIn, UserUpdate
from app.services import users as user_service
from app.validators.common import reject_query_params, reject_unknown_fields

router = APIRouter()


@router.get("", response_model=dict[str, Any])
def read_users(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_view_directory),
) -> Any:
    """
    Employee directory: every user, newest first.

    Does not accept query parameters; filtering is an admin feature.
    """
    reject_query_params(request.query_params, "GET /users")
    users = user_service.list_users(db)
    return success({"users": user_service.serialize_users(db, users)}, results=len(users))


@router.post("", response_model=dict[str, Any], status_code=201)
def register_user(payload: RegistrationIn, db: Session = Depends(get_db)) -> Any:
    """
    Register a new account.

    Registration accepts name, email, password, phone and skills only; the new
    user is an EMPLOYEE with a generated employee code.

    Raises:
        409: If a user with this email already exists
    """
    user = user_service.register_user(db, payload.to_payload())
    return success({"user": user_service.serialize_user(db, user)}, "User registered successfully")


@router.get("/me", response_model=dict[str, Any])
def read_user_me(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Get the current authenticated user's profile.
    """
    reject_query_params(request.query_params, "GET /users/me")
    return success({"user": user_service.serialize_user(db, current_user)})


@router.patch("/me", response_model=dict[str, Any])
def update_user_me(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Update the current user's own profile.

    Only firstName, lastName, email, phone and skills may be changed here;
    any other field is rejected whatever the caller's role.
    """
    user = user_service.update_my_profile(db, current_user, payload.to_payload())
    return success({"user": user_service.serialize_user(db, user)}, "Profile updated successfully")


@router.get("/{identifier}", response_model=dict[str, Any])
def read_user(
    identifier: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_view_directory),
) -> Any:
    """
    Get a specific user by internal id or employee code.

    Raises:
        422: If the identifier is neither an id nor an employee code
        404: If no user matches
    """
    reject_query_params(request.query_params, "GET /users/:id")
    user = user_service.get_user(db, identifier)
    return success({"user": user_service.serialize_user(db, user)})


@router.patch("/{identifier}", response_model=dict[str, Any])
def update_user(
    identifier: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Update a user by internal id or employee code.

    Users with the MANAGE_USERS capability may change administrative fields;
    anyone else may only change their own profile fields.

    Raises:
        403: If the caller may not edit this user
    """
    target = user_service.get_user(db, identifier)
    allowed = editable_user_fields(current_user, target)
    data = payload.to_payload()
    reject_unknown_fields(data, allowed)
    user = user_service.update_user(db, target, data, current_user, allowed)
    return success({"user": user_service.serialize_user(db, user)}, "User updated successfully")
