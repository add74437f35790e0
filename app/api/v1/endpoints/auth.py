"""
Authentication Endpoints Module

Login, current-user lookup and password rotation. Login returns a JWT bearer
token; protected routes expect it in the Authorization header.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.api import deps
from app.api.responses import success
from app.core.errors import BadRequestError
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import ChangePasswordIn, LoginIn
from app.services import auth as auth_service
from app.services.users import serialize_user
from app.validators.common import reject_query_params

router = APIRouter()


@router.post("/login", response_model=dict[str, Any])
def login(payload: Optional[LoginIn] = None, db: Session = Depends(get_db)) -> Any:
    """
    Authenticate a user and issue an access token.

    Returns:
        dict: Envelope with the token and the user's profile

    Raises:
        400: If email or password is missing
        401: INVALID_CREDENTIALS, or ACCOUNT_DISABLED for a disabled account
    """
    if payload is None:
        raise BadRequestError("Email and password are required")
    user, token = auth_service.authenticate(db, payload.email, payload.password)
    return success({"user": serialize_user(db, user)}, "Login successful", token=token)


@router.get("/me", response_model=dict[str, Any])
def read_me(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Get the current authenticated user's profile.
    """
    reject_query_params(request.query_params, "GET /auth/me")
    return success({"user": serialize_user(db, current_user)})


@router.post("/change-password", response_model=dict[str, Any])
def change_password(
    payload: Optional[ChangePasswordIn] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Change the caller's own password.

    The current password must be supplied and correct, and the new one must
    differ from it. Clears the first-login flag.
    """
    if payload is None:
        raise BadRequestError("Current password and new password are required")
    auth_service.change_password(db, current_user, payload.current_password, payload.new_password)
    return success(message="Password changed successfully")
