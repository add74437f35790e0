import logging
from typing import Tuple

from sqlmodel import Session

from app.core.errors import BadRequestError, ErrorCode, UnauthorizedError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User, utc_now_iso
from app.services.users import get_user_by_email

logger = logging.getLogger(__name__)


def authenticate(db: Session, email: str, password: str) -> Tuple[User, str]:
    """
    Check credentials and issue an access token.

    The password is verified before the active flag, so only a caller who
    knows the password learns that the account is disabled.

    Raises:
        UnauthorizedError: INVALID_CREDENTIALS or ACCOUNT_DISABLED
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        logger.warning("Failed login attempt for %s", email.strip().lower())
        raise UnauthorizedError("Invalid email or password", ErrorCode.INVALID_CREDENTIALS)
    if not user.is_active:
        raise UnauthorizedError("Your account has been disabled", ErrorCode.ACCOUNT_DISABLED)

    token = create_access_token(subject=user.id)
    logger.info("User %s logged in", user.employee_id)
    return user, token


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    """
    Rotate the caller's own password and clear the first-login flag.

    Raises:
        BadRequestError: If the current password is wrong or unchanged
    """
    if not verify_password(current_password, user.password):
        raise BadRequestError("Current password is incorrect", ErrorCode.INVALID_CREDENTIALS)
    if current_password == new_password:
        raise BadRequestError("New password must be different from the current password")

    user.password = get_password_hash(new_password)
    user.is_first_login = False
    user.updated_at = utc_now_iso()
    db.add(user)
    db.commit()
    logger.info("User %s changed their password", user.employee_id)
