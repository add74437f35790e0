"""
Query-string validation for the user listing endpoints.
"""
from typing import Mapping

from app.core.errors import ValidationError
from app.models.user import UserRole
from app.validators.common import check_choice, check_non_empty_search, reject_unknown_query_params

ROLE_VALUES = [role.value for role in UserRole]

USER_LIST_QUERY_PARAMS = ("role", "isActive", "search")


def validate_user_list_query(params: Mapping[str, str]) -> None:
    reject_unknown_query_params(params, USER_LIST_QUERY_PARAMS)
    role = params.get("role")
    if role:
        check_choice(role, ROLE_VALUES, "role")
    is_active = params.get("isActive")
    if is_active and is_active.lower() not in ("true", "false"):
        raise ValidationError(
            f'Invalid isActive value: "{is_active}". isActive must be "true" or "false"'
        )
    check_non_empty_search(params)
