"""
Constrained field types shared by the request models.

Each type carries its own rule, so the models in ``app.schemas.user`` and
``app.schemas.project`` read as plain field declarations.
"""
import re
from datetime import date, datetime
from typing import Annotated, Any, List

from pydantic import AfterValidator, BeforeValidator, EmailStr, Field, StringConstraints
from pydantic_core import PydanticCustomError

from app.services.resolver import EntityKind, Malformed, classify, expected_format

MIN_PASSWORD_LENGTH = 6

PHONE_PATTERN = re.compile(
    r"[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}",
    re.ASCII,
)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _check_phone(value: str) -> str:
    if value and not PHONE_PATTERN.fullmatch(value):
        raise PydanticCustomError("phone", "Please provide a valid phone number")
    return value


def _check_identifier(kind: EntityKind, value: str) -> str:
    if isinstance(classify(value, kind), Malformed):
        raise PydanticCustomError(
            "identifier",
            'Invalid identifier "{value}". {expected}',
            {"value": value, "expected": expected_format(kind)},
        )
    return value


def _check_user_ref(value: str) -> str:
    return _check_identifier(EntityKind.USER, value)


def _check_project_ref(value: str) -> str:
    return _check_identifier(EntityKind.PROJECT, value)


def _coerce_date(value: Any) -> Any:
    """Accept YYYY-MM-DD or a full ISO-8601 timestamp."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise PydanticCustomError("date_type", "Expected an ISO-8601 date string")
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise PydanticCustomError(
            "date_format",
            'Invalid date "{value}". Expected an ISO-8601 date (YYYY-MM-DD)',
            {"value": value},
        ) from None


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Text = Annotated[str, StringConstraints(strip_whitespace=True)]
Email = Annotated[EmailStr, BeforeValidator(_strip)]
Password = Annotated[str, Field(min_length=MIN_PASSWORD_LENGTH)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True), AfterValidator(_check_phone)]
Skills = List[Name]
Experience = Annotated[float, Field(ge=0, strict=True, allow_inf_nan=False)]
IsoDate = Annotated[date, BeforeValidator(_coerce_date)]

UserRef = Annotated[str, AfterValidator(_check_user_ref)]
ProjectRef = Annotated[str, AfterValidator(_check_project_ref)]
