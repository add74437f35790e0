from typing import Optional

from pydantic import Field, model_validator
from pydantic_core import PydanticCustomError

from app.core.errors import BAD_REQUEST_ERROR_TYPE
from app.schemas.base import BadRequestInput
from app.schemas.fields import MIN_PASSWORD_LENGTH


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class LoginIn(BadRequestInput):
    email: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode="after")
    def _require_credentials(self):
        if _is_blank(self.email) or _is_blank(self.password):
            raise PydanticCustomError(BAD_REQUEST_ERROR_TYPE, "Email and password are required")
        return self


class ChangePasswordIn(BadRequestInput):
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH)

    @model_validator(mode="after")
    def _require_both(self):
        if _is_blank(self.current_password) or _is_blank(self.new_password):
            raise PydanticCustomError(BAD_REQUEST_ERROR_TYPE, "Current password and new password are required")
        return self
