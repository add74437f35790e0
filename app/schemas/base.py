from typing import Any, Dict, Iterable

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from app.core.errors import BAD_REQUEST_ERROR_TYPE, first_error_message


class CamelModel(BaseModel):
    """Schemas read from ORM objects and serialized with camelCase keys."""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def unknown_fields_message(unknown: Iterable[str], allowed: Iterable[str]) -> str:
    return (
        f"Request body does not accept the following field(s): {', '.join(unknown)}. "
        f"Allowed fields: {', '.join(sorted(allowed))}"
    )


class CamelInput(CamelModel):
    """
    Request bodies: a JSON object with camelCase keys only.

    Unknown keys are reported together with the allowed set, before any field
    is validated.
    """
    model_config = ConfigDict(extra="forbid", from_attributes=False, populate_by_name=False)

    @model_validator(mode="before")
    @classmethod
    def _reject_unknown_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise PydanticCustomError("model_type", "Request body must be a JSON object")
        allowed = [field.alias or name for name, field in cls.model_fields.items()]
        unknown = [key for key in data if key not in allowed]
        if unknown:
            raise PydanticCustomError("extra_forbidden", unknown_fields_message(unknown, allowed))
        return data

    def to_payload(self) -> Dict[str, Any]:
        """The fields the client sent, keyed by their camelCase names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class UpdateInput(CamelInput):
    """Partial updates: at least one field must be present."""

    @model_validator(mode="after")
    def _require_a_field(self):
        if not self.model_fields_set:
            raise PydanticCustomError("empty_body", "Request body must contain at least one field")
        return self


class BadRequestInput(CamelInput):
    """
    Credential bodies (login, password change): malformed input is a 400.

    Unknown fields stay a 422 like on every other endpoint.
    """

    @model_validator(mode="wrap")
    @classmethod
    def _as_bad_request(cls, data: Any, handler):
        try:
            return handler(data)
        except ValidationError as exc:
            errors = exc.errors()
            error_type = errors[0]["type"] if errors else BAD_REQUEST_ERROR_TYPE
            if error_type != "extra_forbidden":
                error_type = BAD_REQUEST_ERROR_TYPE
            raise PydanticCustomError(error_type, first_error_message(errors)) from None
