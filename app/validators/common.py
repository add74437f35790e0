"""
Shared request checks.

Request bodies are parsed by the models in ``app.schemas``; the checks here
cover what those models cannot see: query strings, and the per-caller field
allow-list of ``PATCH /users/{id}``. The first violated rule raises.
"""
from typing import Any, Iterable, Mapping

from app.core.errors import ValidationError
from app.schemas.base import unknown_fields_message


def reject_unknown_fields(payload: Mapping[str, Any], allowed: Iterable[str]) -> None:
    allowed = set(allowed)
    unknown = [field for field in payload if field not in allowed]
    if unknown:
        raise ValidationError(unknown_fields_message(unknown, allowed))


def reject_query_params(params: Mapping[str, Any], endpoint: str) -> None:
    if params:
        raise ValidationError(
            f"{endpoint} does not accept query parameters. Received: {', '.join(params)}"
        )


def reject_unknown_query_params(params: Mapping[str, Any], allowed: Iterable[str]) -> None:
    allowed = sorted(allowed)
    unknown = [param for param in params if param not in allowed]
    if unknown:
        raise ValidationError(
            f"Invalid query parameter(s): {', '.join(unknown)}. "
            f"Allowed parameters are: {', '.join(allowed)}"
        )


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_choice(value: str, choices: Iterable[str], param: str) -> None:
    choices = list(choices)
    if value not in choices:
        raise ValidationError(
            f'Invalid {param} value: "{value}". {param} must be one of: {", ".join(choices)}'
        )


def check_non_empty_search(params: Mapping[str, Any]) -> None:
    if "search" in params and is_blank(params["search"]):
        raise ValidationError("Search parameter must be a non-empty string")
