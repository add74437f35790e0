"""
Error Taxonomy Module

Typed application errors and the FastAPI exception handlers that turn them
(and anything unexpected) into the standard JSON envelope:

    {"status": "fail" | "error", "code": "<ERROR_CODE>", "message": "..."}
"""
import logging
import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Stable machine-readable error codes returned to API clients."""
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    FORBIDDEN = "FORBIDDEN"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


STATUS_CODE_DEFAULTS = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
    500: ErrorCode.INTERNAL_SERVER_ERROR,
}


# Pydantic error type for request-body problems reported as 400 instead of 422
BAD_REQUEST_ERROR_TYPE = "bad_request"


class AppError(Exception):
    """
    Base class for every error the API reports deliberately.

    Attributes:
        message: Human-readable description sent to the client
        status_code: HTTP status of the response
        code: Stable ErrorCode; defaults from the status code
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, code: Optional[ErrorCode] = None):
        self.message = message or self.default_message
        self.code = code or STATUS_CODE_DEFAULTS.get(self.status_code, ErrorCode.INTERNAL_SERVER_ERROR)
        super().__init__(self.message)

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class ValidationError(AppError):
    status_code = 422
    default_message = "Validation failed"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalServerError(AppError):
    pass


def error_body(status_label: str, code: str, message: str, detail: Any = None) -> Dict[str, Any]:
    body = {"status": status_label, "code": code, "message": message}
    if detail is not None:
        body["detail"] = detail
    return body


# SQLite reports "UNIQUE constraint failed: users.email"; MySQL and Postgres
# name the index, which SQLModel builds as ix_<table>_<column>.
_UNIQUE_COLUMN_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: \w+\.(\w+)"),
    re.compile(r"ix_[a-z]+_(\w+?)['\"]"),
)


def duplicate_field_name(exc: IntegrityError) -> Optional[str]:
    text = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in _UNIQUE_COLUMN_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status, exc.code.value, exc.message),
        headers=headers,
    )


def first_error_message(errors: Sequence[Mapping[str, Any]]) -> str:
    """
    Describe the first pydantic error as "<field path>: <message>".

    Model-level errors have no field path and are reported as the bare message.
    """
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = tuple(first.get("loc", ()))
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    if loc == ("body",) and first.get("type") == "missing":
        return "Request body must be a JSON object"
    location = ".".join(str(part) for part in loc if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Only the first problem is reported
    errors = exc.errors()
    if errors and errors[0].get("type") == BAD_REQUEST_ERROR_TYPE:
        status_code, code = status.HTTP_400_BAD_REQUEST, ErrorCode.BAD_REQUEST
    else:
        status_code, code = 422, ErrorCode.VALIDATION_ERROR
    return JSONResponse(
        status_code=status_code,
        content=error_body("fail", code.value, first_error_message(errors)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = STATUS_CODE_DEFAULTS.get(exc.status_code, ErrorCode.BAD_REQUEST)
    message = exc.detail if isinstance(exc.detail, str) else code.value
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("fail" if exc.status_code < 500 else "error", code.value, message),
        headers=getattr(exc, "headers", None),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    field = duplicate_field_name(exc)
    message = f"{field} already exists" if field else "Resource already exists"
    logger.warning("Unique constraint violation on %s %s: %s", request.method, request.url.path, field)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("fail", ErrorCode.CONFLICT.value, message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = repr(exc) if settings.is_development else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("error", ErrorCode.INTERNAL_SERVER_ERROR.value, "Something went wrong", detail),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
