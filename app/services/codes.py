"""
Human-readable code generation.

Employee codes look like ``EMP-2025-0001`` (sequence per calendar year) and
project codes like ``PROJ-CRM-001`` (sequence per three-character name
prefix). The next code is found by reading the greatest existing code in the
scope and incrementing it; the unique index on the code column turns a race
between two writers into an IntegrityError, which callers retry.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, col, select

from app.core.config import settings
from app.core.errors import BadRequestError, ConflictError
from app.models.project import Project
from app.models.user import User

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=SQLModel)

EMPLOYEE_SEQUENCE_WIDTH = 4
PROJECT_SEQUENCE_WIDTH = 3
PROJECT_PREFIX_LENGTH = 3

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def project_name_prefix(name: str) -> str:
    """
    Derive the three-character code prefix from a project name.

    >>> project_name_prefix("Customer Portal")
    'CUS'
    >>> project_name_prefix("a-i")
    'AIX'
    """
    if not name or not name.strip():
        raise BadRequestError("Project name is required to generate project code")
    cleaned = _NON_ALPHANUMERIC.sub("", name.strip())
    return cleaned[:PROJECT_PREFIX_LENGTH].upper().ljust(PROJECT_PREFIX_LENGTH, "X")


def next_sequence(latest_code: Optional[str], prefix: str) -> int:
    if not latest_code:
        return 1
    return int(latest_code[len(prefix):]) + 1


def format_code(prefix: str, sequence: int, width: int) -> str:
    if sequence >= 10 ** width:
        raise ConflictError(f"No codes left in the {prefix}* sequence")
    return f"{prefix}{sequence:0{width}d}"


def _latest_code(db: Session, column, prefix: str) -> Optional[str]:
    statement = (
        select(column)
        .where(col(column).startswith(prefix, autoescape=True))
        .order_by(col(column).desc())
        .limit(1)
    )
    return db.exec(statement).first()


def generate_employee_code(db: Session, year: Optional[int] = None) -> str:
    """
    Return the next free employee code for ``year`` (default: the current year).
    """
    if year is None:
        year = datetime.now(timezone.utc).year
    prefix = f"EMP-{year}-"
    latest = _latest_code(db, User.employee_id, prefix)
    return format_code(prefix, next_sequence(latest, prefix), EMPLOYEE_SEQUENCE_WIDTH)


def generate_project_code(db: Session, name: str) -> str:
    """
    Return the next free project code for the prefix derived from ``name``.

    Raises:
        BadRequestError: If the name is empty or whitespace only
    """
    prefix = f"PROJ-{project_name_prefix(name)}-"
    latest = _latest_code(db, Project.project_code, prefix)
    return format_code(prefix, next_sequence(latest, prefix), PROJECT_SEQUENCE_WIDTH)


def insert_with_generated_code(
    db: Session,
    build: Callable[[], RecordT],
    check_duplicates: Callable[[], None],
    label: str,
) -> RecordT:
    """
    Insert the record returned by ``build``, retrying when its code collides.

    ``build`` must generate a fresh code on every call. When the insert hits a
    unique index, ``check_duplicates`` is run first so a clash on another unique
    field (e.g. an email registered concurrently) is reported as such rather than
    retried. After CODE_ALLOCATION_ATTEMPTS collisions the caller gets a Conflict.
    """
    attempts = max(1, settings.CODE_ALLOCATION_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        record = build()
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            check_duplicates()
            logger.warning("%s code collision on attempt %d/%d", label, attempt, attempts)
            continue
        db.refresh(record)
        return record
    raise ConflictError(f"Could not allocate a unique {label} code, please retry")
