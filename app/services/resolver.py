"""
Entity resolution by opaque id or human-readable code.

Every lookup of a user or project from a caller-supplied string goes through
``classify`` first, so the "is it an id or a code?" decision lives in one place:

* 24 hexadecimal characters           -> OpaqueId
* EMP-YYYY-XXXX (users)               -> HumanCode
* PROJ-XXX-NNN (projects)             -> HumanCode
* anything else                       -> Malformed (rejected before any query)
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from sqlmodel import Session, SQLModel, select

from app.core.errors import NotFoundError, ValidationError
from app.models.project import Project
from app.models.user import User

OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


class EntityKind(str, Enum):
    USER = "user"
    PROJECT = "project"


@dataclass(frozen=True)
class EntitySpec:
    model: Type[SQLModel]
    code_attribute: str
    code_pattern: "re.Pattern[str]"
    code_name: str
    code_format: str
    label: str


ENTITY_SPECS: Dict[EntityKind, EntitySpec] = {
    EntityKind.USER: EntitySpec(
        model=User,
        code_attribute="employee_id",
        code_pattern=re.compile(r"EMP-[0-9]{4}-[0-9]{4}"),
        code_name="employeeId",
        code_format="EMP-YYYY-XXXX",
        label="User",
    ),
    EntityKind.PROJECT: EntitySpec(
        model=Project,
        code_attribute="project_code",
        code_pattern=re.compile(r"PROJ-[A-Z0-9]{3}-[0-9]{3}"),
        code_name="projectCode",
        code_format="PROJ-XXX-XXX",
        label="Project",
    ),
}


@dataclass(frozen=True)
class OpaqueId:
    value: str


@dataclass(frozen=True)
class HumanCode:
    value: str


@dataclass(frozen=True)
class Malformed:
    value: Any


Identifier = Union[OpaqueId, HumanCode, Malformed]


def classify(identifier: Any, kind: EntityKind) -> Identifier:
    if not isinstance(identifier, str):
        return Malformed(identifier)
    if OBJECT_ID_PATTERN.fullmatch(identifier):
        return OpaqueId(identifier.lower())
    if ENTITY_SPECS[kind].code_pattern.fullmatch(identifier):
        return HumanCode(identifier)
    return Malformed(identifier)


def expected_format(kind: EntityKind) -> str:
    spec = ENTITY_SPECS[kind]
    return f"Must be a valid ObjectId (24 hex characters) or {spec.code_name} (format: {spec.code_format})"


def parse_identifier(identifier: Any, kind: EntityKind, field: Optional[str] = None) -> Union[OpaqueId, HumanCode]:
    """
    Classify ``identifier`` and reject it if it is neither an id nor a code.

    Raises:
        ValidationError: For malformed identifiers (no query is made)
    """
    parsed = classify(identifier, kind)
    if isinstance(parsed, Malformed):
        spec = ENTITY_SPECS[kind]
        name = field or f"{spec.label} ID"
        if not isinstance(identifier, str):
            raise ValidationError(f"{name} must be a string (ObjectId or {spec.code_name})")
        raise ValidationError(f'Invalid {name}: "{identifier}". {expected_format(kind)}')
    return parsed


def lookup(db: Session, parsed: Union[OpaqueId, HumanCode], kind: EntityKind):
    spec = ENTITY_SPECS[kind]
    if isinstance(parsed, OpaqueId):
        return db.get(spec.model, parsed.value)
    column = getattr(spec.model, spec.code_attribute)
    return db.exec(select(spec.model).where(column == parsed.value)).first()


def resolve(db: Session, identifier: Any, kind: EntityKind, field: Optional[str] = None):
    """
    Resolve a path parameter or payload reference to its record.

    Args:
        db: Database session
        identifier: Opaque id or human-readable code supplied by the caller
        kind: Which entity the identifier names
        field: Payload field the value came from; used in error messages

    Raises:
        ValidationError: If the identifier is malformed
        NotFoundError: If it is well-formed but nothing matches
    """
    parsed = parse_identifier(identifier, kind, field)
    record = lookup(db, parsed, kind)
    if record is None:
        if field:
            raise NotFoundError(f'{field} not found: "{identifier}"')
        raise NotFoundError(f"{ENTITY_SPECS[kind].label} not found")
    return record


def resolve_user(db: Session, identifier: Any, field: Optional[str] = None) -> User:
    return resolve(db, identifier, EntityKind.USER, field)


def resolve_project(db: Session, identifier: Any, field: Optional[str] = None) -> Project:
    return resolve(db, identifier, EntityKind.PROJECT, field)


def resolve_projects(db: Session, identifiers: List[Any], field: str) -> List[Project]:
    return [
        resolve_project(db, identifier, f"{field}[{index}]")
        for index, identifier in enumerate(identifiers)
    ]
