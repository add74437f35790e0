"""
Project Service Module

Projects are created and updated by administrators; every authenticated user
can list and read them.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from app.core.errors import ConflictError, ValidationError
from app.models.project import Project, ProjectStatus
from app.models.user import utc_now_iso
from app.schemas.project import ProjectRead
from app.services.codes import generate_project_code, insert_with_generated_code
from app.services.resolver import resolve_project

logger = logging.getLogger(__name__)

# Request field -> model attribute
TEXT_FIELDS: Dict[str, str] = {
    "name": "name",
    "description": "description",
    "clientName": "client_name",
}
DATE_FIELDS: Dict[str, str] = {
    "startDate": "start_date",
    "endDate": "end_date",
}

SEARCH_COLUMNS = (Project.name, Project.project_code, Project.client_name)


def serialize_project(project: Project) -> dict:
    return ProjectRead.model_validate(project).to_json()


def get_project_by_name(db: Session, name: str) -> Optional[Project]:
    statement = select(Project).where(func.lower(Project.name) == name.strip().lower())
    return db.exec(statement).first()


def _ensure_name_available(db: Session, name: str) -> None:
    if get_project_by_name(db, name):
        raise ConflictError("Project with this name already exists")


def _field_values(payload: Mapping[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field, attribute in TEXT_FIELDS.items():
        if field in payload:
            value = payload[field]
            values[attribute] = value.strip() if isinstance(value, str) else value
    for field, attribute in DATE_FIELDS.items():
        if field in payload:
            values[attribute] = payload[field]
    if payload.get("status"):
        values["status"] = ProjectStatus(payload["status"])
    return values


def create_project(db: Session, payload: Mapping[str, Any]) -> Project:
    """
    Create a project with a generated PROJ-XXX-NNN code.

    Raises:
        ConflictError: If a project with the same name (case-insensitive) exists
    """
    name = payload["name"].strip()
    _ensure_name_available(db, name)
    values = _field_values(payload)

    project = insert_with_generated_code(
        db,
        build=lambda: Project(project_code=generate_project_code(db, name), **values),
        check_duplicates=lambda: _ensure_name_available(db, name),
        label="project",
    )
    logger.info("Created project %s (%s)", project.project_code, project.id)
    return project


def list_projects(db: Session, status: Optional[str] = None, search: Optional[str] = None) -> List[Project]:
    statement = select(Project)
    if status:
        statement = statement.where(Project.status == ProjectStatus(status))
    if search:
        term = search.strip().lower()
        statement = statement.where(
            or_(*(func.lower(column).contains(term, autoescape=True) for column in SEARCH_COLUMNS))
        )
    statement = statement.order_by(col(Project.created_at).desc())
    return list(db.exec(statement).all())


def get_project(db: Session, identifier: str) -> Project:
    return resolve_project(db, identifier)


def update_project(db: Session, project: Project, payload: Mapping[str, Any]) -> Project:
    """
    Update a project in place. Renaming keeps the existing project code.

    Raises:
        ValidationError: If the resulting endDate precedes the startDate
    """
    values = _field_values(payload)
    # A partial update is checked against the stored date it leaves in place
    start = values.get("start_date", project.start_date)
    end = values.get("end_date", project.end_date)
    if start and end and end < start:
        raise ValidationError("endDate cannot be earlier than startDate")
    for attribute, value in values.items():
        setattr(project, attribute, value)
    project.updated_at = utc_now_iso()
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Updated project %s", project.project_code)
    return project
