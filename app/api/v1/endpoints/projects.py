"""
Project Endpoints Module

Read-only project endpoints available to every authenticated user. Projects
can be addressed by internal id or by project code (PROJ-XXX-NNN).
"""
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.api import deps
from app.api.responses import success
from app.db.session import get_db
from app.models.user import User
from app.services import projects as project_service
from app.validators.common import reject_query_params
from app.validators.projects import validate_project_list_query

router = APIRouter()


@router.get("", response_model=dict[str, Any])
def list_projects(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_view_projects),
):
    """
    Retrieve projects, newest first.

    Query parameters:
        status: ACTIVE, INACTIVE, COMPLETED or ON_HOLD
        search: case-insensitive match on name, project code or client name
    """
    params = request.query_params
    validate_project_list_query(params)
    projects = project_service.list_projects(db, status=params.get("status") or None, search=params.get("search"))
    return success(
        {"projects": [project_service.serialize_project(p) for p in projects]},
        results=len(projects),
    )


@router.get("/{identifier}", response_model=dict[str, Any])
def read_project(
    identifier: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_view_projects),
):
    """
    Get a specific project by internal id or project code.

    Raises:
        422: If the identifier is neither an id nor a project code
        404: If no project matches
    """
    reject_query_params(request.query_params, "GET /projects/:id")
    project = project_service.get_project(db, identifier)
    return success({"project": project_service.serialize_project(project)})
