"""
Admin Project Endpoints Module

Project management for holders of the MANAGE_PROJECTS capability. There is
no delete operation; use the INACTIVE or COMPLETED status instead.
"""
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.api import deps
from app.api.responses import success
from app.db.session import get_db
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services import projects as project_service
from app.validators.common import reject_query_params
from app.validators.projects import validate_project_list_query

router = APIRouter()


@router.post("", response_model=dict[str, Any], status_code=201)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_projects),
):
    """
    Create a new project with a generated project code.

    Raises:
        409: If a project with the same name already exists
    """
    project = project_service.create_project(db, payload.to_payload())
    return success({"project": project_service.serialize_project(project)}, "Project created successfully")


@router.get("", response_model=dict[str, Any])
def list_projects(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_projects),
):
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
    current_user: User = Depends(deps.can_manage_projects),
):
    reject_query_params(request.query_params, "GET /admin/projects/:id")
    project = project_service.get_project(db, identifier)
    return success({"project": project_service.serialize_project(project)})


@router.patch("/{identifier}", response_model=dict[str, Any])
def update_project(
    identifier: str,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.can_manage_projects),
):
    """
    Update a project. Renaming does not change its project code.
    """
    project = project_service.get_project(db, identifier)
    project = project_service.update_project(db, project, payload.to_payload())
    return success({"project": project_service.serialize_project(project)}, "Project updated successfully")
