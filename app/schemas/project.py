from datetime import date
from typing import Optional

from pydantic import model_validator
from pydantic_core import PydanticCustomError

from app.models.project import ProjectStatus
from app.schemas.base import CamelInput, CamelModel, UpdateInput
from app.schemas.fields import IsoDate, Name, Text


# Embedded in user responses (currentProject, pastProjects)
class ProjectSummary(CamelModel):
    id: str
    name: str
    project_code: Optional[str] = None


# Properties to return to client
class ProjectRead(CamelModel):
    id: str
    project_code: Optional[str] = None
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# === Request bodies ===

def _check_date_order(project):
    if project.start_date and project.end_date and project.end_date < project.start_date:
        raise PydanticCustomError("date_order", "endDate cannot be earlier than startDate")
    return project


class ProjectCreate(CamelInput):
    name: Name
    description: Optional[Text] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[IsoDate] = None
    end_date: Optional[IsoDate] = None
    client_name: Optional[Text] = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        return _check_date_order(self)


class ProjectUpdate(UpdateInput):
    """Partial update; dates are checked again against the stored ones."""
    name: Name = None
    description: Optional[Text] = None
    status: ProjectStatus = None
    start_date: Optional[IsoDate] = None
    end_date: Optional[IsoDate] = None
    client_name: Optional[Text] = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        return _check_date_order(self)
