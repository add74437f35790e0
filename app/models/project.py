"""
Project Model Module

This module defines the Project model. Projects are created and modified by
administrators and are referenced from users as their current or past projects.
"""
from datetime import date
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from app.models.user import new_object_id, utc_now_iso


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"


class Project(SQLModel, table=True):
    """
    Project model.

    Attributes:
        id: 24-hex internal identifier
        project_code: Unique code (e.g., "PROJ-CRM-001") derived from the name at
            creation; renaming the project does not change it
        name: Project name (required, unique at creation time)
        status: One of ProjectStatus (default ACTIVE)
        start_date / end_date: Optional project timeline
        client_name: Name of the client the project is delivered for
        created_at / updated_at: ISO timestamps
    """
    __tablename__ = "projects"

    id: str = Field(default_factory=new_object_id, primary_key=True)
    project_code: Optional[str] = Field(default=None, unique=True, index=True)

    name: str = Field(nullable=False, index=True)
    description: Optional[str] = None
    status: ProjectStatus = Field(default=ProjectStatus.ACTIVE)

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_name: Optional[str] = None

    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
