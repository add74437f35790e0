"""
User Model Module

This module defines the User model and UserRole enumeration for authentication
and authorization throughout the application.
"""
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional
import uuid

from sqlmodel import SQLModel, Field, JSON, Column


def new_object_id() -> str:
    """24 lowercase hex characters, the shape of every internal id."""
    return uuid.uuid4().hex[:24]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserRole(str, Enum):
    """
    Enumeration of user roles.

    What each role may do is declared in app.core.permissions.ROLE_CAPABILITIES;
    adding a role here without an entry there fails at import time.
    """
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class User(SQLModel, table=True):
    """
    User model representing employees, managers and administrators.

    Users are addressable by their opaque ``id`` or by their ``employee_id``
    code (EMP-YYYY-XXXX), which is assigned once at creation.

    Attributes:
        id: 24-hex internal identifier
        employee_id: Human-readable code, unique, never reassigned
        email: Login email, stored lower-cased (unique, indexed)
        password: bcrypt hash; never serialized in API responses
        role: One of UserRole (default EMPLOYEE)
        manager_id: Internal id of this user's manager
        current_project_id: Internal id of the project the user works on
        past_project_ids: Ordered list of project ids, merged on update
        skills: List of free-text skills
        is_active: Disabled accounts cannot authenticate
        is_first_login: True until the user changes their own password
        created_at / updated_at: ISO timestamps
    """
    __tablename__ = "users"

    id: str = Field(default_factory=new_object_id, primary_key=True)
    employee_id: Optional[str] = Field(default=None, unique=True, index=True)

    first_name: str = Field(nullable=False)
    last_name: str = Field(nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    phone: Optional[str] = None
    password: str = Field(nullable=False)

    role: UserRole = Field(default=UserRole.EMPLOYEE)

    # Organizational attributes
    designation: Optional[str] = None
    department: Optional[str] = None
    manager_id: Optional[str] = Field(default=None, foreign_key="users.id")
    current_project_id: Optional[str] = Field(default=None, foreign_key="projects.id")
    past_project_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    date_of_joining: Optional[date] = None
    total_experience: Optional[float] = None  # in years
    location: Optional[str] = None

    is_active: bool = True
    is_first_login: bool = True

    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
