from datetime import date
from typing import List, Optional

from pydantic import StrictBool

from app.models.user import UserRole
from app.schemas.base import CamelInput, CamelModel, UpdateInput
from app.schemas.fields import (
    Email, Experience, IsoDate, Name, Password, Phone, ProjectRef, Skills, Text, UserRef,
)
from app.schemas.project import ProjectSummary


# Embedded in user responses (manager)
class UserSummary(CamelModel):
    id: str
    employee_id: Optional[str] = None
    first_name: str
    last_name: str
    email: str


# Properties to return to client; the password hash is never included
class UserRead(CamelModel):
    id: str
    employee_id: Optional[str] = None
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    role: UserRole
    designation: Optional[str] = None
    department: Optional[str] = None
    manager: Optional[UserSummary] = None
    current_project: Optional[ProjectSummary] = None
    past_projects: List[ProjectSummary] = []
    skills: List[str] = []
    date_of_joining: Optional[date] = None
    total_experience: Optional[float] = None
    location: Optional[str] = None
    is_active: bool
    is_first_login: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# === Request bodies ===

# Self-registration; the role is always EMPLOYEE
class RegistrationIn(CamelInput):
    first_name: Name
    last_name: Name
    email: Email
    password: Password
    phone: Optional[Phone] = None
    skills: Optional[Skills] = None


class AdminUserCreate(RegistrationIn):
    role: Optional[UserRole] = None
    designation: Optional[Text] = None
    department: Optional[Text] = None
    manager: Optional[UserRef] = None
    current_project: Optional[ProjectRef] = None
    date_of_joining: Optional[IsoDate] = None
    total_experience: Optional[Experience] = None
    location: Optional[Text] = None


# Fields typed without Optional may be omitted but not sent as null
class ProfileUpdate(UpdateInput):
    first_name: Name = None
    last_name: Name = None
    email: Email = None
    phone: Optional[Phone] = None
    skills: Optional[Skills] = None


class AdminUserUpdate(UpdateInput):
    """
    Administrative update. ``manager`` and ``currentProject`` accept null to
    clear them; ``pastProjects`` is merged into the stored list.
    """
    first_name: Name = None
    last_name: Name = None
    phone: Optional[Phone] = None
    skills: Optional[Skills] = None
    role: UserRole = None
    designation: Optional[Text] = None
    department: Optional[Text] = None
    manager: Optional[UserRef] = None
    current_project: Optional[ProjectRef] = None
    past_projects: Optional[List[ProjectRef]] = None
    date_of_joining: Optional[IsoDate] = None
    total_experience: Optional[Experience] = None
    location: Optional[Text] = None
    is_active: StrictBool = None


# PATCH /users/{id}: every editable field; the caller's allow-list is applied after lookup
class UserUpdate(AdminUserUpdate):
    email: Email = None


class StatusIn(CamelInput):
    is_active: StrictBool


class ResetPasswordIn(CamelInput):
    new_password: Password
