"""
User Service Module

Use cases for users: registration, admin creation, directory listing, lookups,
self-service and administrative updates, status toggling and password resets.
Endpoints parse the request body with the models in ``app.schemas``; the
functions here take the parsed payload keyed by the camelCase names clients send.
"""
import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from app.core.errors import BadRequestError, ConflictError, ValidationError
from app.core.permissions import ADMIN_USER_FIELDS, SELF_PROFILE_FIELDS
from app.core.security import get_password_hash
from app.models.project import Project
from app.models.user import User, UserRole, utc_now_iso
from app.schemas.project import ProjectSummary
from app.schemas.user import UserRead, UserSummary
from app.services.codes import generate_employee_code, insert_with_generated_code
from app.services.resolver import resolve_project, resolve_projects, resolve_user

logger = logging.getLogger(__name__)

# Request field -> model attribute for fields copied as-is
SCALAR_FIELDS: Dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "phone": "phone",
    "designation": "designation",
    "department": "department",
    "skills": "skills",
    "totalExperience": "total_experience",
    "location": "location",
    "isActive": "is_active",
}

STRIPPED_FIELDS = {"firstName", "lastName", "phone", "designation", "department", "location"}

SEARCH_COLUMNS = (User.first_name, User.last_name, User.email, User.employee_id)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _clean(field: str, value: Any) -> Any:
    if field in STRIPPED_FIELDS and isinstance(value, str):
        return value.strip()
    if field == "skills" and value is not None:
        return [skill.strip() for skill in value]
    if field == "skills":
        return []
    return value


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.exec(select(User).where(User.email == normalize_email(email))).first()


def _ensure_email_available(db: Session, email: str, exclude_id: Optional[str] = None) -> None:
    existing = get_user_by_email(db, email)
    if existing and existing.id != exclude_id:
        raise ConflictError("User with this email already exists")


# === Response shaping ===

def _projects_by_id(db: Session, ids: Iterable[str]) -> Dict[str, Project]:
    ids = list(set(ids))
    if not ids:
        return {}
    return {project.id: project for project in db.exec(select(Project).where(col(Project.id).in_(ids)))}


def _users_by_id(db: Session, ids: Iterable[str]) -> Dict[str, User]:
    ids = list(set(ids))
    if not ids:
        return {}
    return {user.id: user for user in db.exec(select(User).where(col(User.id).in_(ids)))}


def serialize_users(db: Session, users: List[User]) -> List[dict]:
    """
    Build API representations, loading referenced managers and projects in
    two queries for the whole batch.
    """
    managers = _users_by_id(db, (u.manager_id for u in users if u.manager_id))
    project_ids = [u.current_project_id for u in users if u.current_project_id]
    for user in users:
        project_ids.extend(user.past_project_ids or [])
    projects = _projects_by_id(db, project_ids)

    results = []
    for user in users:
        read = UserRead.model_validate(user)
        manager = managers.get(user.manager_id) if user.manager_id else None
        current = projects.get(user.current_project_id) if user.current_project_id else None
        read.manager = UserSummary.model_validate(manager) if manager else None
        read.current_project = ProjectSummary.model_validate(current) if current else None
        read.past_projects = [
            ProjectSummary.model_validate(projects[project_id])
            for project_id in (user.past_project_ids or [])
            if project_id in projects
        ]
        results.append(read.to_json())
    return results


def serialize_user(db: Session, user: User) -> dict:
    return serialize_users(db, [user])[0]


# === Creation ===

def _create_user(db: Session, payload: Mapping[str, Any], role: UserRole) -> User:
    email = normalize_email(payload["email"])
    _ensure_email_available(db, email)

    values: Dict[str, Any] = {
        "email": email,
        "password": get_password_hash(payload["password"]),
        "role": role,
        "is_active": True,
        "is_first_login": True,
    }
    for field, attribute in SCALAR_FIELDS.items():
        if field in payload and field != "isActive":
            values[attribute] = _clean(field, payload[field])
    if "dateOfJoining" in payload:
        values["date_of_joining"] = payload["dateOfJoining"]
    if payload.get("manager") is not None:
        values["manager_id"] = resolve_user(db, payload["manager"], "manager").id
    if payload.get("currentProject") is not None:
        values["current_project_id"] = resolve_project(db, payload["currentProject"], "currentProject").id

    user = insert_with_generated_code(
        db,
        build=lambda: User(employee_id=generate_employee_code(db), **values),
        check_duplicates=lambda: _ensure_email_available(db, email),
        label="employee",
    )
    logger.info("Created user %s (%s) with role %s", user.employee_id, user.id, user.role.value)
    return user


def register_user(db: Session, payload: Mapping[str, Any]) -> User:
    """Self-registration; the account always starts as an EMPLOYEE."""
    return _create_user(db, payload, UserRole.EMPLOYEE)


def create_user(db: Session, payload: Mapping[str, Any]) -> User:
    """Administrative creation; role defaults to EMPLOYEE."""
    return _create_user(db, payload, UserRole(payload.get("role") or UserRole.EMPLOYEE))


# === Queries ===

def list_users(
    db: Session,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> List[User]:
    """
    List users, newest first.

    Equality filters (role, is_active) are ANDed with a case-insensitive
    substring search over first name, last name, email and employee code.
    """
    statement = select(User)
    if role:
        statement = statement.where(User.role == UserRole(role))
    if is_active is not None:
        statement = statement.where(User.is_active == is_active)
    if search:
        term = search.strip().lower()
        statement = statement.where(
            or_(*(func.lower(column).contains(term, autoescape=True) for column in SEARCH_COLUMNS))
        )
    statement = statement.order_by(col(User.created_at).desc())
    return list(db.exec(statement).all())


def get_user(db: Session, identifier: str) -> User:
    return resolve_user(db, identifier)


# === Updates ===

def _apply_updates(db: Session, user: User, payload: Mapping[str, Any], allowed: FrozenSet[str]) -> None:
    data = {field: value for field, value in payload.items() if field in allowed}

    for field, attribute in SCALAR_FIELDS.items():
        if field in data:
            setattr(user, attribute, _clean(field, data[field]))

    if "email" in data:
        email = normalize_email(data["email"])
        _ensure_email_available(db, email, exclude_id=user.id)
        user.email = email
    if "role" in data:
        user.role = UserRole(data["role"])
    if "dateOfJoining" in data:
        user.date_of_joining = data["dateOfJoining"]

    if "manager" in data:
        if data["manager"] is None:
            user.manager_id = None
        else:
            manager = resolve_user(db, data["manager"], "manager")
            if manager.id == user.id:
                raise ValidationError("A user cannot be their own manager")
            user.manager_id = manager.id
    if "currentProject" in data:
        if data["currentProject"] is None:
            user.current_project_id = None
        else:
            user.current_project_id = resolve_project(db, data["currentProject"], "currentProject").id
    if data.get("pastProjects") is not None:
        # Merge: keep existing order, append unseen projects by canonical id
        merged = list(user.past_project_ids or [])
        for project in resolve_projects(db, data["pastProjects"], "pastProjects"):
            if project.id not in merged:
                merged.append(project.id)
        user.past_project_ids = merged

    user.updated_at = utc_now_iso()


def _save(db: Session, user: User) -> User:
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_my_profile(db: Session, user: User, payload: Mapping[str, Any]) -> User:
    _apply_updates(db, user, payload, SELF_PROFILE_FIELDS)
    user = _save(db, user)
    logger.info("User %s updated their profile", user.employee_id)
    return user


def update_user(
    db: Session,
    target: User,
    payload: Mapping[str, Any],
    actor: User,
    allowed: FrozenSet[str] = ADMIN_USER_FIELDS,
) -> User:
    """
    Apply an update made by ``actor`` to ``target``, limited to ``allowed`` fields.

    Administrators may not change their own role or disable themselves.
    """
    if actor.id == target.id:
        if "role" in payload and "role" in allowed and UserRole(payload["role"]) != target.role:
            raise BadRequestError("You cannot change your own role")
        if payload.get("isActive") is False and "isActive" in allowed:
            raise BadRequestError("You cannot disable your own account")
    _apply_updates(db, target, payload, allowed)
    target = _save(db, target)
    logger.info("User %s updated by %s", target.employee_id, actor.employee_id)
    return target


def update_user_status(db: Session, target: User, is_active: bool, actor: User) -> User:
    if actor.id == target.id and not is_active:
        raise BadRequestError("You cannot disable your own account")
    target.is_active = is_active
    target.updated_at = utc_now_iso()
    target = _save(db, target)
    logger.info("User %s %s by %s", target.employee_id, "enabled" if is_active else "disabled", actor.employee_id)
    return target


def reset_password(db: Session, target: User, new_password: str) -> None:
    """Set a new password and force a password change on next login."""
    target.password = get_password_hash(new_password)
    target.is_first_login = True
    target.updated_at = utc_now_iso()
    _save(db, target)
    logger.info("Password reset for user %s", target.employee_id)
