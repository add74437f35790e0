"""Shared pytest fixtures.

Provides:
- engine / session: in-memory SQLite shared through StaticPool
- client: TestClient whose get_db dependency yields the test session
- make_user / make_project: record factories
- auth_headers: bearer header for a user
"""
import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401  register tables on SQLModel.metadata
from app.core.security import create_access_token, get_password_hash
from app.db.session import get_db
from app.main import app as fastapi_app
from app.models.project import Project, ProjectStatus
from app.models.user import User, UserRole
from app.services.codes import generate_employee_code, generate_project_code

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    SQLModel.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(session):
    def _override_get_db():
        yield session

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = itertools.count(1)

    def _make(role: UserRole = UserRole.EMPLOYEE, password: str = DEFAULT_PASSWORD, **fields) -> User:
        n = next(counter)
        fields.setdefault("first_name", f"First{n}")
        fields.setdefault("last_name", f"Last{n}")
        fields.setdefault("email", f"user{n}@example.com")
        if "employee_id" not in fields:
            fields["employee_id"] = generate_employee_code(session)
        user = User(password=get_password_hash(password), role=role, **fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_project(session):
    def _make(name: str, **fields) -> Project:
        if "project_code" not in fields:
            fields["project_code"] = generate_project_code(session, name)
        fields.setdefault("status", ProjectStatus.ACTIVE)
        project = Project(name=name, **fields)
        session.add(project)
        session.commit()
        session.refresh(project)
        return project

    return _make


@pytest.fixture
def admin(make_user) -> User:
    return make_user(role=UserRole.ADMIN, first_name="Ada", last_name="Admin", email="admin@example.com")


@pytest.fixture
def employee(make_user) -> User:
    return make_user(role=UserRole.EMPLOYEE, first_name="Eve", last_name="Employee", email="eve@example.com")


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
