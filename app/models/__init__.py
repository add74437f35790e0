from .user import User, UserRole
from .project import Project, ProjectStatus

__all__ = [
    "User", "UserRole",
    "Project", "ProjectStatus",
]
