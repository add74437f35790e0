from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth, health, users, projects, admin_users, admin_projects
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])

# Admin endpoints
api_router.include_router(admin_users.router, prefix="/admin/users", tags=["admin"])
api_router.include_router(admin_projects.router, prefix="/admin/projects", tags=["admin"])
