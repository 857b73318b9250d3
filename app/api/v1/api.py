from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth, health, users, analytics,
    projects, client_projects, project_files
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])

# Resource endpoints
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(project_files.router, prefix="/client-projects/files", tags=["client-projects"])
api_router.include_router(client_projects.router, prefix="/client-projects", tags=["client-projects"])
