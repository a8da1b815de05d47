from fastapi import APIRouter
from taskboard.api.v1.endpoints import (
    auth, health, users, user_admin,
    clients, projects, tasks, assignments, requests, dashboard
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(user_admin.router, prefix="/user-admin", tags=["admin"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["admin"])

# Resource endpoints
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["assignments"])
api_router.include_router(requests.router, prefix="/requests", tags=["requests"])
