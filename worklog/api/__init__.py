from fastapi import APIRouter
from . import auth, clients, developers, projects, tasks, hour_logs, reports, dashboard, imports, health


router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(clients.router, prefix="/clients", tags=["clients"])
router.include_router(developers.router, prefix="/developers", tags=["developers"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(hour_logs.router, prefix="/hour-logs", tags=["hour-logs"])
router.include_router(reports.router, prefix="/reports", tags=["reports"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(imports.router, prefix="/import", tags=["import"])
router.include_router(health.router, prefix="/health", tags=["health"])
