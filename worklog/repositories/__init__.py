"""Repository layer for database access."""

from worklog.repositories.user_repository import UserRepository
from worklog.repositories.project_repository import ProjectRepository
from worklog.repositories.task_repository import TaskRepository
from worklog.repositories.hour_log_repository import HourLogRepository

__all__ = [
    "UserRepository",
    "ProjectRepository",
    "TaskRepository",
    "HourLogRepository",
]
