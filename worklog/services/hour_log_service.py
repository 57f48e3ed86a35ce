"""
Hour Log Service Module.
Hour logs are append-only facts. Creating one also adds its hours to the
project's (and task's) running ``actual_hours`` inside the same transaction,
using SQL-level increments so concurrent logs never lose updates.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from worklog.core.errors import bad_request, not_found
from worklog.models.hour_log import HourLog
from worklog.models.user import User, UserRole
from worklog.repositories.hour_log_repository import HourLogRepository
from worklog.repositories.project_repository import ProjectRepository
from worklog.repositories.task_repository import TaskRepository
from worklog.schemas.hour_log import HourLogCreate
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.services.reference_validator import ReferenceValidator

logger = logging.getLogger(__name__)


class HourLogService:
    """Service for creating and querying hour logs."""

    @staticmethod
    def create_hour_log(db: Session, data: HourLogCreate, current_user: User) -> HourLog:
        """
        Log hours for a developer.

        Business Analysts may log for any developer. Developers may log only
        for themselves and must name a task. All references are validated
        before anything is written.
        """
        PermissionService.authorize(current_user, Resource.hour_log, Action.create)
        PermissionService.check_hour_log_author(current_user, data.developer_id)
        if current_user.role == UserRole.developer and data.task_id is None:
            raise bad_request("Task is required for developers")

        refs = ReferenceValidator.validate_hour_log_refs(
            db, data.client_id, data.developer_id, data.project_id, data.task_id
        )

        hour_log = HourLog(
            client_id=refs.client.id,
            developer_id=refs.developer.id,
            project_id=refs.project.id,
            task_id=refs.task.id if refs.task else None,
            date=data.date,
            hours=data.hours,
            description=data.description,
            created_by=current_user.id,
        )
        try:
            HourLogRepository(db).create(hour_log)
            ProjectRepository(db).increment_actual_hours(refs.project.id, data.hours)
            if refs.task is not None:
                TaskRepository(db).increment_actual_hours(refs.task.id, data.hours)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(hour_log)

        logger.info(
            "Hour log id=%s: %.1fh developer=%s project=%s task=%s",
            hour_log.id, hour_log.hours, hour_log.developer_id,
            hour_log.project_id, hour_log.task_id,
        )
        return hour_log

    @staticmethod
    def list_hour_logs(
        db: Session,
        current_user: User,
        page: int,
        limit: int,
        client_id: Optional[int] = None,
        developer_id: Optional[int] = None,
        project_id: Optional[int] = None,
        task_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[List[HourLog], int]:
        grant = PermissionService.authorize(current_user, Resource.hour_log, Action.list)
        PermissionService.check_filters(current_user, client_id=client_id, developer_id=developer_id)
        return HourLogRepository(db).list_logs(
            page,
            limit,
            scope=grant.scope,
            client_id=client_id,
            developer_id=developer_id,
            project_id=project_id,
            task_id=task_id,
            start_date=start_date,
            end_date=end_date,
        )

    @staticmethod
    def list_project_hour_logs(
        db: Session, project_id: int, current_user: User, page: int, limit: int
    ) -> Tuple[List[HourLog], int]:
        grant = PermissionService.authorize(current_user, Resource.hour_log, Action.list)
        project = ProjectRepository(db).get_by_id(project_id)
        if project is None:
            raise not_found("Project")
        PermissionService.ensure_visible(
            PermissionService.authorize(current_user, Resource.project, Action.read),
            project,
            "project",
        )
        return HourLogRepository(db).list_logs(
            page, limit, scope=grant.scope, project_id=project_id
        )

    @staticmethod
    def get_hour_log(db: Session, hour_log_id: int, current_user: User) -> HourLog:
        grant = PermissionService.authorize(current_user, Resource.hour_log, Action.read)
        hour_log = HourLogRepository(db).get_by_id(hour_log_id)
        if not hour_log:
            raise not_found("Hour log")
        return PermissionService.ensure_visible(grant, hour_log, "hour log")
