"""
Task Service Module.
Business Analysts manage tasks in full; developers may only move the status
of tasks assigned to them.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from worklog.core.errors import (
    bad_request,
    conflict,
    not_found,
    ReferenceErrorKind,
    ReferenceValidationError,
)
from worklog.models.task import Task, TaskStatus, TaskPriority
from worklog.models.user import User, UserRole
from worklog.repositories.project_repository import ProjectRepository
from worklog.repositories.task_repository import TaskRepository
from worklog.schemas.task import TaskCreate, TaskUpdate, TaskOut
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.services.reference_validator import ReferenceValidator

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = {"title", "status", "priority"}


class TaskService:
    """Service for managing task operations."""

    @staticmethod
    def create_task(db: Session, data: TaskCreate, current_user: User) -> Task:
        PermissionService.authorize(current_user, Resource.task, Action.create)
        project = ProjectRepository(db).get_by_id(data.project_id)
        if project is None:
            raise ReferenceValidationError(ReferenceErrorKind.invalid_project, "Invalid project")
        assignees = ReferenceValidator.validate_task_assignees(db, project, data.assignee_ids)

        task = Task(
            title=data.title,
            description=data.description,
            project_id=project.id,
            status=data.status,
            priority=data.priority,
            estimated_hours=data.estimated_hours,
            actual_hours=0.0,
            start_date=data.start_date,
            due_date=data.due_date,
            created_by=current_user.id,
        )
        task.assignees = assignees
        TaskRepository(db).create(task)
        db.commit()
        db.refresh(task)
        logger.info("Task created id=%s project=%s", task.id, task.project_id)
        return task

    @staticmethod
    def list_tasks(
        db: Session,
        current_user: User,
        page: int,
        limit: int,
        project_id: Optional[int] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assignee_id: Optional[int] = None,
    ) -> Tuple[List[Task], int]:
        grant = PermissionService.authorize(current_user, Resource.task, Action.list)
        PermissionService.check_filters(current_user, developer_id=assignee_id)
        return TaskRepository(db).list_tasks(
            page,
            limit,
            scope=grant.scope,
            project_id=project_id,
            status=status,
            priority=priority,
            assignee_id=assignee_id,
        )

    @staticmethod
    def list_project_tasks(
        db: Session, project_id: int, current_user: User, page: int, limit: int
    ) -> Tuple[List[Task], int]:
        """Tasks of one project, limited to what the user may see."""
        grant = PermissionService.authorize(current_user, Resource.task, Action.list)
        project = ProjectRepository(db).get_by_id(project_id)
        if project is None:
            raise not_found("Project")
        PermissionService.ensure_visible(
            PermissionService.authorize(current_user, Resource.project, Action.read),
            project,
            "project",
        )
        return TaskRepository(db).list_tasks(page, limit, scope=grant.scope, project_id=project_id)

    @staticmethod
    def get_task(db: Session, task_id: int, current_user: User) -> Task:
        grant = PermissionService.authorize(current_user, Resource.task, Action.read)
        task = TaskRepository(db).get_by_id(task_id)
        if not task:
            raise not_found("Task")
        return PermissionService.ensure_visible(grant, task, "task")

    @staticmethod
    def update_task(db: Session, task_id: int, data: TaskUpdate, current_user: User) -> Task:
        """
        Update a task.

        A developer's update is accepted only when it carries nothing but a
        status, and only on a task assigned to them.
        """
        if current_user.role == UserRole.developer:
            if data.model_fields_set - {"status"} or data.status is None:
                PermissionService.authorize(current_user, Resource.task, Action.update)
            return TaskService.update_status(db, task_id, data.status, current_user)

        PermissionService.authorize(current_user, Resource.task, Action.update)
        tasks = TaskRepository(db)
        task = tasks.get_by_id(task_id)
        if not task:
            raise not_found("Task")

        changes = data.model_dump(exclude_unset=True)
        assignee_ids = changes.pop("assignee_ids", None)
        if assignee_ids is not None:
            task.assignees = ReferenceValidator.validate_task_assignees(
                db, task.project, assignee_ids
            )

        start = changes.get("start_date", task.start_date)
        due = changes.get("due_date", task.due_date)
        if start and due and due < start:
            raise bad_request("Due date must be on or after start date")

        for field, value in changes.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            setattr(task, field, value)

        tasks.update(task)
        db.commit()
        db.refresh(task)
        logger.info("Task updated id=%s fields=%s", task.id, sorted(data.model_fields_set))
        return task

    @staticmethod
    def update_status(db: Session, task_id: int, new_status: TaskStatus, current_user: User) -> Task:
        PermissionService.authorize(current_user, Resource.task, Action.update_status)
        tasks = TaskRepository(db)
        task = tasks.get_by_id(task_id)
        if not task:
            raise not_found("Task")
        PermissionService.check_status_only_update(current_user, task, ["status"])

        task.status = new_status
        tasks.update(task)
        db.commit()
        db.refresh(task)
        logger.info("Task status id=%s -> %s by user=%s", task.id, new_status.value, current_user.id)
        return task

    @staticmethod
    def delete_task(db: Session, task_id: int, current_user: User) -> None:
        PermissionService.authorize(current_user, Resource.task, Action.delete)
        tasks = TaskRepository(db)
        task = tasks.get_by_id(task_id)
        if not task:
            raise not_found("Task")
        if tasks.has_hour_logs(task.id):
            raise conflict("Cannot delete a task that has logged hours")
        tasks.delete(task)
        db.commit()
        logger.info("Task deleted id=%s", task_id)

    @staticmethod
    def to_out(db: Session, tasks: List[Task]) -> List[TaskOut]:
        totals = TaskRepository(db).hour_log_totals([task.id for task in tasks])
        result = []
        for task in tasks:
            out = TaskOut.model_validate(task)
            out.logged_hours, out.hour_logs_count = totals.get(task.id, (0.0, 0))
            result.append(out)
        return result
