"""Task repository for database operations."""

from typing import Optional, List, Dict, Tuple, Any
from sqlalchemy.orm import Session, selectinload, joinedload
from sqlalchemy import func

from worklog.repositories.base_repository import BaseRepository
from worklog.models.task import Task, TaskStatus, TaskPriority
from worklog.models.hour_log import HourLog


class TaskRepository(BaseRepository[Task]):
    """Repository for Task model operations."""

    def __init__(self, db: Session):
        super().__init__(Task, db)

    def list_tasks(
        self,
        page: int,
        limit: int,
        scope: Any = None,
        project_id: Optional[int] = None,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assignee_id: Optional[int] = None,
    ) -> Tuple[List[Task], int]:
        """
        List tasks visible under ``scope``.

        Args:
            page: 1-based page number
            limit: Page size
            scope: Row-visibility predicate, None for unrestricted
            project_id: Optional project filter
            status: Optional status filter
            priority: Optional priority filter
            assignee_id: Optional filter on one assigned developer

        Returns:
            Tuple of (tasks on the page, total matching)
        """
        query = self.db.query(Task).options(
            joinedload(Task.project), selectinload(Task.assignees)
        )
        if scope is not None:
            query = query.filter(scope)
        if project_id is not None:
            query = query.filter(Task.project_id == project_id)
        if status is not None:
            query = query.filter(Task.status == status)
        if priority is not None:
            query = query.filter(Task.priority == priority)
        if assignee_id is not None:
            query = query.filter(Task.assignees.any(id=assignee_id))
        query = query.order_by(Task.created_at.desc(), Task.id.desc())
        return self.paginate(query, page, limit)

    def increment_actual_hours(self, task_id: int, hours: float) -> None:
        self.increment(task_id, "actual_hours", hours)

    def has_hour_logs(self, task_id: int) -> bool:
        return self.db.query(HourLog.id).filter(HourLog.task_id == task_id).first() is not None

    def hour_log_totals(self, task_ids: List[int]) -> Dict[int, Tuple[float, int]]:
        """Mapping of task ID to (logged hours, log count)."""
        if not task_ids:
            return {}
        rows = (
            self.db.query(HourLog.task_id, func.sum(HourLog.hours), func.count(HourLog.id))
            .filter(HourLog.task_id.in_(set(task_ids)))
            .group_by(HourLog.task_id)
            .all()
        )
        return {task_id: (float(hours or 0), count) for task_id, hours, count in rows}
