"""Project repository for database operations."""

from typing import Optional, List, Dict, Tuple, Any
from sqlalchemy.orm import Session, selectinload, joinedload
from sqlalchemy import func

from worklog.repositories.base_repository import BaseRepository
from worklog.models.project import Project, ProjectStatus, project_developers
from worklog.models.hour_log import HourLog
from worklog.models.user import BillingType


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project model operations."""

    def __init__(self, db: Session):
        """
        Initialize ProjectRepository.

        Args:
            db: Database session
        """
        super().__init__(Project, db)

    def get_by_name_and_client(
        self, name: str, client_id: int, exclude_id: Optional[int] = None
    ) -> Optional[Project]:
        """
        Get project by its natural key.

        Args:
            name: Project name
            client_id: Owning client ID
            exclude_id: Optional project ID to exclude from search

        Returns:
            Project or None if not found
        """
        query = self.db.query(Project).filter(
            Project.name == name, Project.client_id == client_id
        )
        if exclude_id:
            query = query.filter(Project.id != exclude_id)
        return query.first()

    def list_projects(
        self,
        page: int,
        limit: int,
        scope: Any = None,
        status: Optional[ProjectStatus] = None,
        client_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Project], int]:
        """
        List projects visible under ``scope``.

        Args:
            page: 1-based page number
            limit: Page size
            scope: Row-visibility predicate, None for unrestricted
            status: Optional status filter
            client_id: Optional client filter
            search: Optional case-insensitive name substring

        Returns:
            Tuple of (projects on the page, total matching)
        """
        query = self.db.query(Project).options(
            joinedload(Project.client), selectinload(Project.developers)
        )
        if scope is not None:
            query = query.filter(scope)
        if status is not None:
            query = query.filter(Project.status == status)
        if client_id is not None:
            query = query.filter(Project.client_id == client_id)
        if search:
            query = query.filter(func.lower(Project.name).like(f"%{search.lower()}%"))
        query = query.order_by(Project.created_at.desc(), Project.id.desc())
        return self.paginate(query, page, limit)

    def insert_if_absent(self, name: str, client_id: int, created_by: int) -> Tuple[Project, bool]:
        """
        Find or create the project keyed on (name, client_id) in one atomic step.

        Args:
            name: Project name
            client_id: Owning client ID
            created_by: BA performing the creation

        Returns:
            Tuple of (project, created flag)
        """
        created = self.insert_ignore(
            Project.__table__,
            {
                "name": name,
                "client_id": client_id,
                "status": ProjectStatus.active,
                "billing_type": BillingType.hourly,
                "actual_hours": 0.0,
                "created_by": created_by,
            },
            ["name", "client_id"],
        )
        project = self.get_by_name_and_client(name, client_id)
        return project, created

    def add_developer(self, project_id: int, developer_id: int) -> bool:
        """
        Add a developer to a project's membership set.

        Returns:
            True if the developer was newly added
        """
        return self.insert_ignore(
            project_developers,
            {"project_id": project_id, "developer_id": developer_id},
            ["project_id", "developer_id"],
        )

    def increment_actual_hours(self, project_id: int, hours: float) -> None:
        self.increment(project_id, "actual_hours", hours)

    def has_hour_logs(self, project_id: int) -> bool:
        return (
            self.db.query(HourLog.id).filter(HourLog.project_id == project_id).first()
            is not None
        )

    def hour_log_totals(self, project_ids: List[int]) -> Dict[int, Tuple[float, int]]:
        """
        Sum logged hours per project straight from the hour logs.

        Args:
            project_ids: Projects to total

        Returns:
            Mapping of project ID to (hours, log count)
        """
        if not project_ids:
            return {}
        rows = (
            self.db.query(
                HourLog.project_id, func.sum(HourLog.hours), func.count(HourLog.id)
            )
            .filter(HourLog.project_id.in_(set(project_ids)))
            .group_by(HourLog.project_id)
            .all()
        )
        return {project_id: (float(hours or 0), count) for project_id, hours, count in rows}

    def status_stats(self, scope: Any = None) -> Dict[str, Any]:
        """
        Count projects by status and total their hours.

        Args:
            scope: Row-visibility predicate, None for unrestricted

        Returns:
            Dictionary with per-status counts and hour totals
        """
        query = self.db.query(
            Project.status,
            func.count(Project.id),
            func.coalesce(func.sum(Project.estimated_hours), 0),
            func.coalesce(func.sum(Project.actual_hours), 0),
        )
        if scope is not None:
            query = query.filter(scope)
        rows = query.group_by(Project.status).all()

        by_status = {status.value: 0 for status in ProjectStatus}
        estimated = actual = 0.0
        for status, count, est, act in rows:
            by_status[status.value] = count
            estimated += float(est)
            actual += float(act)
        return {
            "total_projects": sum(by_status.values()),
            "by_status": by_status,
            "total_estimated_hours": estimated,
            "total_actual_hours": actual,
        }
