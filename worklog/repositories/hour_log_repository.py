"""Hour log repository for database operations."""

from datetime import date
from typing import Optional, List, Tuple, Any
from sqlalchemy.orm import Session, joinedload, Query

from worklog.repositories.base_repository import BaseRepository
from worklog.models.hour_log import HourLog


class HourLogRepository(BaseRepository[HourLog]):
    """Repository for HourLog model operations. Logs are append-only."""

    def __init__(self, db: Session):
        super().__init__(HourLog, db)

    def filtered(
        self,
        scope: Any = None,
        client_id: Optional[int] = None,
        developer_id: Optional[int] = None,
        project_id: Optional[int] = None,
        task_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Query:
        """
        Build a query over hour logs with the usual filters applied.

        Missing filters mean no restriction.

        Args:
            scope: Row-visibility predicate, None for unrestricted
            client_id: Optional client filter
            developer_id: Optional developer filter
            project_id: Optional project filter
            task_id: Optional task filter
            start_date: Optional inclusive lower date bound
            end_date: Optional inclusive upper date bound

        Returns:
            Query of HourLog rows, newest first
        """
        query = self.db.query(HourLog).options(
            joinedload(HourLog.client),
            joinedload(HourLog.developer),
            joinedload(HourLog.project),
            joinedload(HourLog.task),
        )
        if scope is not None:
            query = query.filter(scope)
        if client_id is not None:
            query = query.filter(HourLog.client_id == client_id)
        if developer_id is not None:
            query = query.filter(HourLog.developer_id == developer_id)
        if project_id is not None:
            query = query.filter(HourLog.project_id == project_id)
        if task_id is not None:
            query = query.filter(HourLog.task_id == task_id)
        if start_date is not None:
            query = query.filter(HourLog.date >= start_date)
        if end_date is not None:
            query = query.filter(HourLog.date <= end_date)
        return query.order_by(HourLog.date.desc(), HourLog.created_at.desc(), HourLog.id.desc())

    def list_logs(self, page: int, limit: int, **filters) -> Tuple[List[HourLog], int]:
        """
        Paginated, filtered hour logs. See ``filtered`` for the filters.

        Returns:
            Tuple of (logs on the page, total matching)
        """
        return self.paginate(self.filtered(**filters), page, limit)

    def recent(self, limit: int, **filters) -> List[HourLog]:
        """Most recent logs matching ``filters``."""
        return self.filtered(**filters).limit(limit).all()
