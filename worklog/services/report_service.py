"""
Report Service Module.

Reports are generated in the background: the request gets a ``generating``
record back immediately, and a worker fills in totals and details later,
moving the record to ``completed`` or ``failed``.

Report records live in a process-local ``ReportStore``. The default
``InMemoryReportStore`` loses every report on restart; that is the intended
contract. A durable store only needs to implement the same interface.
"""
import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from worklog.core.config import settings
from worklog.core.errors import forbidden, not_found
from worklog.models.user import User, UserRole
from worklog.repositories.hour_log_repository import HourLogRepository
from worklog.schemas.hour_log import HourLogOut
from worklog.schemas.report import (
    DateRange,
    Report,
    ReportCreate,
    ReportStats,
    ReportStatus,
    ReportType,
)
from worklog.services.aggregation_service import AggregationService, build_criteria
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.utils.periods import period_range

logger = logging.getLogger(__name__)

TOP_CLIENTS = 10


# ========================================
# STORE
# ========================================

class ReportStore(ABC):
    """Storage interface for report records."""

    @abstractmethod
    def add(self, report: Report) -> Report: ...

    @abstractmethod
    def get(self, report_id: str) -> Optional[Report]: ...

    @abstractmethod
    def update(self, report_id: str, **changes) -> Optional[Report]: ...

    @abstractmethod
    def list(self) -> List[Report]: ...

    @abstractmethod
    def delete(self, report_id: str) -> bool: ...


class InMemoryReportStore(ReportStore):
    """Process-local, non-durable report store."""

    def __init__(self):
        self._reports: Dict[str, Report] = {}
        self._lock = threading.Lock()

    def add(self, report: Report) -> Report:
        with self._lock:
            self._reports[report.id] = report
        return report

    def get(self, report_id: str) -> Optional[Report]:
        with self._lock:
            return self._reports.get(report_id)

    def update(self, report_id: str, **changes) -> Optional[Report]:
        with self._lock:
            current = self._reports.get(report_id)
            if current is None:
                # Deleted while generating
                return None
            updated = current.model_copy(update=changes)
            self._reports[report_id] = updated
            return updated

    def list(self) -> List[Report]:
        with self._lock:
            return list(self._reports.values())

    def delete(self, report_id: str) -> bool:
        with self._lock:
            return self._reports.pop(report_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._reports.clear()


# ========================================
# QUEUE
# ========================================

class ReportQueue:
    """Background executor for report jobs with a per-report completion signal."""

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="report")
        self._futures: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def submit(self, report_id: str, job: Callable[..., None], *args) -> Future:
        future = self._executor.submit(job, *args)
        with self._lock:
            self._futures[report_id] = future
        future.add_done_callback(lambda _: self._forget(report_id, future))
        return future

    def _forget(self, report_id: str, future: Future) -> None:
        with self._lock:
            if self._futures.get(report_id) is future:
                del self._futures[report_id]

    def wait(self, report_id: str, timeout: Optional[float] = None) -> bool:
        """
        Block until the report's job has finished.

        Returns:
            True when the job is done (or was never queued), False on timeout
        """
        with self._lock:
            future = self._futures.get(report_id)
        if future is None:
            return True
        try:
            future.result(timeout=timeout)
        except FutureTimeoutError:
            return False
        return True

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


_report_store: ReportStore = InMemoryReportStore()
_report_queue: Optional[ReportQueue] = None
_queue_lock = threading.Lock()


def get_report_store() -> ReportStore:
    return _report_store


def get_report_queue() -> ReportQueue:
    global _report_queue
    with _queue_lock:
        if _report_queue is None:
            _report_queue = ReportQueue(max_workers=settings.REPORT_WORKERS)
        return _report_queue


def shutdown_report_queue() -> None:
    global _report_queue
    with _queue_lock:
        if _report_queue is not None:
            _report_queue.shutdown(wait=False)
            _report_queue = None


# ========================================
# SERVICE
# ========================================

def resolve_date_range(data: ReportCreate, today=None) -> Tuple:
    if data.type == ReportType.custom:
        return data.start_date, data.end_date
    return period_range(data.type.value, data.start_date, data.end_date, today=today)


class ReportService:
    """Service for generating and reading reports."""

    @staticmethod
    def generate_report(
        data: ReportCreate,
        current_user: User,
        store: ReportStore,
        queue: ReportQueue,
        session_factory: Callable[[], Session],
    ) -> Report:
        """
        Create a report record and queue its computation.

        Returns:
            The record in ``generating`` state
        """
        PermissionService.authorize(current_user, Resource.report, Action.create)
        start, end = resolve_date_range(data)

        report = Report(
            id=uuid.uuid4().hex,
            title=data.title,
            type=data.type,
            status=ReportStatus.generating,
            date_range=DateRange(start=start, end=end),
            generated_by=current_user.id,
            generated_by_role=int(current_user.role),
            created_at=datetime.now(timezone.utc),
        )
        store.add(report)
        queue.submit(report.id, ReportService.run_generation, report.id, store, session_factory)
        logger.info(
            "Report %s queued (%s %s..%s) by user=%s",
            report.id, data.type.value, start, end, current_user.id,
        )
        return report

    @staticmethod
    def run_generation(
        report_id: str, store: ReportStore, session_factory: Callable[[], Session]
    ) -> None:
        """
        Worker body: compute a report and record the outcome.

        Failures end in ``failed`` status and are logged; they never
        propagate to whoever triggered the report.
        """
        if settings.REPORT_GENERATION_DELAY_SECONDS > 0:
            time.sleep(settings.REPORT_GENERATION_DELAY_SECONDS)

        report = store.get(report_id)
        if report is None:
            logger.info("Report %s deleted before generation", report_id)
            return

        db = session_factory()
        try:
            actor = db.query(User).filter(User.id == report.generated_by).first()
            if actor is None:
                raise LookupError(f"User {report.generated_by} no longer exists")

            scope = PermissionService.visibility_filter(actor, Resource.hour_log)
            criteria = build_criteria(
                scope, start_date=report.date_range.start, end_date=report.date_range.end
            )
            summary = AggregationService.summary(db, criteria)
            activities = HourLogRepository(db).filtered(
                scope=scope,
                start_date=report.date_range.start,
                end_date=report.date_range.end,
            ).all()
            top_clients = AggregationService.client_breakdown(db, criteria)[:TOP_CLIENTS]

            store.update(
                report_id,
                status=ReportStatus.completed,
                completed_at=datetime.now(timezone.utc),
                total_hours=summary["total_hours"],
                total_logs=summary["total_logs"],
                unique_clients=summary["unique_clients_count"],
                unique_developers=summary["unique_developers_count"],
                details={
                    "activities": [
                        HourLogOut.model_validate(log).model_dump(mode="json")
                        for log in activities
                    ],
                    "top_clients": [
                        {
                            "client_id": row["client_id"],
                            "client_name": row["client_name"],
                            "total_hours": row["total_hours"],
                        }
                        for row in top_clients
                    ],
                },
            )
            logger.info("Report %s completed: %.1fh", report_id, summary["total_hours"])
        except Exception as e:
            logger.exception("Report %s failed", report_id)
            store.update(
                report_id,
                status=ReportStatus.failed,
                completed_at=datetime.now(timezone.utc),
                error=str(e),
            )
        finally:
            db.close()

    @staticmethod
    def _visible_reports(current_user: User, store: ReportStore) -> List[Report]:
        reports = store.list()
        if current_user.role != UserRole.ba:
            reports = [r for r in reports if r.generated_by == current_user.id]
        return reports

    @staticmethod
    def list_reports(
        current_user: User,
        store: ReportStore,
        page: int,
        limit: int,
        type: Optional[ReportType] = None,
        status: Optional[ReportStatus] = None,
    ) -> Tuple[List[Report], int]:
        """Business Analysts see every report; others only the ones they generated."""
        PermissionService.authorize(current_user, Resource.report, Action.list)
        reports = ReportService._visible_reports(current_user, store)
        if type is not None:
            reports = [r for r in reports if r.type == type]
        if status is not None:
            reports = [r for r in reports if r.status == status]
        reports.sort(key=lambda r: r.created_at, reverse=True)
        offset = (page - 1) * limit
        return reports[offset:offset + limit], len(reports)

    @staticmethod
    def get_report(report_id: str, current_user: User, store: ReportStore) -> Report:
        PermissionService.authorize(current_user, Resource.report, Action.read)
        report = store.get(report_id)
        if report is None:
            raise not_found("Report")
        if current_user.role != UserRole.ba and report.generated_by != current_user.id:
            raise forbidden("Access denied. You do not have access to this report.")
        return report

    @staticmethod
    def delete_report(report_id: str, current_user: User, store: ReportStore) -> None:
        PermissionService.authorize(current_user, Resource.report, Action.delete)
        ReportService.get_report(report_id, current_user, store)
        store.delete(report_id)
        logger.info("Report %s deleted by user=%s", report_id, current_user.id)

    @staticmethod
    def report_stats(current_user: User, store: ReportStore) -> ReportStats:
        PermissionService.authorize(current_user, Resource.report, Action.stats)
        reports = ReportService._visible_reports(current_user, store)
        week_ago = datetime.now(timezone.utc) - timedelta(days=7)
        return ReportStats(
            total=len(reports),
            by_status={s.value: sum(1 for r in reports if r.status == s) for s in ReportStatus},
            by_type={t.value: sum(1 for r in reports if r.type == t) for t in ReportType},
            this_week=sum(1 for r in reports if r.created_at >= week_ago),
        )
