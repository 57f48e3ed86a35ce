from datetime import date
from typing import Callable, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from worklog.db.session import get_db, get_session_factory
from worklog.core.security import get_current_user
from worklog.models.user import User
from worklog.schemas.report import ReportCreate, ReportStatus, ReportType
from worklog.services.aggregation_service import AggregationService
from worklog.services.report_service import (
    ReportService,
    ReportStore,
    ReportQueue,
    get_report_store,
    get_report_queue,
)
from worklog.utils.response import api_response, page_response, PageParams

router = APIRouter()


@router.post("", status_code=status.HTTP_202_ACCEPTED)
def generate_report(
    data: ReportCreate,
    current_user: User = Depends(get_current_user),
    store: ReportStore = Depends(get_report_store),
    queue: ReportQueue = Depends(get_report_queue),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
):
    """
    Start generating a report.

    Returns the record in ``generating`` state; poll ``GET /reports/{id}``
    for the outcome.
    """
    report = ReportService.generate_report(data, current_user, store, queue, session_factory)
    return api_response(report, "Report generation started")


@router.get("")
def list_reports(
    params: PageParams = Depends(),
    type: Optional[ReportType] = Query(None),
    status: Optional[ReportStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    store: ReportStore = Depends(get_report_store),
):
    reports, total = ReportService.list_reports(
        current_user, store, params.page, params.limit, type=type, status=status
    )
    return page_response(reports, params, total)


@router.get("/stats")
def report_stats(
    current_user: User = Depends(get_current_user),
    store: ReportStore = Depends(get_report_store),
):
    return api_response(ReportService.report_stats(current_user, store))


@router.get("/client-hours")
def client_hours(
    period: str = Query("monthly"),
    client_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return api_response(AggregationService.client_hours(db, current_user, period, client_id))


@router.get("/developer-hours")
def developer_hours(
    period: str = Query("monthly"),
    developer_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return api_response(AggregationService.developer_hours(db, current_user, period, developer_id))


@router.get("/hours-summary")
def hours_summary(
    period: str = Query("monthly"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return api_response(
        AggregationService.hours_summary(db, current_user, period, start_date, end_date)
    )


@router.get("/project-hours")
def project_hours(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    client_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    criteria = AggregationService.scoped_criteria(
        db, current_user, client_id=client_id, start_date=start_date, end_date=end_date
    )
    return api_response(AggregationService.project_breakdown(db, criteria))


@router.get("/task-hours")
def task_hours(
    project_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    criteria = AggregationService.scoped_criteria(
        db, current_user, project_id=project_id, start_date=start_date, end_date=end_date
    )
    return api_response(AggregationService.task_breakdown(db, criteria))


@router.get("/{report_id}")
def get_report(
    report_id: str,
    current_user: User = Depends(get_current_user),
    store: ReportStore = Depends(get_report_store),
):
    return api_response(ReportService.get_report(report_id, current_user, store))


@router.delete("/{report_id}")
def delete_report(
    report_id: str,
    current_user: User = Depends(get_current_user),
    store: ReportStore = Depends(get_report_store),
):
    ReportService.delete_report(report_id, current_user, store)
    return api_response(message="Report deleted successfully")
