from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.core.security import get_current_user
from worklog.models.user import User
from worklog.schemas.hour_log import HourLogCreate, HourLogOut
from worklog.services.aggregation_service import AggregationService
from worklog.services.hour_log_service import HourLogService
from worklog.utils.response import api_response, page_response, PageParams

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_hour_log(
    data: HourLogCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Log hours.

    Business Analysts may log for any developer; developers only for
    themselves and always against a task.
    """
    hour_log = HourLogService.create_hour_log(db, data, current_user)
    return api_response(HourLogOut.model_validate(hour_log), "Hours logged successfully")


@router.get("")
def list_hour_logs(
    params: PageParams = Depends(),
    client_id: Optional[int] = Query(None),
    developer_id: Optional[int] = Query(None),
    project_id: Optional[int] = Query(None),
    task_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    logs, total = HourLogService.list_hour_logs(
        db, current_user, params.page, params.limit,
        client_id=client_id, developer_id=developer_id, project_id=project_id,
        task_id=task_id, start_date=start_date, end_date=end_date,
    )
    return page_response([HourLogOut.model_validate(log) for log in logs], params, total)


@router.get("/reports")
def hour_log_reports(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    client_id: Optional[int] = Query(None),
    developer_id: Optional[int] = Query(None),
    report_type: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Summary and breakdowns of the hours the current user may see."""
    report = AggregationService.hours_report(
        db, current_user,
        start_date=start_date, end_date=end_date,
        client_id=client_id, developer_id=developer_id, report_type=report_type,
    )
    return api_response(report, "Hour log report generated successfully")


@router.get("/project/{project_id}")
def list_project_hour_logs(
    project_id: int,
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    logs, total = HourLogService.list_project_hour_logs(
        db, project_id, current_user, params.page, params.limit
    )
    return page_response([HourLogOut.model_validate(log) for log in logs], params, total)


@router.get("/{hour_log_id}")
def get_hour_log(
    hour_log_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    hour_log = HourLogService.get_hour_log(db, hour_log_id, current_user)
    return api_response(HourLogOut.model_validate(hour_log))
