from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.core.security import get_current_user
from worklog.models.user import User
from worklog.services.dashboard_service import DashboardService
from worklog.utils.response import api_response

router = APIRouter()


@router.get("/summary")
def dashboard_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return api_response(DashboardService.summary(db, current_user))
