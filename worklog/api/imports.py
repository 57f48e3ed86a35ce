from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.core.security import get_current_user
from worklog.models.user import User
from worklog.schemas.imports import ImportRequest
from worklog.services.import_service import ImportService, parse_csv
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.utils.response import api_response

router = APIRouter()


def _import_message(result) -> str:
    return f"Imported {result.imported} of {result.total} rows"


@router.post("/hour-logs")
def import_hour_logs(
    data: ImportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Import hour logs from rows naming project, client and developer.

    Rows are applied one by one; failed rows are reported in ``errors``
    without affecting the others.
    """
    result = ImportService.import_rows(db, data.rows, current_user)
    return api_response(result, _import_message(result))


@router.post("/hour-logs/csv")
def import_hour_logs_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """CSV variant; header: projectName,clientName,developerName,hours,date,description."""
    PermissionService.authorize(current_user, Resource.import_, Action.create)
    rows = parse_csv(file.file.read())
    result = ImportService.import_rows(db, rows, current_user)
    return api_response(result, _import_message(result))
