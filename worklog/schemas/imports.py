from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import date as date_type

from worklog.schemas.hour_log import check_hours, check_not_future, check_description


MAX_IMPORT_ROWS = 1000
CSV_COLUMNS = ["projectName", "clientName", "developerName", "hours", "date", "description"]


class ImportRow(BaseModel):
    project_name: str = Field(..., alias="projectName", min_length=1, max_length=100)
    client_name: str = Field(..., alias="clientName", min_length=1, max_length=100)
    developer_name: str = Field(..., alias="developerName", min_length=1, max_length=100)
    hours: float
    date: date_type
    description: str

    class Config:
        populate_by_name = True

    @validator("project_name", "client_name", "developer_name")
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @validator("hours")
    def validate_hours(cls, v):
        return check_hours(v)

    @validator("date")
    def validate_date(cls, v):
        return check_not_future(v)

    @validator("description")
    def validate_description(cls, v):
        return check_description(v)


class ImportRequest(BaseModel):
    # Rows stay raw so a malformed row fails alone instead of rejecting the batch
    rows: List[Dict[str, Any]] = Field(..., min_length=1, max_length=MAX_IMPORT_ROWS)


class ImportRowError(BaseModel):
    row: int
    message: str
    code: Optional[str] = None


class CreatedProject(BaseModel):
    id: int
    name: str
    client_id: int


class ImportResult(BaseModel):
    total: int
    imported: int
    failed: int
    created_projects: List[CreatedProject] = []
    hour_log_ids: List[int] = []
    errors: List[ImportRowError] = []
