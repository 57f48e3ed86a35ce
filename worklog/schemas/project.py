from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import date, datetime
from worklog.models.project import ProjectStatus
from worklog.models.user import BillingType
from worklog.schemas.user import UserRef


def _check_date_order(values_start: Optional[date], end: Optional[date]) -> Optional[date]:
    if end is not None and values_start is not None and end < values_start:
        raise ValueError("End date must be on or after start date")
    return end


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    client_id: int
    developer_ids: List[int] = Field(default_factory=list)
    status: ProjectStatus = ProjectStatus.planning
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    billing_type: BillingType = BillingType.hourly

    @validator("name")
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Project name cannot be empty")
        return v

    @validator("end_date")
    def validate_end_date(cls, v, values):
        return _check_date_order(values.get("start_date"), v)


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    client_id: Optional[int] = None
    developer_ids: Optional[List[int]] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    billing_type: Optional[BillingType] = None

    @validator("name")
    def validate_name(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Project name cannot be empty")
        return v

    @validator("end_date")
    def validate_end_date(cls, v, values):
        return _check_date_order(values.get("start_date"), v)


class ProjectOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    client_id: int
    client: Optional[UserRef] = None
    developers: List[UserRef] = []
    status: ProjectStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_hours: Optional[float] = None
    actual_hours: float
    hourly_rate: Optional[float] = None
    billing_type: BillingType
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Recomputed from hour logs at read time, for display next to actual_hours
    logged_hours: float = 0.0
    hour_logs_count: int = 0

    class Config:
        from_attributes = True


class ProjectStats(BaseModel):
    total_projects: int
    by_status: dict
    total_estimated_hours: float
    total_actual_hours: float
