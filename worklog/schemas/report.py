from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any
from datetime import date, datetime
from enum import Enum


class ReportType(str, Enum):
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"
    custom = "custom"


class ReportStatus(str, Enum):
    generating = "generating"
    completed = "completed"
    failed = "failed"


class ReportCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: ReportType = ReportType.monthly
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @validator("title")
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Report title cannot be empty")
        return v

    @validator("end_date", always=True)
    def validate_range(cls, v, values):
        start = values.get("start_date")
        if values.get("type") == ReportType.custom and (start is None or v is None):
            raise ValueError("Custom reports require start_date and end_date")
        if start is not None and v is not None and v < start:
            raise ValueError("End date must be on or after start date")
        return v


class DateRange(BaseModel):
    start: date
    end: date


class Report(BaseModel):
    """Report record. Held in memory only; see ReportStore."""
    id: str
    title: str
    type: ReportType
    status: ReportStatus = ReportStatus.generating
    date_range: DateRange
    generated_by: int
    generated_by_role: int
    created_at: datetime
    completed_at: Optional[datetime] = None
    total_hours: float = 0.0
    total_logs: int = 0
    unique_clients: int = 0
    unique_developers: int = 0
    details: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class ReportStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    this_week: int
