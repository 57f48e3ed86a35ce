from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import date as date_type, datetime


MIN_HOURS = 0.5
MAX_HOURS = 24
HOURS_STEP = 0.5


def check_hours(v: float) -> float:
    if v < MIN_HOURS or v > MAX_HOURS:
        raise ValueError(f"Hours must be between {MIN_HOURS} and {MAX_HOURS}")
    if (v / HOURS_STEP) != int(v / HOURS_STEP):
        raise ValueError("Hours must be in increments of 0.5")
    return v


def check_not_future(v: date_type) -> date_type:
    if v > date_type.today():
        raise ValueError("Date cannot be in the future")
    return v


def check_description(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Description is required")
    if len(v) > 500:
        raise ValueError("Description cannot exceed 500 characters")
    return v


class HourLogCreate(BaseModel):
    client_id: int
    developer_id: int
    project_id: int
    task_id: Optional[int] = None
    date: date_type
    hours: float
    description: str = Field(..., max_length=500)

    @validator("hours")
    def validate_hours(cls, v):
        return check_hours(v)

    @validator("date")
    def validate_date(cls, v):
        return check_not_future(v)

    @validator("description")
    def validate_description(cls, v):
        return check_description(v)


class HourLogOut(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    developer_id: int
    developer_name: Optional[str] = None
    project_id: int
    project_name: Optional[str] = None
    task_id: Optional[int] = None
    task_title: Optional[str] = None
    date: date_type
    hours: float
    description: str
    created_by: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
