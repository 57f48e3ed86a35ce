from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import date, datetime
from worklog.models.task import TaskStatus, TaskPriority
from worklog.schemas.user import UserRef


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    project_id: int
    assignee_ids: List[int] = Field(default_factory=list)
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    estimated_hours: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None

    @validator("title")
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Task title cannot be empty")
        return v

    @validator("due_date")
    def validate_due_date(cls, v, values):
        start = values.get("start_date")
        if v is not None and start is not None and v < start:
            raise ValueError("Due date must be on or after start date")
        return v


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    assignee_ids: Optional[List[int]] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None

    @validator("title")
    def validate_title(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Task title cannot be empty")
        return v


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    project_id: int
    project_name: Optional[str] = None
    assignees: List[UserRef] = []
    status: TaskStatus
    priority: TaskPriority
    estimated_hours: Optional[float] = None
    actual_hours: float
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    logged_hours: float = 0.0
    hour_logs_count: int = 0

    class Config:
        from_attributes = True
