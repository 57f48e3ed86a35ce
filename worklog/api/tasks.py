from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.core.security import get_current_user
from worklog.models.task import TaskStatus, TaskPriority
from worklog.models.user import User
from worklog.schemas.task import TaskCreate, TaskUpdate, TaskStatusUpdate
from worklog.services.task_service import TaskService
from worklog.utils.response import api_response, page_response, PageParams

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = TaskService.create_task(db, data, current_user)
    return api_response(TaskService.to_out(db, [task])[0], "Task created successfully")


@router.get("")
def list_tasks(
    params: PageParams = Depends(),
    project_id: Optional[int] = Query(None),
    status: Optional[TaskStatus] = Query(None),
    priority: Optional[TaskPriority] = Query(None),
    assignee_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tasks, total = TaskService.list_tasks(
        db, current_user, params.page, params.limit,
        project_id=project_id, status=status, priority=priority, assignee_id=assignee_id,
    )
    return page_response(TaskService.to_out(db, tasks), params, total)


@router.get("/project/{project_id}")
def list_tasks_by_project(
    project_id: int,
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tasks, total = TaskService.list_project_tasks(
        db, project_id, current_user, params.page, params.limit
    )
    return page_response(TaskService.to_out(db, tasks), params, total)


@router.get("/{task_id}")
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = TaskService.get_task(db, task_id, current_user)
    return api_response(TaskService.to_out(db, [task])[0])


@router.put("/{task_id}")
def update_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Full update for Business Analysts; developers may send only ``status``."""
    task = TaskService.update_task(db, task_id, data, current_user)
    return api_response(TaskService.to_out(db, [task])[0], "Task updated successfully")


@router.patch("/{task_id}/status")
def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = TaskService.update_status(db, task_id, data.status, current_user)
    return api_response(TaskService.to_out(db, [task])[0], "Task status updated successfully")


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    TaskService.delete_task(db, task_id, current_user)
    return api_response(message="Task deleted successfully")
