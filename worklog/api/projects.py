from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from worklog.db.session import get_db
from worklog.core.security import get_current_user
from worklog.models.project import ProjectStatus
from worklog.models.user import User
from worklog.schemas.project import ProjectCreate, ProjectUpdate, ProjectStats
from worklog.services.project_service import ProjectService
from worklog.services.task_service import TaskService
from worklog.utils.response import api_response, page_response, PageParams

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a new project (Business Analysts only)."""
    project = ProjectService.create_project(db, data, current_user)
    return api_response(ProjectService.to_out(db, [project])[0], "Project created successfully")


@router.get("")
def list_projects(
    params: PageParams = Depends(),
    status: Optional[ProjectStatus] = Query(None),
    client_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List projects visible to the current user.

    Business Analysts see every project, clients their own, developers the
    ones they are members of.
    """
    projects, total = ProjectService.list_projects(
        db, current_user, params.page, params.limit,
        status=status, client_id=client_id, search=search,
    )
    return page_response(ProjectService.to_out(db, projects), params, total)


@router.get("/stats")
def project_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    stats = ProjectService.project_stats(db, current_user)
    return api_response(ProjectStats(**stats))


@router.get("/{project_id}")
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = ProjectService.get_project(db, project_id, current_user)
    return api_response(ProjectService.to_out(db, [project])[0])


@router.get("/{project_id}/tasks")
def list_project_tasks(
    project_id: int,
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tasks, total = TaskService.list_project_tasks(
        db, project_id, current_user, params.page, params.limit
    )
    return page_response(TaskService.to_out(db, tasks), params, total)


@router.put("/{project_id}")
def update_project(
    project_id: int,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = ProjectService.update_project(db, project_id, data, current_user)
    return api_response(ProjectService.to_out(db, [project])[0], "Project updated successfully")


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a project. Refused with 409 while hour logs reference it."""
    ProjectService.delete_project(db, project_id, current_user)
    return api_response(message="Project deleted successfully")
