"""
Project Service Module.
Handles business logic for project CRUD, visibility and statistics.
Following architectural rules: stateless, uses repositories for data access.
"""
import logging
from typing import List, Optional, Dict, Any, Tuple

from sqlalchemy.orm import Session

from worklog.core.errors import (
    bad_request,
    conflict,
    not_found,
    ReferenceErrorKind,
    ReferenceValidationError,
)
from worklog.models.project import Project, ProjectStatus
from worklog.models.user import User
from worklog.repositories.project_repository import ProjectRepository
from worklog.schemas.project import ProjectCreate, ProjectUpdate, ProjectOut
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.services.reference_validator import ReferenceValidator

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = {"name", "status", "billing_type"}


class ProjectService:
    """Service for managing project operations."""

    @staticmethod
    def create_project(db: Session, data: ProjectCreate, current_user: User) -> Project:
        """
        Create a project for a client.

        The client must be a Client account and every listed developer a
        Developer account; the name must be unique for that client.
        """
        PermissionService.authorize(current_user, Resource.project, Action.create)
        refs = ReferenceValidator.validate_project_refs(db, data.client_id, data.developer_ids)

        projects = ProjectRepository(db)
        if projects.get_by_name_and_client(data.name, refs.client.id):
            raise conflict("A project with this name already exists for this client")

        project = Project(
            name=data.name,
            description=data.description,
            client_id=refs.client.id,
            status=data.status,
            start_date=data.start_date,
            end_date=data.end_date,
            estimated_hours=data.estimated_hours,
            hourly_rate=data.hourly_rate,
            billing_type=data.billing_type,
            actual_hours=0.0,
            created_by=current_user.id,
        )
        project.developers = refs.developers
        projects.create(project)
        db.commit()
        db.refresh(project)
        logger.info(
            "Project created id=%s client=%s developers=%s",
            project.id, project.client_id, sorted(project.developer_ids),
        )
        return project

    @staticmethod
    def list_projects(
        db: Session,
        current_user: User,
        page: int,
        limit: int,
        status: Optional[ProjectStatus] = None,
        client_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Project], int]:
        grant = PermissionService.authorize(current_user, Resource.project, Action.list)
        PermissionService.check_filters(current_user, client_id=client_id)
        return ProjectRepository(db).list_projects(
            page, limit, scope=grant.scope, status=status, client_id=client_id, search=search
        )

    @staticmethod
    def get_project(db: Session, project_id: int, current_user: User) -> Project:
        """Get a project the user is allowed to see (403 when it exists but is out of scope)."""
        grant = PermissionService.authorize(current_user, Resource.project, Action.read)
        project = ProjectRepository(db).get_by_id(project_id)
        if not project:
            raise not_found("Project")
        return PermissionService.ensure_visible(grant, project, "project")

    @staticmethod
    def update_project(
        db: Session, project_id: int, data: ProjectUpdate, current_user: User
    ) -> Project:
        PermissionService.authorize(current_user, Resource.project, Action.update)
        projects = ProjectRepository(db)
        project = projects.get_by_id(project_id)
        if not project:
            raise not_found("Project")

        changes = data.model_dump(exclude_unset=True)
        client_id = changes.pop("client_id", None) or project.client_id
        developer_ids = changes.pop("developer_ids", None)

        refs = ReferenceValidator.validate_project_refs(
            db,
            client_id,
            developer_ids if developer_ids is not None else project.developer_ids,
        )

        new_name = changes.get("name") or project.name
        if projects.get_by_name_and_client(new_name, refs.client.id, exclude_id=project.id):
            raise conflict("A project with this name already exists for this client")

        if developer_ids is not None:
            remaining = {developer.id for developer in refs.developers}
            for task in project.tasks:
                if not task.assignee_ids <= remaining:
                    raise ReferenceValidationError(
                        ReferenceErrorKind.developer_not_assignable,
                        "Cannot remove developers who are assigned to tasks in this project",
                    )
            project.developers = refs.developers

        start = changes.get("start_date", project.start_date)
        end = changes.get("end_date", project.end_date)
        if start and end and end < start:
            raise bad_request("End date must be on or after start date")

        if refs.client.id != project.client_id and projects.has_hour_logs(project.id):
            raise conflict("Cannot move a project with logged hours to another client")

        project.client_id = refs.client.id
        for field, value in changes.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            setattr(project, field, value)

        projects.update(project)
        db.commit()
        db.refresh(project)
        logger.info("Project updated id=%s fields=%s", project.id, sorted(data.model_fields_set))
        return project

    @staticmethod
    def delete_project(db: Session, project_id: int, current_user: User) -> None:
        """
        Delete a project and its tasks.

        Refused while hour logs reference the project: logs are append-only
        facts and must keep resolving.
        """
        PermissionService.authorize(current_user, Resource.project, Action.delete)
        projects = ProjectRepository(db)
        project = projects.get_by_id(project_id)
        if not project:
            raise not_found("Project")
        if projects.has_hour_logs(project.id):
            raise conflict("Cannot delete a project that has logged hours")

        for task in list(project.tasks):
            db.delete(task)
        projects.delete(project)
        db.commit()
        logger.info("Project deleted id=%s", project_id)

    @staticmethod
    def project_stats(db: Session, current_user: User) -> Dict[str, Any]:
        grant = PermissionService.authorize(current_user, Resource.project, Action.stats)
        return ProjectRepository(db).status_stats(scope=grant.scope)

    @staticmethod
    def to_out(db: Session, projects: List[Project]) -> List[ProjectOut]:
        """Serialize projects with hours recomputed from their logs alongside ``actual_hours``."""
        totals = ProjectRepository(db).hour_log_totals([project.id for project in projects])
        result = []
        for project in projects:
            out = ProjectOut.model_validate(project)
            out.logged_hours, out.hour_logs_count = totals.get(project.id, (0.0, 0))
            result.append(out)
        return result
