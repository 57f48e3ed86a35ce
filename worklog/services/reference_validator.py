"""
Cross-entity consistency checks run before any mutation.

Each check raises ``ReferenceValidationError`` carrying the kind of failure;
checks short-circuit on the first failure so the reported kind is stable.
"""
from dataclasses import dataclass
from typing import Optional, List, Iterable

from sqlalchemy.orm import Session

from worklog.core.errors import ReferenceErrorKind, ReferenceValidationError
from worklog.models.user import Client, Developer
from worklog.models.project import Project
from worklog.models.task import Task
from worklog.repositories.user_repository import UserRepository
from worklog.repositories.project_repository import ProjectRepository
from worklog.repositories.task_repository import TaskRepository


@dataclass
class HourLogRefs:
    client: Client
    developer: Developer
    project: Project
    task: Optional[Task] = None


@dataclass
class ProjectRefs:
    client: Client
    developers: List[Developer]


class ReferenceValidator:
    """Resolves payload references and verifies they belong together."""

    @staticmethod
    def validate_hour_log_refs(
        db: Session,
        client_id: int,
        developer_id: int,
        project_id: int,
        task_id: Optional[int] = None,
    ) -> HourLogRefs:
        """
        Verify the references of an hour log.

        Order: client, developer, project, developer membership of the
        project, then (with a task) task existence, task/project agreement
        and developer assignment. The project's own client is compared last.

        Returns:
            The resolved entities
        """
        users = UserRepository(db)

        client = users.get_client(client_id)
        if client is None:
            raise ReferenceValidationError(ReferenceErrorKind.invalid_client, "Invalid client")

        developer = users.get_developer(developer_id)
        if developer is None:
            raise ReferenceValidationError(
                ReferenceErrorKind.invalid_developer, "Invalid developer"
            )

        project = ProjectRepository(db).get_by_id(project_id)
        if project is None:
            raise ReferenceValidationError(ReferenceErrorKind.invalid_project, "Invalid project")

        if developer.id not in project.developer_ids:
            raise ReferenceValidationError(
                ReferenceErrorKind.developer_not_on_project,
                "Developer is not assigned to this project",
            )

        task = None
        if task_id is not None:
            task = TaskRepository(db).get_by_id(task_id)
            if task is None:
                raise ReferenceValidationError(ReferenceErrorKind.invalid_task, "Invalid task")
            if task.project_id != project.id:
                raise ReferenceValidationError(
                    ReferenceErrorKind.task_project_mismatch,
                    "Task does not belong to the specified project",
                )
            if developer.id not in task.assignee_ids:
                raise ReferenceValidationError(
                    ReferenceErrorKind.developer_not_on_task,
                    "Developer is not assigned to this task",
                )

        if project.client_id != client.id:
            raise ReferenceValidationError(
                ReferenceErrorKind.client_project_mismatch,
                "Project does not belong to the specified client",
            )

        return HourLogRefs(client=client, developer=developer, project=project, task=task)

    @staticmethod
    def validate_project_refs(
        db: Session, client_id: int, developer_ids: Iterable[int]
    ) -> ProjectRefs:
        """
        Verify the client and developers named by a project payload.

        Returns:
            The resolved client and developers (deduplicated, ordered by ID)
        """
        users = UserRepository(db)
        client = users.get_client(client_id)
        if client is None:
            raise ReferenceValidationError(ReferenceErrorKind.invalid_client, "Invalid client")

        wanted = set(developer_ids)
        developers = users.get_developers(list(wanted))
        if len(developers) != len(wanted):
            missing = sorted(wanted - {developer.id for developer in developers})
            raise ReferenceValidationError(
                ReferenceErrorKind.invalid_developer,
                f"Invalid developer(s): {', '.join(str(i) for i in missing)}",
            )
        return ProjectRefs(client=client, developers=developers)

    @staticmethod
    def validate_task_assignees(
        db: Session, project: Project, assignee_ids: Iterable[int]
    ) -> List[Developer]:
        """
        Verify task assignees are developers of the task's project.

        Returns:
            The resolved assignees (deduplicated, ordered by ID)
        """
        wanted = set(assignee_ids)
        developers = UserRepository(db).get_developers(list(wanted))
        if len(developers) != len(wanted):
            raise ReferenceValidationError(
                ReferenceErrorKind.invalid_developer, "Invalid developer in assignees"
            )
        outside = wanted - project.developer_ids
        if outside:
            raise ReferenceValidationError(
                ReferenceErrorKind.developer_not_assignable,
                "Assigned developers must be members of the project",
            )
        return developers
