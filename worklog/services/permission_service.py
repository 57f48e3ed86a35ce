"""
Permission Service - Centralized Authorization Logic

Every route asks this service whether an actor may perform an action on a
kind of resource. A successful check returns a ``Grant`` whose ``scope`` is
the row-visibility predicate for the actor (None means "sees everything").
A failed check raises 401 (no identity) or 403 (insufficient role or
ownership); nothing is ever silently filtered to empty without signalling.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, FrozenSet, Tuple, Any, Iterable

from sqlalchemy import select

from worklog.core.errors import forbidden, unauthenticated
from worklog.models.user import User, UserRole
from worklog.models.project import Project, project_developers
from worklog.models.task import Task, task_assignees
from worklog.models.hour_log import HourLog


class Resource(str, Enum):
    client = "client"
    developer = "developer"
    project = "project"
    task = "task"
    hour_log = "hour_log"
    report = "report"
    dashboard = "dashboard"
    import_ = "import"


class Action(str, Enum):
    create = "create"
    list = "list"
    read = "read"
    update = "update"
    update_status = "update_status"
    delete = "delete"
    stats = "stats"


BA_ONLY = frozenset({UserRole.ba})
ALL_ROLES = frozenset({UserRole.ba, UserRole.client, UserRole.developer})
BA_AND_DEVELOPER = frozenset({UserRole.ba, UserRole.developer})


def _policy() -> Dict[Tuple[Resource, Action], FrozenSet[UserRole]]:
    table: Dict[Tuple[Resource, Action], FrozenSet[UserRole]] = {}
    for resource in (Resource.client, Resource.developer):
        for action in (Action.create, Action.list, Action.read, Action.update, Action.delete):
            table[(resource, action)] = BA_ONLY

    for resource in (Resource.project, Resource.task):
        for action in (Action.create, Action.update, Action.delete):
            table[(resource, action)] = BA_ONLY
        for action in (Action.list, Action.read, Action.stats):
            table[(resource, action)] = ALL_ROLES
    table[(Resource.task, Action.update_status)] = BA_AND_DEVELOPER

    table[(Resource.hour_log, Action.create)] = BA_AND_DEVELOPER
    for action in (Action.list, Action.read, Action.stats):
        table[(Resource.hour_log, action)] = ALL_ROLES

    for action in (Action.create, Action.list, Action.read, Action.delete, Action.stats):
        table[(Resource.report, action)] = ALL_ROLES
    table[(Resource.dashboard, Action.read)] = ALL_ROLES

    table[(Resource.import_, Action.create)] = BA_ONLY
    return table


POLICY = _policy()


@dataclass(frozen=True)
class Grant:
    """Outcome of a successful authorization check."""

    actor: User
    resource: Resource
    action: Action

    @property
    def unrestricted(self) -> bool:
        return self.actor.role == UserRole.ba

    @property
    def scope(self) -> Optional[Any]:
        """SQL predicate limiting rows to what the actor may see, or None."""
        return PermissionService.visibility_filter(self.actor, self.resource)

    def allows(self, row: Any) -> bool:
        """In-Python counterpart of ``scope`` for an already-loaded row."""
        return PermissionService.can_see(self.actor, self.resource, row)


class PermissionService:
    """
    Centralized service for all permission and authorization checks.
    """

    @staticmethod
    def authorize(actor: Optional[User], resource: Resource, action: Action) -> Grant:
        """
        Check the role policy for (resource, action).

        Args:
            actor: Authenticated user, None when no identity was supplied
            resource: Kind of resource acted on
            action: Operation requested

        Returns:
            Grant carrying the actor's row-visibility scope

        Raises:
            HTTPException 401: If there is no actor
            HTTPException 403: If the actor's role is not allowed
        """
        if actor is None:
            raise unauthenticated("Access denied. No token provided.")

        allowed = POLICY.get((resource, action), frozenset())
        if actor.role not in allowed:
            raise forbidden(
                f"Access denied. Your role cannot {action.value.replace('_', ' ')} "
                f"{resource.value.replace('_', ' ')} records."
            )
        return Grant(actor=actor, resource=resource, action=action)

    # ========================================
    # ROW VISIBILITY
    # ========================================

    @staticmethod
    def visibility_filter(actor: User, resource: Resource) -> Optional[Any]:
        """
        Row-visibility predicate for an actor over a resource.

        Args:
            actor: Authenticated user
            resource: Kind of resource being queried

        Returns:
            SQLAlchemy predicate, or None when the actor sees every row
        """
        if actor.role == UserRole.ba:
            return None

        if resource == Resource.project:
            if actor.role == UserRole.client:
                return Project.client_id == actor.id
            return Project.id.in_(
                select(project_developers.c.project_id).where(
                    project_developers.c.developer_id == actor.id
                )
            )

        if resource == Resource.task:
            if actor.role == UserRole.client:
                return Task.project_id.in_(
                    select(Project.id).where(Project.client_id == actor.id)
                )
            return Task.id.in_(
                select(task_assignees.c.task_id).where(task_assignees.c.developer_id == actor.id)
            )

        # Hour logs and everything aggregated from them
        if actor.role == UserRole.client:
            return HourLog.client_id == actor.id
        return HourLog.developer_id == actor.id

    @staticmethod
    def can_see(actor: User, resource: Resource, row: Any) -> bool:
        if actor.role == UserRole.ba:
            return True
        if resource == Resource.project:
            if actor.role == UserRole.client:
                return row.client_id == actor.id
            return actor.id in row.developer_ids
        if resource == Resource.task:
            if actor.role == UserRole.client:
                return row.project is not None and row.project.client_id == actor.id
            return actor.id in row.assignee_ids
        if actor.role == UserRole.client:
            return row.client_id == actor.id
        return row.developer_id == actor.id

    @staticmethod
    def ensure_visible(grant: Grant, row: Any, entity: str) -> Any:
        """
        Refuse access to an existing row outside the actor's scope.

        Raises:
            HTTPException 403: If the row is not visible to the actor
        """
        if not grant.allows(row):
            raise forbidden(f"Access denied. You do not have access to this {entity}.")
        return row

    @staticmethod
    def check_filters(
        actor: User, client_id: Optional[int] = None, developer_id: Optional[int] = None
    ) -> None:
        """
        Reject explicit filters that contradict the actor's own scope.

        A client may only ask about itself as client, a developer only about
        itself as developer. Absent filters mean no restriction.

        Raises:
            HTTPException 403: If a filter names somebody else
        """
        if actor.role == UserRole.client and client_id is not None and client_id != actor.id:
            raise forbidden("Access denied. Clients can only view their own data.")
        if (
            actor.role == UserRole.developer
            and developer_id is not None
            and developer_id != actor.id
        ):
            raise forbidden("Access denied. Developers can only view their own data.")

    # ========================================
    # HOUR LOG / TASK SPECIFIC RULES
    # ========================================

    @staticmethod
    def check_hour_log_author(actor: User, developer_id: int) -> None:
        """
        A developer may only log hours for themself.

        Raises:
            HTTPException 403: If a developer logs for someone else
        """
        if actor.role == UserRole.developer and developer_id != actor.id:
            raise forbidden("Developers can only log hours for themselves")

    @staticmethod
    def check_status_only_update(actor: User, task: Task, fields: Iterable[str]) -> None:
        """
        Developers may change only the status of tasks assigned to them.

        Args:
            actor: Authenticated user
            task: Task being updated
            fields: Names of the fields present in the update

        Raises:
            HTTPException 403: If a developer is not assigned or touches another field
        """
        if actor.role != UserRole.developer:
            return
        if actor.id not in task.assignee_ids:
            raise forbidden("Access denied. You are not assigned to this task.")
        extra = set(fields) - {"status"}
        if extra:
            raise forbidden("Developers can only update the status of a task")
