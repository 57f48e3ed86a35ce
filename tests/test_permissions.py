"""
Unit tests for the role policy and row-visibility rules.
"""
import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from worklog.models.hour_log import HourLog
from worklog.models.project import Project
from worklog.services.permission_service import (
    PermissionService,
    Resource,
    Action,
    POLICY,
)


class TestAuthorize:
    """Role policy checks."""

    def test_no_actor_is_unauthenticated(self):
        with pytest.raises(HTTPException) as exc_info:
            PermissionService.authorize(None, Resource.project, Action.list)
        assert exc_info.value.status_code == 401

    @pytest.mark.parametrize(
        "resource,action",
        [
            (Resource.client, Action.create),
            (Resource.developer, Action.list),
            (Resource.project, Action.create),
            (Resource.task, Action.delete),
            (Resource.import_, Action.create),
        ],
    )
    def test_ba_only_actions(self, test_ba_user, test_client_user, test_developer_user, resource, action):
        assert PermissionService.authorize(test_ba_user, resource, action).unrestricted
        for actor in (test_client_user, test_developer_user):
            with pytest.raises(HTTPException) as exc_info:
                PermissionService.authorize(actor, resource, action)
            assert exc_info.value.status_code == 403

    def test_developer_may_log_hours_client_may_not(self, test_client_user, test_developer_user):
        PermissionService.authorize(test_developer_user, Resource.hour_log, Action.create)
        with pytest.raises(HTTPException) as exc_info:
            PermissionService.authorize(test_client_user, Resource.hour_log, Action.create)
        assert exc_info.value.status_code == 403

    def test_unknown_pair_is_denied(self, test_ba_user):
        """Anything missing from the policy table is refused, even for a BA."""
        assert (Resource.dashboard, Action.delete) not in POLICY
        with pytest.raises(HTTPException):
            PermissionService.authorize(test_ba_user, Resource.dashboard, Action.delete)

    def test_ba_grant_has_no_scope(self, test_ba_user):
        grant = PermissionService.authorize(test_ba_user, Resource.hour_log, Action.list)
        assert grant.scope is None


class TestVisibility:
    """Row visibility per role."""

    def test_project_scope(
        self,
        db: Session,
        test_project: Project,
        test_client_user,
        test_another_client_user,
        test_developer_user,
        test_another_developer_user,
    ):
        def visible(actor):
            scope = PermissionService.visibility_filter(actor, Resource.project)
            return [p.id for p in db.query(Project).filter(scope).all()]

        assert visible(test_client_user) == [test_project.id]
        assert visible(test_another_client_user) == []
        assert visible(test_developer_user) == [test_project.id]
        assert visible(test_another_developer_user) == []

    def test_can_see_matches_scope(
        self, test_project: Project, test_task, test_another_client_user, test_developer_user
    ):
        assert PermissionService.can_see(test_developer_user, Resource.project, test_project)
        assert PermissionService.can_see(test_developer_user, Resource.task, test_task)
        assert not PermissionService.can_see(test_another_client_user, Resource.task, test_task)

    def test_hour_log_scope(self, test_project, test_client_user, test_developer_user, test_ba_user):
        log = HourLog(
            client_id=test_client_user.id,
            developer_id=test_developer_user.id,
            project_id=test_project.id,
        )
        assert PermissionService.can_see(test_client_user, Resource.hour_log, log)
        assert PermissionService.can_see(test_developer_user, Resource.hour_log, log)
        assert PermissionService.can_see(test_ba_user, Resource.hour_log, log)

    def test_ensure_visible_forbids_out_of_scope(self, test_project, test_another_client_user):
        grant = PermissionService.authorize(test_another_client_user, Resource.project, Action.read)
        with pytest.raises(HTTPException) as exc_info:
            PermissionService.ensure_visible(grant, test_project, "project")
        assert exc_info.value.status_code == 403


class TestFilterAndOwnershipRules:

    def test_client_filtering_other_client(self, test_client_user):
        with pytest.raises(HTTPException) as exc_info:
            PermissionService.check_filters(test_client_user, client_id=test_client_user.id + 100)
        assert exc_info.value.status_code == 403

    def test_own_filters_pass(self, test_client_user, test_developer_user):
        PermissionService.check_filters(test_client_user, client_id=test_client_user.id)
        PermissionService.check_filters(test_developer_user, developer_id=test_developer_user.id)
        # A developer filtering by client is narrowed by scope, not refused
        PermissionService.check_filters(test_developer_user, client_id=12345)

    def test_developer_logs_only_for_self(self, test_developer_user, test_another_developer_user):
        with pytest.raises(HTTPException) as exc_info:
            PermissionService.check_hour_log_author(test_developer_user, test_another_developer_user.id)
        assert exc_info.value.status_code == 403

    def test_status_only_update(self, test_task, test_developer_user, test_another_developer_user):
        PermissionService.check_status_only_update(test_developer_user, test_task, ["status"])
        with pytest.raises(HTTPException):
            PermissionService.check_status_only_update(
                test_developer_user, test_task, ["status", "title"]
            )
        with pytest.raises(HTTPException):
            PermissionService.check_status_only_update(
                test_another_developer_user, test_task, ["status"]
            )
