"""
Tests for cross-entity reference validation.
"""
import pytest
from sqlalchemy.orm import Session

from worklog.core.errors import ReferenceErrorKind, ReferenceValidationError
from worklog.models.project import Project, ProjectStatus
from worklog.models.task import Task
from worklog.models.user import BillingType
from worklog.services.reference_validator import ReferenceValidator


def _kind(callable_, *args):
    with pytest.raises(ReferenceValidationError) as exc_info:
        callable_(*args)
    assert exc_info.value.status_code == 400
    return exc_info.value.kind


class TestHourLogReferences:

    def test_valid_references(self, db: Session, test_project, test_task, test_developer_user):
        refs = ReferenceValidator.validate_hour_log_refs(
            db, test_project.client_id, test_developer_user.id, test_project.id, test_task.id
        )
        assert refs.project.id == test_project.id
        assert refs.task.id == test_task.id

    def test_client_id_of_a_developer(self, db: Session, test_project, test_developer_user):
        """A developer's ID is not a client ID."""
        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_developer_user.id, test_developer_user.id, test_project.id,
        )
        assert kind == ReferenceErrorKind.invalid_client

    def test_invalid_developer(self, db: Session, test_project):
        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_project.client_id, test_project.client_id, test_project.id,
        )
        assert kind == ReferenceErrorKind.invalid_developer

    def test_invalid_project(self, db: Session, test_project, test_developer_user):
        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_project.client_id, test_developer_user.id, 9999,
        )
        assert kind == ReferenceErrorKind.invalid_project

    def test_developer_not_on_project(self, db: Session, test_project, test_another_developer_user):
        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_project.client_id, test_another_developer_user.id, test_project.id,
        )
        assert kind == ReferenceErrorKind.developer_not_on_project

    def test_invalid_task(self, db: Session, test_project, test_developer_user):
        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_project.client_id, test_developer_user.id, test_project.id, 9999,
        )
        assert kind == ReferenceErrorKind.invalid_task

    def test_task_from_other_project(
        self, db: Session, test_ba_user, test_project, test_client_user, test_developer_user
    ):
        other = Project(
            name="Other",
            client_id=test_client_user.id,
            status=ProjectStatus.active,
            billing_type=BillingType.hourly,
            created_by=test_ba_user.id,
        )
        other.developers = [test_developer_user]
        db.add(other)
        db.flush()
        task = Task(title="Elsewhere", project_id=other.id, created_by=test_ba_user.id)
        task.assignees = [test_developer_user]
        db.add(task)
        db.commit()

        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_project.client_id, test_developer_user.id, test_project.id, task.id,
        )
        assert kind == ReferenceErrorKind.task_project_mismatch

    def test_developer_not_on_task(
        self, db: Session, test_ba_user, test_project, test_another_developer_user
    ):
        test_project.developers.append(test_another_developer_user)
        task = Task(title="Unassigned", project_id=test_project.id, created_by=test_ba_user.id)
        db.add(task)
        db.commit()

        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_project.client_id, test_another_developer_user.id, test_project.id, task.id,
        )
        assert kind == ReferenceErrorKind.developer_not_on_task

    def test_client_project_mismatch_checked_last(
        self, db: Session, test_project, test_task, test_another_client_user, test_developer_user
    ):
        kind = _kind(
            ReferenceValidator.validate_hour_log_refs,
            db, test_another_client_user.id, test_developer_user.id, test_project.id, test_task.id,
        )
        assert kind == ReferenceErrorKind.client_project_mismatch


class TestProjectAndTaskReferences:

    def test_project_refs_reject_non_developer(self, db: Session, test_client_user, test_ba_user):
        kind = _kind(
            ReferenceValidator.validate_project_refs, db, test_client_user.id, [test_ba_user.id]
        )
        assert kind == ReferenceErrorKind.invalid_developer

    def test_project_refs_deduplicate(self, db: Session, test_client_user, test_developer_user):
        refs = ReferenceValidator.validate_project_refs(
            db, test_client_user.id, [test_developer_user.id, test_developer_user.id]
        )
        assert [d.id for d in refs.developers] == [test_developer_user.id]

    def test_assignee_outside_project(self, db: Session, test_project, test_another_developer_user):
        kind = _kind(
            ReferenceValidator.validate_task_assignees,
            db, test_project, [test_another_developer_user.id],
        )
        assert kind == ReferenceErrorKind.developer_not_assignable
