"""
Import Service Module.

Bulk hour-log import from flat rows naming the project, client and developer
by name. Clients and developers must already exist; projects are created on
first sight. Every row runs in its own transaction, so a bad row is reported
and skipped without undoing the rows before it.
"""
import csv
import io
import logging
from typing import Any, Dict, List, Tuple

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from worklog.core.errors import (
    ReferenceErrorKind,
    ReferenceValidationError,
    bad_request,
)
from worklog.models.hour_log import HourLog
from worklog.models.user import User, Client, Developer
from worklog.repositories.hour_log_repository import HourLogRepository
from worklog.repositories.project_repository import ProjectRepository
from worklog.repositories.user_repository import UserRepository
from worklog.schemas.imports import (
    CSV_COLUMNS,
    MAX_IMPORT_ROWS,
    CreatedProject,
    ImportResult,
    ImportRow,
    ImportRowError,
)
from worklog.services.permission_service import PermissionService, Resource, Action

logger = logging.getLogger(__name__)


def parse_csv(content: bytes) -> List[Dict[str, Any]]:
    """
    Read import rows from CSV text.

    The header must contain projectName, clientName, developerName, hours,
    date and description; extra columns are ignored.
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise bad_request("CSV file must be UTF-8 encoded")

    reader = csv.DictReader(io.StringIO(text))
    missing = [column for column in CSV_COLUMNS if column not in (reader.fieldnames or [])]
    if missing:
        raise bad_request(f"CSV is missing columns: {', '.join(missing)}")

    rows = [
        {column: (record.get(column) or "").strip() for column in CSV_COLUMNS}
        for record in reader
        if any((value or "").strip() for value in record.values() if isinstance(value, str))
    ]
    if not rows:
        raise bad_request("CSV file contains no rows")
    if len(rows) > MAX_IMPORT_ROWS:
        raise bad_request(f"Too many rows. Import at most {MAX_IMPORT_ROWS} at a time")
    return rows


class ImportService:
    """Resolves name-based rows to entities and records their hours."""

    @staticmethod
    def resolve_client(db: Session, name: str) -> Client:
        matches = UserRepository(db).find_clients_by_name(name)
        if not matches:
            raise ReferenceValidationError(
                ReferenceErrorKind.client_not_found, f"Client '{name}' not found"
            )
        if len(matches) > 1:
            raise ReferenceValidationError(
                ReferenceErrorKind.ambiguous_client,
                f"Client name '{name}' matches {len(matches)} clients",
            )
        return matches[0]

    @staticmethod
    def resolve_developer(db: Session, name: str) -> Developer:
        matches = UserRepository(db).find_developers_by_name(name)
        if not matches:
            raise ReferenceValidationError(
                ReferenceErrorKind.developer_not_found, f"Developer '{name}' not found"
            )
        if len(matches) > 1:
            raise ReferenceValidationError(
                ReferenceErrorKind.ambiguous_developer,
                f"Developer name '{name}' matches {len(matches)} developers",
            )
        return matches[0]

    @staticmethod
    def import_row(db: Session, row: ImportRow, current_user: User) -> Tuple[HourLog, bool]:
        """
        Import one row without committing.

        The project is found or created with a single insert-or-ignore on
        (name, client), and the developer joins its membership set the same
        way, so concurrent imports cannot duplicate either.

        Returns:
            Tuple of (new hour log, whether the project was created)
        """
        client = ImportService.resolve_client(db, row.client_name)
        developer = ImportService.resolve_developer(db, row.developer_name)

        projects = ProjectRepository(db)
        project, created = projects.insert_if_absent(row.project_name, client.id, current_user.id)
        projects.add_developer(project.id, developer.id)

        hour_log = HourLog(
            client_id=client.id,
            developer_id=developer.id,
            project_id=project.id,
            task_id=None,
            date=row.date,
            hours=row.hours,
            description=row.description,
            created_by=current_user.id,
        )
        HourLogRepository(db).create(hour_log)
        projects.increment_actual_hours(project.id, row.hours)
        return hour_log, created

    @staticmethod
    def import_rows(
        db: Session, rows: List[Dict[str, Any]], current_user: User
    ) -> ImportResult:
        """
        Import a batch of rows, best effort.

        Row numbers in the result are 1-based positions in ``rows``.
        """
        PermissionService.authorize(current_user, Resource.import_, Action.create)

        result = ImportResult(total=len(rows), imported=0, failed=0)
        for index, raw in enumerate(rows, start=1):
            try:
                row = ImportRow.model_validate(raw)
            except ValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(part) for part in first.get("loc", ()))
                message = f"{field}: {first.get('msg')}" if field else first.get("msg")
                result.errors.append(ImportRowError(row=index, message=message, code="ValidationError"))
                continue

            try:
                hour_log, created = ImportService.import_row(db, row, current_user)
                db.commit()
            except HTTPException as e:
                db.rollback()
                code = e.kind.value if isinstance(e, ReferenceValidationError) else None
                result.errors.append(ImportRowError(row=index, message=str(e.detail), code=code))
                continue
            except SQLAlchemyError as e:
                db.rollback()
                logger.warning("Import row %s failed on write: %s", index, e)
                result.errors.append(
                    ImportRowError(row=index, message="Could not save row", code="DatabaseError")
                )
                continue

            result.hour_log_ids.append(hour_log.id)
            if created:
                result.created_projects.append(
                    CreatedProject(
                        id=hour_log.project_id, name=row.project_name, client_id=hour_log.client_id
                    )
                )

        result.failed = len(result.errors)
        result.imported = len(result.hour_log_ids)
        logger.info(
            "Import by user=%s: %s imported, %s failed, %s new projects",
            current_user.id, result.imported, result.failed, len(result.created_projects),
        )
        return result
