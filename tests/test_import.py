"""
Tests for bulk hour-log import by project, client and developer names.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from worklog.db.session import Base
from worklog.models.hour_log import HourLog
from worklog.models.project import Project, project_developers
from worklog.models.user import BusinessAnalyst, Client, Developer, BillingType, AccountStatus
from worklog.services.import_service import ImportService, parse_csv


def _row(project="Data Migration", client="Acme Corp", developer="Dana Dev", **overrides):
    row = {
        "projectName": project,
        "clientName": client,
        "developerName": developer,
        "hours": 2,
        "date": "2024-01-15",
        "description": "Imported work",
    }
    row.update(overrides)
    return row


class TestJsonImport:

    def test_best_effort_import(
        self, client: TestClient, db: Session, ba_auth_headers, test_client_user, test_developer_user
    ):
        """Good rows land, bad rows are reported by position."""
        response = client.post(
            "/api/import/hour-logs",
            json={
                "rows": [
                    _row(hours=2),
                    _row(client="Nobody Inc"),
                    _row(hours=3.5),
                    _row(hours=0.3),
                ]
            },
            headers=ba_auth_headers,
        )
        assert response.status_code == 200
        result = response.json()["data"]
        assert result["total"] == 4
        assert result["imported"] == 2
        assert result["failed"] == 2
        assert [p["name"] for p in result["created_projects"]] == ["Data Migration"]
        assert [(e["row"], e["code"]) for e in result["errors"]] == [
            (2, "ClientNotFound"),
            (4, "ValidationError"),
        ]

        project = (
            db.query(Project)
            .filter(Project.name == "Data Migration", Project.client_id == test_client_user.id)
            .one()
        )
        assert project.actual_hours == 5.5
        assert project.developer_ids == {test_developer_user.id}
        # Both rows named the same developer; membership is a set
        assert db.execute(select(func.count()).select_from(project_developers)).scalar() == 1
        assert db.query(HourLog).count() == 2

    def test_existing_project_reused(
        self, client: TestClient, db: Session, ba_auth_headers, test_project
    ):
        response = client.post(
            "/api/import/hour-logs",
            json={"rows": [_row(project=test_project.name, hours=4)]},
            headers=ba_auth_headers,
        )
        result = response.json()["data"]
        assert result["imported"] == 1
        assert result["created_projects"] == []
        db.refresh(test_project)
        assert test_project.actual_hours == 4
        assert db.query(Project).count() == 1

    def test_developers_accumulate_on_one_project(
        self,
        client: TestClient,
        db: Session,
        ba_auth_headers,
        test_client_user,
        test_developer_user,
        test_another_developer_user,
    ):
        response = client.post(
            "/api/import/hour-logs",
            json={"rows": [_row(developer="Dana Dev", hours=1), _row(developer="Eli Dev", hours=2)]},
            headers=ba_auth_headers,
        )
        result = response.json()["data"]
        assert result["imported"] == 2
        assert len(result["created_projects"]) == 1

        project = db.query(Project).filter(Project.name == "Data Migration").one()
        assert project.developer_ids == {test_developer_user.id, test_another_developer_user.id}
        assert project.actual_hours == 3

    def test_same_name_under_two_clients(
        self,
        client: TestClient,
        db: Session,
        ba_auth_headers,
        test_client_user,
        test_another_client_user,
        test_developer_user,
    ):
        response = client.post(
            "/api/import/hour-logs",
            json={"rows": [_row(client="Acme Corp"), _row(client="Globex")]},
            headers=ba_auth_headers,
        )
        created = response.json()["data"]["created_projects"]
        assert [p["name"] for p in created] == ["Data Migration", "Data Migration"]
        assert {p["client_id"] for p in created} == {test_client_user.id, test_another_client_user.id}
        assert len({p["id"] for p in created}) == 2
        assert db.query(Project).count() == 2

    def test_ambiguous_client_name(
        self, client: TestClient, db: Session, ba_auth_headers, test_ba_user, test_client_user, test_developer_user
    ):
        db.add(
            Client(
                name="Acme Corp",
                email="acme-two@test.com",
                password_hash="x",
                billing_type=BillingType.hourly,
                status=AccountStatus.active,
                creating_user_id=test_ba_user.id,
            )
        )
        db.commit()
        result = client.post(
            "/api/import/hour-logs", json={"rows": [_row()]}, headers=ba_auth_headers
        ).json()["data"]
        assert result["errors"][0]["code"] == "AmbiguousClient"

    def test_unknown_developer(self, client: TestClient, ba_auth_headers, test_client_user):
        result = client.post(
            "/api/import/hour-logs", json={"rows": [_row(developer="Ghost")]}, headers=ba_auth_headers
        ).json()["data"]
        assert result["errors"][0]["code"] == "DeveloperNotFound"

    def test_empty_batch_rejected(self, client: TestClient, ba_auth_headers):
        response = client.post("/api/import/hour-logs", json={"rows": []}, headers=ba_auth_headers)
        assert response.status_code == 400

    def test_non_ba_forbidden(self, client: TestClient, developer_auth_headers):
        response = client.post(
            "/api/import/hour-logs", json={"rows": [_row()]}, headers=developer_auth_headers
        )
        assert response.status_code == 403


class TestCsvImport:

    def test_csv_upload(
        self, client: TestClient, ba_auth_headers, test_client_user, test_developer_user
    ):
        content = (
            "projectName,clientName,developerName,hours,date,description\n"
            "Data Migration,Acme Corp,Dana Dev,1.5,2024-01-15,Schema mapping\n"
            "Data Migration,Acme Corp,Dana Dev,2,2024-01-16,Backfill\n"
        ).encode("utf-8")
        response = client.post(
            "/api/import/hour-logs/csv",
            files={"file": ("logs.csv", content, "text/csv")},
            headers=ba_auth_headers,
        )
        assert response.status_code == 200
        result = response.json()["data"]
        assert result["imported"] == 2
        assert [p["name"] for p in result["created_projects"]] == ["Data Migration"]

    def test_parse_csv_missing_column(self):
        with pytest.raises(HTTPException) as exc_info:
            parse_csv(b"projectName,clientName,hours\nA,B,1\n")
        assert exc_info.value.status_code == 400
        assert "developerName" in exc_info.value.detail

    def test_parse_csv_strips_bom_and_blank_lines(self):
        rows = parse_csv(
            "\ufeffprojectName,clientName,developerName,hours,date,description\n"
            "P,C,D,1,2024-01-01,Work\n"
            ",,,,,\n".encode("utf-8")
        )
        assert rows == [
            {
                "projectName": "P",
                "clientName": "C",
                "developerName": "D",
                "hours": "1",
                "date": "2024-01-01",
                "description": "Work",
            }
        ]

    def test_parse_csv_without_rows(self):
        with pytest.raises(HTTPException):
            parse_csv(b"projectName,clientName,developerName,hours,date,description\n")



class TestConcurrentImport:

    def test_parallel_imports_create_project_once(self, tmp_path):
        """Concurrent batches naming a new project share one project and membership set."""
        engine = create_engine(
            f"sqlite:///{tmp_path / 'import.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        with SessionFactory() as setup:
            ba = BusinessAnalyst(name="BA", email="ba@i.com", password_hash="x")
            setup.add(ba)
            setup.flush()
            setup.add_all([
                Client(
                    name="Acme Corp", email="c@i.com", password_hash="x",
                    billing_type=BillingType.hourly, status=AccountStatus.active,
                    creating_user_id=ba.id,
                ),
                Developer(
                    name="Dana Dev", email="d1@i.com", password_hash="x", hourly_rate=10,
                    developer_role="Engineer", status=AccountStatus.active, creating_user_id=ba.id,
                ),
                Developer(
                    name="Eli Dev", email="d2@i.com", password_hash="x", hourly_rate=20,
                    developer_role="Engineer", status=AccountStatus.active, creating_user_id=ba.id,
                ),
            ])
            setup.commit()
            ba_id = ba.id

        def import_once(i):
            developer = "Dana Dev" if i % 2 else "Eli Dev"
            with SessionFactory() as session:
                actor = session.get(BusinessAnalyst, ba_id)
                return ImportService.import_rows(
                    session, [_row(project="Fresh Start", developer=developer, hours=0.5)], actor
                )

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(import_once, range(24)))

        assert all(r.imported == 1 for r in results)
        assert sum(len(r.created_projects) for r in results) == 1

        with SessionFactory() as check:
            project = check.query(Project).filter(Project.name == "Fresh Start").one()
            assert project.actual_hours == 12.0
            assert check.query(HourLog).count() == 24
            assert check.execute(select(func.count()).select_from(project_developers)).scalar() == 2
        engine.dispose()
