"""
Tests for background report generation and report records.
"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import TestingSessionLocal, hour_log_payload
from worklog.schemas.report import DateRange, Report, ReportStatus, ReportType
from worklog.services.report_service import (
    InMemoryReportStore,
    ReportService,
    get_report_queue,
)


def _generate(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {"title": "Monthly hours", "type": "monthly"}
    payload.update(overrides)
    response = client.post("/api/reports", json=payload, headers=headers)
    assert response.status_code == 202
    report = response.json()["data"]
    assert get_report_queue().wait(report["id"], timeout=10)
    return report


@pytest.fixture
def logged_today(client: TestClient, ba_auth_headers, test_project, test_developer_user):
    response = client.post(
        "/api/hour-logs",
        json=hour_log_payload(test_project, test_developer_user, hours=6),
        headers=ba_auth_headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestReportGeneration:

    def test_report_starts_generating_then_completes(
        self, client: TestClient, ba_auth_headers, logged_today
    ):
        report = _generate(client, ba_auth_headers)
        assert report["status"] == "generating"

        body = client.get(f"/api/reports/{report['id']}", headers=ba_auth_headers).json()
        data = body["data"]
        assert data["status"] == "completed"
        assert data["total_hours"] == 6.0
        assert data["total_logs"] == 1
        assert data["unique_clients"] == 1
        assert data["unique_developers"] == 1
        assert data["completed_at"] is not None
        assert [a["id"] for a in data["details"]["activities"]] == [logged_today["id"]]
        assert data["details"]["top_clients"][0]["client_name"] == "Acme Corp"

    def test_report_scoped_to_generating_user(
        self, client: TestClient, another_client_auth_headers, logged_today
    ):
        report = _generate(client, another_client_auth_headers)
        data = client.get(
            f"/api/reports/{report['id']}", headers=another_client_auth_headers
        ).json()["data"]
        assert data["status"] == "completed"
        assert data["total_hours"] == 0

    def test_custom_report_requires_dates(self, client: TestClient, ba_auth_headers):
        response = client.post(
            "/api/reports", json={"title": "Custom", "type": "custom"}, headers=ba_auth_headers
        )
        assert response.status_code == 400

    def test_custom_report_range(self, client: TestClient, ba_auth_headers, logged_today):
        report = _generate(
            client, ba_auth_headers,
            type="custom", start_date="2023-01-01", end_date="2023-01-31",
        )
        assert report["date_range"] == {"start": "2023-01-01", "end": "2023-01-31"}
        data = client.get(f"/api/reports/{report['id']}", headers=ba_auth_headers).json()["data"]
        assert data["total_hours"] == 0

    def test_missing_author_marks_report_failed(self, db):
        """Generation errors end in a failed record instead of propagating."""
        store = InMemoryReportStore()
        store.add(
            Report(
                id="orphan",
                title="Orphan",
                type=ReportType.monthly,
                date_range=DateRange(start="2024-01-01", end="2024-01-31"),
                generated_by=9999,
                generated_by_role=0,
                created_at=datetime.now(timezone.utc),
            )
        )
        ReportService.run_generation("orphan", store, TestingSessionLocal)

        report = store.get("orphan")
        assert report.status == ReportStatus.failed
        assert "9999" in report.error


class TestReportAccess:

    def test_other_users_report_is_forbidden(
        self, client: TestClient, client_auth_headers, another_client_auth_headers, ba_auth_headers
    ):
        report = _generate(client, client_auth_headers)
        assert (
            client.get(f"/api/reports/{report['id']}", headers=another_client_auth_headers).status_code
            == 403
        )
        assert client.get(f"/api/reports/{report['id']}", headers=ba_auth_headers).status_code == 200

    def test_list_and_stats(
        self, client: TestClient, client_auth_headers, developer_auth_headers, ba_auth_headers
    ):
        _generate(client, client_auth_headers, type="weekly")
        _generate(client, developer_auth_headers, type="yearly")

        own = client.get("/api/reports", headers=client_auth_headers).json()
        assert [r["type"] for r in own["data"]] == ["weekly"]
        assert own["pagination"]["total"] == 1

        everything = client.get("/api/reports?status=completed", headers=ba_auth_headers).json()
        assert everything["pagination"]["total"] == 2

        stats = client.get("/api/reports/stats", headers=ba_auth_headers).json()["data"]
        assert stats["total"] == 2
        assert stats["by_status"]["completed"] == 2
        assert stats["by_type"] == {"weekly": 1, "monthly": 0, "yearly": 1, "custom": 0}
        assert stats["this_week"] == 2

    def test_delete(self, client: TestClient, client_auth_headers):
        report = _generate(client, client_auth_headers)
        response = client.delete(f"/api/reports/{report['id']}", headers=client_auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/reports/{report['id']}", headers=client_auth_headers).status_code == 404

    def test_unknown_report(self, client: TestClient, ba_auth_headers):
        assert client.get("/api/reports/does-not-exist", headers=ba_auth_headers).status_code == 404
