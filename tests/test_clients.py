"""
Tests for client onboarding and maintenance by Business Analysts.
"""
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import hour_log_payload
from worklog.core.config import settings
from worklog.models.user import Client, UserRole
from worklog.utils.hash import verify_password


class TestClientManagement:

    def test_ba_creates_client_with_default_password(
        self, client: TestClient, db: Session, ba_auth_headers, test_ba_user
    ):
        response = client.post(
            "/api/clients",
            json={"name": "Initech", "email": "Ops@Initech.com"},
            headers=ba_auth_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "ops@initech.com"
        assert data["role"] == int(UserRole.client)
        assert data["status"] == "Active"
        assert data["billing_type"] == "Hourly"
        assert data["creating_user_id"] == test_ba_user.id

        created = db.query(Client).filter(Client.id == data["id"]).one()
        assert verify_password(settings.DEFAULT_CLIENT_PASSWORD, created.password_hash)

    def test_duplicate_email_conflicts(
        self, client: TestClient, ba_auth_headers, test_developer_user
    ):
        """Emails are unique across every role."""
        response = client.post(
            "/api/clients",
            json={"name": "Copycat", "email": test_developer_user.email},
            headers=ba_auth_headers,
        )
        assert response.status_code == 409

    def test_non_ba_forbidden(self, client: TestClient, client_auth_headers, developer_auth_headers):
        for headers in (client_auth_headers, developer_auth_headers):
            assert client.get("/api/clients", headers=headers).status_code == 403
            response = client.post(
                "/api/clients", json={"name": "Nope", "email": "nope@test.com"}, headers=headers
            )
            assert response.status_code == 403

    def test_list_and_search(
        self, client: TestClient, ba_auth_headers, test_client_user, test_another_client_user
    ):
        body = client.get("/api/clients", headers=ba_auth_headers).json()
        assert {c["id"] for c in body["data"]} == {test_client_user.id, test_another_client_user.id}
        assert body["pagination"]["total"] == 2

        body = client.get("/api/clients?search=glob", headers=ba_auth_headers).json()
        assert [c["id"] for c in body["data"]] == [test_another_client_user.id]

    def test_get_developer_id_as_client_is_not_found(
        self, client: TestClient, ba_auth_headers, test_developer_user
    ):
        response = client.get(f"/api/clients/{test_developer_user.id}", headers=ba_auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Client not found"

    def test_update(self, client: TestClient, ba_auth_headers, test_client_user):
        response = client.put(
            f"/api/clients/{test_client_user.id}",
            json={"billing_type": "Fixed", "name": "Acme Corporation"},
            headers=ba_auth_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["billing_type"] == "Fixed"
        assert data["name"] == "Acme Corporation"

    def test_update_email_clash(
        self, client: TestClient, ba_auth_headers, test_client_user, test_another_client_user
    ):
        response = client.put(
            f"/api/clients/{test_client_user.id}",
            json={"email": test_another_client_user.email},
            headers=ba_auth_headers,
        )
        assert response.status_code == 409

    def test_delete_deactivates(
        self, client: TestClient, ba_auth_headers, test_client_user
    ):
        """Clients are deactivated, never removed."""
        response = client.delete(f"/api/clients/{test_client_user.id}", headers=ba_auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Inactive"

        fetched = client.get(f"/api/clients/{test_client_user.id}", headers=ba_auth_headers)
        assert fetched.status_code == 200
        active = client.get("/api/clients?status=Active", headers=ba_auth_headers).json()
        assert test_client_user.id not in [c["id"] for c in active["data"]]

    def test_deactivation_keeps_projects_and_hour_logs(
        self, client: TestClient, ba_auth_headers, test_client_user, test_project, test_developer_user
    ):
        """History referencing a deactivated client stays intact and resolvable."""
        logged = client.post(
            "/api/hour-logs",
            json=hour_log_payload(test_project, test_developer_user, hours=3),
            headers=ba_auth_headers,
        )
        assert logged.status_code == 201
        log_id = logged.json()["data"]["id"]

        response = client.delete(f"/api/clients/{test_client_user.id}", headers=ba_auth_headers)
        assert response.status_code == 200

        project = client.get(f"/api/projects/{test_project.id}", headers=ba_auth_headers)
        assert project.status_code == 200
        project_data = project.json()["data"]
        assert project_data["client_id"] == test_client_user.id
        assert project_data["client"]["name"] == "Acme Corp"
        assert project_data["actual_hours"] == 3
        assert project_data["hour_logs_count"] == 1

        hour_log = client.get(f"/api/hour-logs/{log_id}", headers=ba_auth_headers)
        assert hour_log.status_code == 200
        assert hour_log.json()["data"]["client_id"] == test_client_user.id
        assert hour_log.json()["data"]["client_name"] == "Acme Corp"
