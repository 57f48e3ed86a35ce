"""
Tests for rate limiting on authentication endpoints.
"""
from fastapi.testclient import TestClient


class TestLoginRateLimit:
    """Test rate limiting on login endpoint."""

    def test_login_rate_limit(self, client: TestClient):
        """The login endpoint allows 10 requests per minute."""
        for i in range(10):
            response = client.post(
                "/api/auth/login",
                json={"email": f"test{i}@example.com", "password": "Password123"},
            )
            # Wrong credentials, but not limited yet
            assert response.status_code == 401

        response = client.post(
            "/api/auth/login",
            json={"email": "test@example.com", "password": "Password123"},
        )
        assert response.status_code == 429
        body = response.json()
        assert body["success"] is False
        assert "too many requests" in body["message"].lower()


class TestRegisterRateLimit:
    """Test rate limiting on register endpoint."""

    def test_register_rate_limit(self, client: TestClient):
        """The register endpoint allows 3 requests per hour."""
        for i in range(3):
            response = client.post(
                "/api/auth/register",
                json={
                    "name": "Test User",
                    "email": f"ratelimit{i}@example.com",
                    "password": "Password123",
                },
            )
            assert response.status_code != 429

        response = client.post(
            "/api/auth/register",
            json={"name": "Test User", "email": "another@example.com", "password": "Password123"},
        )
        assert response.status_code == 429
