"""
Pytest configuration and fixtures for testing the worklog backend application.
"""
import sys
import os
from datetime import date
from typing import Generator, Dict

# Settings are read at import time, so the test environment goes first
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("REPORT_GENERATION_DELAY_SECONDS", "0")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add the parent directory to the path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from worklog.main import app
from worklog.core.security import create_access_token
from worklog.db.session import Base, get_db, get_session_factory
from worklog.models.user import BusinessAnalyst, Client, Developer, User, BillingType, AccountStatus
from worklog.models.project import Project, ProjectStatus
from worklog.models.task import Task
from worklog.services.report_service import get_report_store
from worklog.utils.hash import hash_password


TEST_PASSWORD = "TestPassword123"

# Create in-memory SQLite database for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    Background report jobs get sessions from the same in-memory engine.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal

    # Reset rate limiter for each test to avoid rate limit issues in tests
    app.state.limiter.reset()
    get_report_store().clear()

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers_for(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


def _save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def test_ba_user(db: Session) -> BusinessAnalyst:
    """
    Create a Business Analyst test user.
    """
    return _save(
        db,
        BusinessAnalyst(
            name="Test BA",
            email="ba@test.com",
            password_hash=hash_password(TEST_PASSWORD),
        ),
    )


@pytest.fixture
def test_client_user(db: Session, test_ba_user: BusinessAnalyst) -> Client:
    """
    Create a Client test user.
    """
    return _save(
        db,
        Client(
            name="Acme Corp",
            email="client@test.com",
            password_hash=hash_password(TEST_PASSWORD),
            billing_type=BillingType.hourly,
            status=AccountStatus.active,
            creating_user_id=test_ba_user.id,
        ),
    )


@pytest.fixture
def test_another_client_user(db: Session, test_ba_user: BusinessAnalyst) -> Client:
    """
    Create another Client test user for multi-user scenarios.
    """
    return _save(
        db,
        Client(
            name="Globex",
            email="client2@test.com",
            password_hash=hash_password(TEST_PASSWORD),
            billing_type=BillingType.fixed,
            status=AccountStatus.active,
            creating_user_id=test_ba_user.id,
        ),
    )


@pytest.fixture
def test_developer_user(db: Session, test_ba_user: BusinessAnalyst) -> Developer:
    """
    Create a Developer test user.
    """
    return _save(
        db,
        Developer(
            name="Dana Dev",
            email="dev@test.com",
            password_hash=hash_password(TEST_PASSWORD),
            hourly_rate=50.0,
            developer_role="Backend Engineer",
            status=AccountStatus.active,
            creating_user_id=test_ba_user.id,
        ),
    )


@pytest.fixture
def test_another_developer_user(db: Session, test_ba_user: BusinessAnalyst) -> Developer:
    """
    Create another Developer test user for multi-user scenarios.
    """
    return _save(
        db,
        Developer(
            name="Eli Dev",
            email="dev2@test.com",
            password_hash=hash_password(TEST_PASSWORD),
            hourly_rate=80.0,
            developer_role="Frontend Engineer",
            status=AccountStatus.active,
            creating_user_id=test_ba_user.id,
        ),
    )


@pytest.fixture
def test_project(
    db: Session,
    test_ba_user: BusinessAnalyst,
    test_client_user: Client,
    test_developer_user: Developer,
) -> Project:
    """
    Create an active project for the test client with the test developer on it.
    """
    project = Project(
        name="Website Redesign",
        client_id=test_client_user.id,
        status=ProjectStatus.active,
        billing_type=BillingType.hourly,
        actual_hours=0.0,
        created_by=test_ba_user.id,
    )
    project.developers = [test_developer_user]
    return _save(db, project)


@pytest.fixture
def test_task(
    db: Session, test_ba_user: BusinessAnalyst, test_project: Project, test_developer_user: Developer
) -> Task:
    """
    Create a task in the test project assigned to the test developer.
    """
    task = Task(
        title="Build landing page",
        project_id=test_project.id,
        actual_hours=0.0,
        created_by=test_ba_user.id,
    )
    task.assignees = [test_developer_user]
    return _save(db, task)


@pytest.fixture
def ba_auth_headers(test_ba_user: BusinessAnalyst) -> Dict[str, str]:
    """
    Get authentication headers for BA user.
    """
    return auth_headers_for(test_ba_user)


@pytest.fixture
def client_auth_headers(test_client_user: Client) -> Dict[str, str]:
    """
    Get authentication headers for Client user.
    """
    return auth_headers_for(test_client_user)


@pytest.fixture
def another_client_auth_headers(test_another_client_user: Client) -> Dict[str, str]:
    return auth_headers_for(test_another_client_user)


@pytest.fixture
def developer_auth_headers(test_developer_user: Developer) -> Dict[str, str]:
    """
    Get authentication headers for Developer user.
    """
    return auth_headers_for(test_developer_user)


@pytest.fixture
def another_developer_auth_headers(test_another_developer_user: Developer) -> Dict[str, str]:
    return auth_headers_for(test_another_developer_user)


def hour_log_payload(project: Project, developer: Developer, task: Task = None, **overrides) -> dict:
    """JSON body for POST /api/hour-logs against the given project."""
    payload = {
        "client_id": project.client_id,
        "developer_id": developer.id,
        "project_id": project.id,
        "task_id": task.id if task is not None else None,
        "date": date.today().isoformat(),
        "hours": 4,
        "description": "Worked on features",
    }
    payload.update(overrides)
    return payload
