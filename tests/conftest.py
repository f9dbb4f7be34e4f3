import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, MagicMock
from fastapi.testclient import TestClient

from main import app
from app.database import get_db
from app.auth.dependencies import get_current_user
from app.models.user import User, UserRole


def _make_user(id, email, role):
    user = Mock(spec=User)
    user.id = id
    user.email = email
    user.name = None
    user.role = role
    user.is_active = True
    user.password_hash = "$2b$12$test_hash"
    user.created_at = datetime(2026, 1, 5, tzinfo=timezone.utc)
    return user


@pytest.fixture
def mock_db():
    """Mock database session"""
    db = MagicMock()
    db.query.return_value = db
    db.filter.return_value = db
    db.order_by.return_value = db
    db.first.return_value = None
    db.all.return_value = []
    db.count.return_value = 0
    return db


@pytest.fixture
def mock_instructor():
    return _make_user(1, "instructor@test.edu", UserRole.INSTRUCTOR)


@pytest.fixture
def mock_guest():
    return _make_user(2, "guest@test.edu", UserRole.GUEST)


@pytest.fixture
def mock_admin():
    return _make_user(3, "admin@test.edu", UserRole.ADMIN)


@pytest.fixture
def client_with_instructor(mock_db, mock_instructor):
    """TestClient with instructor auth and mocked DB"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: mock_instructor
    client = TestClient(app)
    yield client, mock_db, mock_instructor
    app.dependency_overrides.clear()


@pytest.fixture
def client_with_guest(mock_db, mock_guest):
    """TestClient with guest auth and mocked DB"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: mock_guest
    client = TestClient(app)
    yield client, mock_db, mock_guest
    app.dependency_overrides.clear()


@pytest.fixture
def client_with_admin(mock_db, mock_admin):
    """TestClient with admin auth and mocked DB"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: mock_admin
    client = TestClient(app)
    yield client, mock_db, mock_admin
    app.dependency_overrides.clear()


@pytest.fixture
def unauthenticated_client(mock_db):
    """TestClient with mocked DB but no auth"""
    app.dependency_overrides[get_db] = lambda: mock_db
    client = TestClient(app)
    yield client, mock_db
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)
