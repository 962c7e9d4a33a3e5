"""
Pytest configuration and fixtures
"""
import sys
from pathlib import Path

import mongomock
import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from auth import TokenService, get_token_service  # noqa: E402
from database import get_db  # noqa: E402
from main import app  # noqa: E402

TEST_SECRET = "test-secret"


@pytest.fixture
def mongo_db():
    """A fresh in-memory database per test"""
    return mongomock.MongoClient()["groupStudyDB"]


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET)


@pytest.fixture
def client(mongo_db, token_service):
    """Test client wired to the in-memory database and a fixed signing secret"""
    app.dependency_overrides[get_db] = lambda: mongo_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Log the test client in as the given email"""
    def _login(email):
        response = client.post("/api/v1/auth/jwt", json={"email": email})
        assert response.status_code == 200
        return response
    return _login
