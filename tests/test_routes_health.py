"""
Tests for health route module
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock


@pytest.fixture
def mock_state(config):
    """Create mocked app state with a healthy database"""
    state = Mock()
    state.get_config.return_value = config
    state.is_database_healthy.return_value = True
    return state


@pytest.fixture
def client(mock_state):
    """Create test client with mocked dependencies"""
    from fastapi import FastAPI
    from routes.health import router

    app = FastAPI()
    app.include_router(router)

    app.state.app_state = mock_state

    return TestClient(app)


class TestRootEndpoint:
    """Test root / endpoint"""

    def test_root_returns_api_info(self, client):
        """Root should return API info with links"""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()

        assert "Rando Search API" in data["message"]
        assert data["docs"] == "/docs"
        assert data["health"] == "/health"
        assert data["search"] == ["/v0/randos", "/v1/randos"]


class TestHealthEndpoint:
    """Test /health endpoint"""

    def test_health_returns_healthy(self, client):
        """Health check reports the configured database"""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "randos"}

    def test_health_unreachable_database(self, client, mock_state):
        """Failed ping returns 503"""
        mock_state.is_database_healthy.return_value = False

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestAppStateDependency:
    """Test the get_app_state route helper"""

    def test_returns_attached_state(self, mock_state):
        from routes.deps import get_app_state

        request = Mock()
        request.app.state.app_state = mock_state

        assert get_app_state(request) is mock_state
