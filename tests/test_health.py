"""
Taskboard API - Service Endpoint and Startup Check Tests
"""

import pytest
from fastapi.testclient import TestClient

from taskboard.main import app
from taskboard.config import Settings, settings
from taskboard.security import DEFAULT_JWT_SECRET, validate_security_config


@pytest.fixture
def client():
    """Plain client; these endpoints touch no repositories."""
    return TestClient(app)


def make_settings(**overrides) -> Settings:
    config = Settings()
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


class TestServiceEndpoints:
    """Tests for /health and /."""

    def test_health(self, client):
        """Health reports status, service name and version without auth."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "Taskboard API"
        assert data["version"] == settings.APP_VERSION
        assert "docs" in data

    def test_unknown_route_is_404(self, client):
        response = client.get("/no-such-route")
        assert response.status_code == 404


class TestSecurityConfig:
    """Tests for the startup configuration checks."""

    def test_development_defaults_pass(self):
        config = make_settings(ENVIRONMENT="development", CORS_ORIGINS=["http://localhost:3000"])
        assert validate_security_config(config) == []

    def test_default_secret_in_production(self):
        config = make_settings(
            ENVIRONMENT="production",
            JWT_SECRET_KEY=DEFAULT_JWT_SECRET,
            CORS_ORIGINS=["https://tasks.example.com"],
        )
        with pytest.warns(UserWarning, match="default JWT_SECRET_KEY"):
            issues = validate_security_config(config)
        assert len(issues) == 1

    def test_short_secret_in_production(self):
        config = make_settings(
            ENVIRONMENT="production",
            JWT_SECRET_KEY="short",
            CORS_ORIGINS=["https://tasks.example.com"],
        )
        with pytest.warns(UserWarning, match="too short"):
            validate_security_config(config)

    def test_weak_bcrypt_in_production(self):
        config = make_settings(
            ENVIRONMENT="production",
            JWT_SECRET_KEY="x" * 40,
            BCRYPT_ROUNDS=4,
            CORS_ORIGINS=["https://tasks.example.com"],
        )
        with pytest.warns(UserWarning, match="BCRYPT_ROUNDS"):
            validate_security_config(config)

    def test_cors_wildcard(self):
        config = make_settings(ENVIRONMENT="development", CORS_ORIGINS=["*"])
        with pytest.warns(UserWarning, match="CORS wildcard"):
            validate_security_config(config)
