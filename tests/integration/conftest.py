"""Shared fixtures for integration tests against the FastAPI app and a fake provider."""

import pytest
from fastapi.testclient import TestClient

from src.core.config import Settings

ADDRESS = "abc12345@1secmail.com"


@pytest.fixture
def app_settings() -> Settings:
    """Settings with a long check interval so ticks only run when a test triggers them."""
    return Settings(env="testing", check_interval=3600, rate_limit_enabled=False, log_dir="")


@pytest.fixture
def test_app(app_settings, fake_provider):
    """Application wired to the fake provider."""
    from web.app import create_app

    return create_app(settings=app_settings, provider_client=fake_provider)


@pytest.fixture
def client(test_app):
    """
    Create a FastAPI test client with the real lifespan.

    Yields:
        TestClient instance for making HTTP requests and WebSocket connections
    """
    with TestClient(test_app) as client:
        yield client


@pytest.fixture
def coordinator(test_app):
    return test_app.state.coordinator
