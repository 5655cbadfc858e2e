"""Pytest configuration and shared fixtures."""
import os
from typing import Generator

# Set test environment variables BEFORE any package imports
os.environ["TESTING"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("SENTRY_DSN", None)
os.environ.pop("AVOID_CORS", None)
os.environ.pop("API_PATH", None)

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ciudadano_digital.config import database
from ciudadano_digital.config.settings import Settings
from ciudadano_digital.core.application import create_application


def _settings(**overrides) -> Settings:
    values = {"database_url": "sqlite://", "port": 3000}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def reset_database():
    """Forget the engine created by a test's startup."""
    yield
    database.dispose_database()


@pytest.fixture
def make_settings():
    """Factory for Settings isolated from any local .env file."""
    return _settings


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Application built with the default feature routers and an in-memory database."""
    return create_application(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client that runs the lifespan; 500s come back as responses."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
