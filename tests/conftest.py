"""Shared fixtures: settings isolated from the environment, and small apps with the conventions installed."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apiconv.core.conventions import Conventions, build_conventions, install
from apiconv.settings import Settings, get_settings

_ENV_VARS = (
    "APP_NAME",
    "ENV",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "LOCALE",
    "APP_LOCALE",
    "REQUEST_ID_HEADER",
    "STATUS_OVERRIDES",
    "HOST",
    "PORT",
    "BACKEND_PORT",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, environment="test")


@pytest.fixture
def conventions(settings) -> Conventions:
    return build_conventions(settings)


@pytest.fixture
def app(conventions) -> FastAPI:
    app = FastAPI()
    install(app, conventions)
    return app


@pytest.fixture
def client(app) -> TestClient:
    # Unhandled errors are answered by our handler; don't re-raise them into the test.
    return TestClient(app, raise_server_exceptions=False)
