"""
Shared test fixtures for dashboard tests.

Provides environment variable fixtures for DashboardSettings, a mocked
gateway client, and a FastAPI TestClient wired to that mock. All dashboard
env vars are cleaned before each test to ensure isolation.

CHANGELOG:
- 2026-10-16: Add client fixture with mocked SolarCloudClient (STORY-010)
- 2026-10-12: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from dashboard.src.client import SolarCloudClient

# All DashboardSettings environment variable names, used for cleanup.
_ALL_DASHBOARD_ENV_VARS = (
    "SOLAR_APP_KEY",
    "SOLAR_SECRET_KEY",
    "SOLAR_USER_ACCOUNT",
    "SOLAR_USER_PASSWORD",
    "SOLAR_BASE_URL",
    "SOLAR_SYS_CODE",
    "SOLAR_TOKEN_SYS_CODE",
    "SOLAR_LANG",
    "REQUEST_TIMEOUT_S",
    "HOST",
    "PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_dashboard_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all dashboard env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_DASHBOARD_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_required_only(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set only the required environment variables (no optional ones)."""
    env = {
        "SOLAR_APP_KEY": "app-key-123",
        "SOLAR_SECRET_KEY": "secret-key-456",
        "SOLAR_USER_ACCOUNT": "operator@example.com",
        "SOLAR_USER_PASSWORD": "s3cret",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def env_vars_full(
    monkeypatch: pytest.MonkeyPatch,
    env_vars_required_only: dict[str, str],
) -> dict[str, str]:
    """Set all required and optional environment variables."""
    env = dict(env_vars_required_only)
    env.update(
        {
            "SOLAR_BASE_URL": "https://gateway.example.com/",
            "SOLAR_SYS_CODE": "208",
            "SOLAR_TOKEN_SYS_CODE": "902",
            "SOLAR_LANG": "_zh_CN",
            "REQUEST_TIMEOUT_S": "12.5",
            "HOST": "127.0.0.1",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
        }
    )
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def mock_solar_client() -> AsyncMock:
    """Create a mock gateway client with async call methods.

    Returns:
        AsyncMock: A mock specced on SolarCloudClient.
    """
    return AsyncMock(spec=SolarCloudClient)


@pytest.fixture()
def client(
    env_vars_required_only: dict[str, str],
    mock_solar_client: AsyncMock,
) -> Generator[TestClient, None, None]:
    """Create a FastAPI TestClient with the gateway client mocked out.

    Uses a context manager so the application lifespan (settings loading)
    runs. Route handlers receive ``mock_solar_client`` via the get_client
    dependency override.

    Yields:
        TestClient: Configured test client for the FastAPI app.
    """
    from dashboard.src.api.deps import get_client
    from dashboard.src.api.main import app

    app.dependency_overrides[get_client] = lambda: mock_solar_client
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
