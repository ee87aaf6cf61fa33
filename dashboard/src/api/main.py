"""
FastAPI application entry point for the solar dashboard API.

Settings are loaded and validated at startup; a SolarCloudClient built from
them is stored on app.state for route handlers. CORS origins are read from
the CORS_ORIGINS environment variable when the module is imported, since
middleware must be installed before the application starts.

CHANGELOG:
- 2026-10-16: Register analytics router (STORY-011)
- 2026-10-13: Register solar proxy router (STORY-010)
- 2026-10-12: Initial creation (STORY-009)
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.src.api.analytics import router as analytics_router
from dashboard.src.api.health import router as health_router
from dashboard.src.api.solar import router as solar_router
from dashboard.src.client import SolarCloudClient
from dashboard.src.config import DashboardSettings

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Parse the comma-separated CORS_ORIGINS variable (default ``*``)."""
    raw = os.environ.get("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup validation and shutdown logging.

    Startup:
        - Loads and validates DashboardSettings from the environment.
        - Builds the shared upstream client.

    Shutdown:
        - Logs that the API is shutting down.
    """
    settings = DashboardSettings()
    app.state.settings = settings
    app.state.client = SolarCloudClient(settings)
    logger.info("Settings validated, dashboard API ready (upstream %s)", settings.solar_base_url)
    yield
    logger.info("Dashboard API shutting down")


app = FastAPI(
    title="Solar Dashboard API",
    description="iSolarCloud proxy and cumulative-to-period energy analytics.",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(health_router)
app.include_router(solar_router)
app.include_router(analytics_router)
