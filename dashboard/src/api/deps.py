"""
FastAPI dependency injection providers.

The upstream client is built once in the application lifespan and stored on
``app.state``; these providers hand it to route handlers.

CHANGELOG:
- 2026-10-13: Initial creation (STORY-009)
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from dashboard.src.client import SolarCloudClient, SolarCloudError


def get_client(request: Request) -> SolarCloudClient:
    """Return the shared upstream gateway client."""
    return request.app.state.client


# Type alias for injecting the gateway client via FastAPI Depends().
# Usage in route handlers:
#   async def my_route(client: SolarClient):
#       payload = await client.login()
SolarClient = Annotated[SolarCloudClient, Depends(get_client)]


def upstream_http_error(exc: SolarCloudError) -> HTTPException:
    """Translate an upstream failure into an HTTPException for the caller."""
    return HTTPException(
        status_code=exc.status_code,
        detail={"error": exc.message, "details": exc.details},
    )
