"""
Health check endpoint for the dashboard API.

Provides a simple GET /health endpoint that returns {"status": "ok"} with
HTTP 200. It never calls the upstream gateway, so it reports process
liveness only.

CHANGELOG:
- 2026-10-12: Initial creation (STORY-009)

TODO:
- None
"""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Return a simple health status.

    Returns:
        dict: ``{"status": "ok"}`` indicating the service is alive.
    """
    return {"status": "ok"}
