"""
api/routes/health.py
--------------------
Health-check endpoint, used by load balancers and container probes.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from ... import __version__

router = APIRouter()


@router.get("/health", summary="Health check")
def health(request: Request) -> dict:
    """Returns 200 OK when the service is running."""
    config = request.app.state.container.config
    return {
        "success": True,
        "data": {
            "status": "ok",
            "service": "heritage-pulse",
            "version": __version__,
            "environment": config.api.environment,
        },
    }
