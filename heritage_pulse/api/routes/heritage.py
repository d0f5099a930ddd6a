"""
api/routes/heritage.py
----------------------
POST /api/heritage/discover

Geocodes the location, gathers sites from every source and returns the
enriched, deduplicated list.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...services import HeritagePlannerService
from ..dependencies import get_planner
from ..schemas import DiscoverRequest

router = APIRouter()


@router.post("/discover", summary="Discover heritage sites around a location")
def discover(
    body: DiscoverRequest,
    planner: HeritagePlannerService = Depends(get_planner),
) -> dict:
    result = planner.discover(
        body.location,
        radius_km=body.radius_km,
        categories=tuple(body.categories),
    )
    return {"success": True, "data": result}
