"""
api/routes/itinerary.py
-----------------------
POST /api/itinerary/generate
GET  /api/itinerary/{itinerary_id}

Generation runs the full pipeline, either through the reasoning model
("ai") or the greedy route optimizer ("optimize").
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...services import HeritagePlannerService
from ..dependencies import get_planner
from ..schemas import ItineraryRequest

router = APIRouter()


@router.post("/generate", summary="Generate a multi-day heritage itinerary")
def generate(
    body: ItineraryRequest,
    planner: HeritagePlannerService = Depends(get_planner),
) -> dict:
    result = planner.generate_itinerary(
        body.location,
        days=body.days,
        preferences=body.preferences.to_domain(
            planner.config.day_start, planner.config.day_end
        ),
        radius_km=body.radius_km,
        mode=body.mode,
    )
    return {"success": True, "data": result}


@router.get("/{itinerary_id}", summary="Fetch a stored itinerary")
def get_itinerary(
    itinerary_id: str,
    planner: HeritagePlannerService = Depends(get_planner),
) -> dict:
    return {"success": True, "data": planner.get_itinerary(itinerary_id)}
