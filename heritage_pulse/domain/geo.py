"""Great-circle helpers shared by the optimizer and the routing fallback."""

from __future__ import annotations

import math
from typing import Sequence

from .models import GeoLocation

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoLocation, b: GeoLocation) -> float:
    """Return the great-circle distance between two points in kilometres."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def path_length_km(points: Sequence[GeoLocation]) -> float:
    """Sum of haversine legs between consecutive points."""
    return sum(haversine_km(p, q) for p, q in zip(points, points[1:]))


def within_tolerance(a: GeoLocation, b: GeoLocation, tolerance_deg: float) -> bool:
    """True when both coordinate deltas are strictly below ``tolerance_deg``."""
    return (
        abs(a.latitude - b.latitude) < tolerance_deg
        and abs(a.longitude - b.longitude) < tolerance_deg
    )
