"""OSRM adapter for road routing with a straight-line fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from ...config import RoutingConfig, get_config
from ...domain.errors import RequestValidationError, TransportError, UpstreamFormatError
from ...domain.geo import path_length_km
from ...domain.models import GeoLocation, RouteEstimate
from ..http.client import HttpClient
from ..http.retry import RetryPolicy


@dataclass
class OSRMRoutingAdapter:
    """Route estimates from an OSRM server.

    Implements RoutingPort. When OSRM cannot produce a route, the estimate
    falls back to the sum of haversine legs at ``fallback_speed_kmh``.

    Attributes:
        config: Routing configuration
        http: Shared HTTP client
    """

    config: RoutingConfig = field(default_factory=lambda: get_config().routing)
    http: HttpClient = field(default_factory=HttpClient)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def route(
        self, coordinates: Sequence[GeoLocation], optimize: bool = False
    ) -> RouteEstimate:
        if len(coordinates) < 2:
            raise RequestValidationError(
                "At least two coordinates are required for routing",
                field_errors={"coordinates": "at least two points required"},
            )

        service = "trip" if optimize else "route"
        path = ";".join(f"{c.longitude},{c.latitude}" for c in coordinates)
        url = f"{self.config.base_url.rstrip('/')}/{service}/v1/{self.config.profile}/{path}"

        try:
            payload = self.http.get_json(
                url,
                params={"overview": "full", "geometries": "geojson"},
                timeout=self.config.timeout_seconds,
                retry=RetryPolicy.from_settings(self.config),
            )
            return _parse_route(payload, "trips" if optimize else "routes")
        except (TransportError, UpstreamFormatError) as e:
            self._logger.warning(
                "OSRM routing failed, using straight-line estimate",
                extra={"points": len(coordinates), "error": str(e)},
            )
            return self.fallback(coordinates)

    def fallback(self, coordinates: Sequence[GeoLocation]) -> RouteEstimate:
        """Straight-line estimate with the same shape as a routed result."""
        distance_km = path_length_km(coordinates)
        return RouteEstimate(
            distance_km=round(distance_km, 2),
            duration_hours=round(distance_km / self.config.fallback_speed_kmh, 2),
            source="fallback",
        )


def _parse_route(payload: Any, key: str) -> RouteEstimate:
    if not isinstance(payload, dict) or payload.get("code") != "Ok":
        code = payload.get("code") if isinstance(payload, dict) else None
        raise UpstreamFormatError(f"OSRM returned code {code!r}", source="osrm")
    try:
        route = payload[key][0]
        distance_m = float(route["distance"])
        duration_s = float(route["duration"])
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise UpstreamFormatError("OSRM route is incomplete", cause=e, source="osrm")

    coords = (route.get("geometry") or {}).get("coordinates") or []
    geometry = tuple((float(lat), float(lng)) for lng, lat in coords) or None
    return RouteEstimate(
        distance_km=round(distance_m / 1000, 2),
        duration_hours=round(duration_s / 3600, 2),
        source="routed",
        geometry=geometry,
    )
