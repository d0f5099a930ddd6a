"""Overpass (OpenStreetMap) adapter for points-of-interest searches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from ...config import OverpassConfig, get_config
from ...domain.categories import categorize_site
from ...domain.errors import TransportError, UpstreamFormatError
from ...domain.models import GeoLocation, Site, SiteSource
from ..http.client import HttpClient
from ..http.retry import RetryPolicy


def build_query(latitude: float, longitude: float, radius_meters: int, historic_pattern: str) -> str:
    """Overpass QL for historic elements and tourist attractions around a point."""
    around = f"(around:{int(radius_meters)},{latitude},{longitude})"
    historic = f'["historic"~"{historic_pattern}"]'
    return (
        "[out:json][timeout:25];\n"
        "(\n"
        f"  node{historic}{around};\n"
        f"  way{historic}{around};\n"
        f"  relation{historic}{around};\n"
        f'  node["tourism"="attraction"]{around};\n'
        ");\n"
        "out body center qt;\n"
    )


@dataclass
class OverpassSiteAdapter:
    """Points-of-interest search against an Overpass API instance.

    Implements PointsOfInterestPort. Only named elements with coordinates
    (their own, or the centre of a way/relation) are returned.

    Attributes:
        config: Overpass configuration
        http: Shared HTTP client
    """

    config: OverpassConfig = field(default_factory=lambda: get_config().overpass)
    http: HttpClient = field(default_factory=HttpClient)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def nearby(self, latitude: float, longitude: float, radius_meters: int) -> List[Site]:
        query = build_query(latitude, longitude, radius_meters, self.config.historic_pattern)
        try:
            payload = self.http.post_json(
                self.config.endpoint,
                data={"data": query},
                timeout=self.config.timeout_seconds,
                retry=RetryPolicy.from_settings(self.config),
            )
            elements = payload.get("elements") if isinstance(payload, dict) else None
            if not isinstance(elements, list):
                raise UpstreamFormatError(
                    "Overpass response has no elements list", source="overpass"
                )
        except (TransportError, UpstreamFormatError) as e:
            self._logger.warning(
                "Overpass search failed",
                extra={"radius_meters": radius_meters, "error": str(e)},
            )
            return []

        sites = [s for s in (self._to_site(el) for el in elements) if s is not None]
        self._logger.info(
            "Overpass search complete",
            extra={"elements": len(elements), "sites": len(sites)},
        )
        return sites

    def _to_site(self, element: Mapping[str, Any]) -> Optional[Site]:
        tags = element.get("tags") or {}
        name = tags.get("name:en") or tags.get("name")
        if not name:
            return None

        location = _coordinates(element)
        if location is None:
            return None

        local_name = tags.get("name")
        return Site(
            id=f"osm_{element.get('id')}",
            name=name,
            category=categorize_site(tags=tags, name=name),
            location=location,
            source=SiteSource.POINTS_OF_INTEREST,
            local_name=local_name if local_name and local_name != name else None,
            tags={str(k): str(v) for k, v in tags.items()},
        )


def _coordinates(element: Mapping[str, Any]) -> Optional[GeoLocation]:
    center = element.get("center") or {}
    lat = element.get("lat", center.get("lat"))
    lon = element.get("lon", center.get("lon"))
    if lat is None or lon is None:
        return None
    try:
        return GeoLocation(latitude=float(lat), longitude=float(lon))
    except (TypeError, ValueError):
        return None
