"""Nominatim geocoder adapter.

Resolves the free-text location of a request to a Place through
OpenStreetMap's Nominatim service, using geopy for the protocol and rate
limiting and the shared RetryPolicy for transient failures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from geopy.exc import (
    GeocoderRateLimited,
    GeocoderTimedOut,
    GeocoderUnavailable,
    GeopyError,
)
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.errors import GeocodingError
from ...domain.models import GeoLocation, Place
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache
from ..http.retry import RetryPolicy

_TRANSIENT = (GeocoderTimedOut, GeocoderUnavailable, GeocoderRateLimited)


@dataclass
class NominatimGeocoderAdapter:
    """Nominatim geocoder with caching, rate limiting and retries.

    Implements GeocoderPort.

    Attributes:
        config: Geocoding configuration
        cache: Cache for successful lookups
        retry: Retry policy for transient service errors
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: CachePort[Place] = field(
        default_factory=lambda: InMemoryCache(name="geocode", default_ttl_seconds=24 * 3600)
    )
    retry: Optional[RetryPolicy] = None

    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.retry is None:
            self.retry = RetryPolicy.from_settings(self.config)

    def _get_geocoder(self) -> Any:
        """Get or initialize the rate-limited geocode function."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "timeout": self.config.timeout_seconds,
            },
        )
        geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
        )
        # Retries are owned by RetryPolicy, so the limiter only paces calls
        self._geocode_fn = RateLimiter(
            geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=0,
            swallow_exceptions=False,
        )
        return self._geocode_fn

    def geocode(self, query: str) -> Optional[Place]:
        """Geocode a location query.

        Args:
            query: The location name to geocode.

        Returns:
            The best matching Place, or None if there is no match.

        Raises:
            GeocodingError: If the service could not be reached.
        """
        if not query or not query.strip():
            return None

        cache_key = f"{query.strip().lower()}:{self.config.language}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Geocode cache hit", extra={"query": query})
            return cached

        geocode_fn = self._get_geocoder()
        assert self.retry is not None
        try:
            location = self.retry.call(
                lambda: geocode_fn(
                    query.strip(),
                    exactly_one=True,
                    addressdetails=True,
                    language=self.config.language,
                ),
                retry_on=_TRANSIENT,
                operation="nominatim.geocode",
            )
        except GeopyError as e:
            self._logger.warning(
                "Geocode service error",
                extra={"query": query, "error": str(e)},
            )
            raise GeocodingError(
                f"Geocoding service unavailable for '{query}'", cause=e, query=query
            )

        if location is None:
            self._logger.info("Geocode returned no result", extra={"query": query})
            return None

        place = _to_place(location.raw, float(location.latitude), float(location.longitude))
        self._logger.debug(
            "Geocode success",
            extra={"query": query, "place": place.name},
        )
        self.cache.set(cache_key, place)
        return place


def _to_place(raw: Mapping[str, Any], latitude: float, longitude: float) -> Place:
    bbox = raw.get("boundingbox")
    bounding_box = None
    if bbox and len(bbox) == 4:
        try:
            south, north, west, east = (float(v) for v in bbox)
            bounding_box = (south, north, west, east)
        except (TypeError, ValueError):
            bounding_box = None

    return Place(
        name=str(raw.get("display_name", "")),
        location=GeoLocation(latitude=latitude, longitude=longitude),
        place_type=raw.get("type"),
        address={k: str(v) for k, v in (raw.get("address") or {}).items()},
        bounding_box=bounding_box,
    )
