"""Geocoding port - Resolve a free-text location to coordinates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Place


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/nominatim_adapter.py

    The geocoder is the one hard dependency of the pipeline: a miss is
    reported as None, an unreachable service as GeocodingError.
    """

    def geocode(self, query: str) -> Optional[Place]:
        """Geocode a location query.

        Args:
            query: Free-text location, e.g. "Delhi" or "Hampi, Karnataka".

        Returns:
            The best matching Place, or None if there is no match.

        Raises:
            GeocodingError: If the service could not be reached.
        """
        ...
