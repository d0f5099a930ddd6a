"""Site search ports - knowledge-graph and points-of-interest sources.

Both ports degrade to an empty list when their upstream is unavailable,
so callers never need to handle transport failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol

if TYPE_CHECKING:
    from ..domain.models import GeoLocation, Site


class KnowledgeGraphPort(Protocol):
    """Port for knowledge-graph heritage searches.

    Implementation: adapters/sites/wikidata_adapter.py
    """

    def search(self, center: GeoLocation, radius_km: float, limit: int) -> List[Site]:
        """Return heritage sites within ``radius_km`` of ``center``.

        Args:
            center: Search centre.
            radius_km: Search radius in kilometres.
            limit: Maximum number of results.

        Returns:
            Normalised sites, or an empty list on upstream failure.
        """
        ...


class PointsOfInterestPort(Protocol):
    """Port for points-of-interest searches.

    Implementation: adapters/sites/overpass_adapter.py
    """

    def nearby(self, latitude: float, longitude: float, radius_meters: int) -> List[Site]:
        """Return historic or tourist-attraction sites around a point.

        Returns:
            Named sites only, or an empty list on upstream failure.
        """
        ...
