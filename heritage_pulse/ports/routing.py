"""Routing port - Road distance and duration along a coordinate list."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import GeoLocation, RouteEstimate


class RoutingPort(Protocol):
    """Port for road routing.

    Implementation: adapters/routing/osrm_adapter.py
    """

    def route(
        self, coordinates: Sequence[GeoLocation], optimize: bool = False
    ) -> RouteEstimate:
        """Estimate a route through ``coordinates`` in order.

        When the routing service fails, a straight-line estimate with
        ``source="fallback"`` is returned instead of raising.

        Raises:
            RequestValidationError: If fewer than two coordinates are given.
        """
        ...
