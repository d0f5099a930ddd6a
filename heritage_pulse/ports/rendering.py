"""Rendering port - Map visualisation of schedule days."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import RouteEstimate, ScheduleDay


class MapRendererPort(Protocol):
    """Port for map rendering.

    Implementation: adapters/rendering/folium_adapter.py
    """

    def render(
        self,
        days: Sequence[ScheduleDay],
        output_path: Path,
        routes: Optional[Sequence[Optional[RouteEstimate]]] = None,
    ) -> Path:
        """Render the schedule on a map and save it.

        Args:
            days: Schedule days to draw.
            output_path: HTML file to write.
            routes: Optional road route per day, aligned with ``days``.
                A route with geometry is drawn instead of straight legs.

        Raises:
            RenderingError: If rendering fails.
        """
        ...
