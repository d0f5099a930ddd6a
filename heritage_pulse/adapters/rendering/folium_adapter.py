"""Folium map renderer for schedule days."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

import folium

from ...domain.errors import RenderingError
from ...domain.models import RouteEstimate, ScheduleDay

DAY_COLORS = ("blue", "red", "green", "purple", "orange", "darkred", "cadetblue")


@dataclass
class FoliumMapRenderer:
    """Folium-based interactive map renderer.

    Implements MapRendererPort. Each day gets its own colour: one marker
    per stop and a polyline along the day's road geometry when a route
    carries one, otherwise joining the stops in visiting order.
    """

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def render(
        self,
        days: Sequence[ScheduleDay],
        output_path: Path,
        routes: Optional[Sequence[Optional[RouteEstimate]]] = None,
    ) -> Path:
        """Render the schedule on a map and save it as HTML.

        Raises:
            RenderingError: If there is nothing to draw or rendering fails.
        """
        stops = [stop for day in days for stop in day.stops]
        if not stops:
            raise RenderingError(
                "Cannot render an empty schedule",
                output_path=str(output_path),
                renderer_type="folium",
            )

        self._logger.info(
            "Rendering schedule map",
            extra={"days": len(days), "stops": len(stops), "output_path": str(output_path)},
        )

        try:
            center_lat = sum(s.site.latitude for s in stops) / len(stops)
            center_lng = sum(s.site.longitude for s in stops) / len(stops)
            m = folium.Map(location=[center_lat, center_lng], zoom_start=12)

            for index, day in enumerate(days):
                color = DAY_COLORS[(day.day - 1) % len(DAY_COLORS)]
                for order, stop in enumerate(day.stops, start=1):
                    folium.Marker(
                        location=[stop.site.latitude, stop.site.longitude],
                        popup=f"Day {day.day} #{order}: {stop.site.name} ({stop.arrival_time})",
                        tooltip=stop.site.name,
                        icon=folium.Icon(color=color),
                    ).add_to(m)

                route = routes[index] if routes and index < len(routes) else None
                line = _day_line(day, route)
                if len(line) >= 2:
                    folium.PolyLine(
                        line,
                        weight=3,
                        color=color,
                        opacity=0.8,
                        tooltip=f"Day {day.day}",
                    ).add_to(m)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            m.save(str(output_path))
        except Exception as e:
            self._logger.error(
                "Map rendering failed",
                extra={"error": str(e), "output_path": str(output_path)},
            )
            raise RenderingError(
                f"Map rendering failed: {e}",
                output_path=str(output_path),
                renderer_type="folium",
                cause=e,
            )

        self._logger.info("Map rendered successfully", extra={"output_path": str(output_path)})
        return output_path


def _day_line(day: ScheduleDay, route: Optional[RouteEstimate]) -> List[List[float]]:
    if route is not None and route.geometry:
        return [[lat, lng] for lat, lng in route.geometry]
    return [[s.site.latitude, s.site.longitude] for s in day.stops]
