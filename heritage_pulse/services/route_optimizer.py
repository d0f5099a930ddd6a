"""Greedy multi-day route optimizer.

Each day starts at the window start from the day-start coordinate, then
repeatedly walks to the nearest unvisited site as long as travel plus visit
still ends inside the window. Distances are haversine, travel time comes
from a constant city speed plus a fixed buffer, visit time from the site
category.

A day on which not even the nearest site fits gets that site anyway,
flagged ``forced``, so every call terminates with every site scheduled
exactly once. Such a day may end after the window; the overrun is not
capped, only reported by ``summarize``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..domain.categories import visit_duration_minutes
from ..domain.geo import haversine_km
from ..domain.models import DayWindow, GeoLocation, ScheduleDay, ScheduledStop, Site


@dataclass
class RouteOptimizer:
    """Deterministic nearest-neighbour scheduler.

    Attributes:
        speed_kmh: Average travel speed between sites
        buffer_minutes: Fixed overhead added to every leg
    """

    speed_kmh: float = 30.0
    buffer_minutes: int = 5

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.speed_kmh <= 0:
            raise ValueError("speed_kmh must be positive")
        self._logger = logging.getLogger(__name__)

    def travel_minutes(self, distance_km: float) -> int:
        """Minutes to cover ``distance_km``, rounded up, plus the buffer."""
        return math.ceil(distance_km / self.speed_kmh * 60) + self.buffer_minutes

    def optimize(
        self,
        sites: Sequence[Site],
        window: DayWindow,
        start: Optional[GeoLocation] = None,
    ) -> List[ScheduleDay]:
        """Partition ``sites`` into ordered schedule days.

        Args:
            sites: Sites to schedule; ties in distance go to the earlier one.
            window: Daily time window.
            start: Where every day begins. Defaults to the first unvisited
                site of the day.

        Returns:
            Days in order, numbered from 1.
        """
        unvisited = list(sites)
        days: List[ScheduleDay] = []

        while unvisited:
            anchor = start or unvisited[0].location
            stops = self._plan_day(unvisited, window, anchor)
            if not stops:
                stops = [self._forced_stop(unvisited, window, anchor)]
            days.append(ScheduleDay(day=len(days) + 1, stops=tuple(stops)))

        self._logger.info(
            "Route optimized",
            extra={
                "sites": len(sites),
                "days": len(days),
                "forced_days": sum(1 for d in days if d.has_forced_stop),
            },
        )
        return days

    def _plan_day(
        self, unvisited: List[Site], window: DayWindow, anchor: GeoLocation
    ) -> List[ScheduledStop]:
        stops: List[ScheduledStop] = []
        clock = window.start_minutes

        while unvisited:
            index, distance = _nearest(unvisited, anchor)
            site = unvisited[index]
            travel = self.travel_minutes(distance)
            visit = visit_duration_minutes(site.category)

            if clock + travel + visit > window.end_minutes:
                break

            stops.append(
                ScheduledStop(
                    site=site,
                    arrival_minutes=clock + travel,
                    visit_minutes=visit,
                    travel_minutes=travel,
                    travel_distance_km=distance,
                )
            )
            clock += travel + visit
            anchor = site.location
            del unvisited[index]

        return stops

    def _forced_stop(
        self, unvisited: List[Site], window: DayWindow, anchor: GeoLocation
    ) -> ScheduledStop:
        index, distance = _nearest(unvisited, anchor)
        site = unvisited.pop(index)
        travel = self.travel_minutes(distance)
        self._logger.warning(
            "Site does not fit in a day, forcing it",
            extra={"site_id": site.id, "distance_km": round(distance, 1)},
        )
        return ScheduledStop(
            site=site,
            arrival_minutes=window.start_minutes + travel,
            visit_minutes=visit_duration_minutes(site.category),
            travel_minutes=travel,
            travel_distance_km=distance,
            forced=True,
        )


def _nearest(sites: Sequence[Site], anchor: GeoLocation) -> tuple[int, float]:
    best_index, best_distance = 0, math.inf
    for index, site in enumerate(sites):
        distance = haversine_km(anchor, site.location)
        if distance < best_distance:
            best_index, best_distance = index, distance
    return best_index, best_distance


def overrun_minutes(day: ScheduleDay, window: DayWindow) -> int:
    """How far the day's last departure runs past the window end."""
    if not day.stops:
        return 0
    return max(0, day.stops[-1].departure_minutes - window.end_minutes)


def summarize(days: Sequence[ScheduleDay], window: DayWindow) -> Dict[str, Any]:
    """Per-day statistics and the forced-stop overrun report."""
    overruns = [
        {"day": day.day, "overrun_minutes": overrun_minutes(day, window)}
        for day in days
        if day.has_forced_stop
    ]
    return {
        "days": [{"day": day.day, **day.stats().to_dict()} for day in days],
        "forced_days": overruns,
        "max_overrun_minutes": max((o["overrun_minutes"] for o in overruns), default=0),
    }
