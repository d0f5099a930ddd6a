"""Validation of generated itineraries against the candidate registry.

A generated plan may mention places that were never among the candidates.
Every activity is matched by exact site id first and exact site name
second; whatever does not match is dropped, and matched activities carry
the full candidate record. Counts are always recomputed from what
survived.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..domain.models import (
    ProposedActivity,
    ProposedItinerary,
    Site,
    ValidatedActivity,
    ValidatedDay,
    ValidatedItinerary,
)

logger = logging.getLogger(__name__)


class SiteRegistry:
    """Id- and name-addressable view of the candidate sites."""

    def __init__(self, sites: Sequence[Site]) -> None:
        self._by_id: Dict[str, Site] = {}
        self._by_name: Dict[str, Site] = {}
        for site in sites:
            self._by_id.setdefault(site.id, site)
            self._by_name.setdefault(site.name, site)

    def __len__(self) -> int:
        return len(self._by_id)

    def match(self, activity: ProposedActivity) -> Optional[Site]:
        if activity.site_id and activity.site_id in self._by_id:
            return self._by_id[activity.site_id]
        return self._by_name.get(activity.location)


def validate_itinerary(
    proposal: ProposedItinerary, candidates: Sequence[Site]
) -> ValidatedItinerary:
    """Keep only activities that refer to a known candidate site."""
    registry = SiteRegistry(candidates)
    days: List[ValidatedDay] = []
    dropped = 0

    for day in proposal.days:
        kept: List[ValidatedActivity] = []
        for activity in day.activities:
            site = registry.match(activity)
            if site is None:
                dropped += 1
                logger.warning(
                    "Dropping activity for unknown site",
                    extra={
                        "day": day.day,
                        "location": activity.location,
                        "site_id": activity.site_id,
                    },
                )
                continue
            kept.append(
                ValidatedActivity(
                    time=activity.time,
                    activity=activity.activity,
                    location=activity.location,
                    notes=activity.notes,
                    site=site,
                )
            )
        days.append(ValidatedDay(day=day.day, theme=day.theme, activities=tuple(kept)))

    result = ValidatedItinerary(days=tuple(days), dropped=dropped)
    logger.info(
        "Itinerary validated",
        extra={"days": len(days), "kept": result.total_sites, "dropped": dropped},
    )
    return result
