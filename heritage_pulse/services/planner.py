"""Heritage planner service - Main orchestrator.

Discovery and itinerary generation share one pipeline:

1. Geocode the location (the only hard failure)
2. Fetch knowledge-graph and points-of-interest candidates concurrently
3. Merge and deduplicate, first source wins
4. Keep a named, bounded subset and enrich it concurrently
5. Schedule it, either with the greedy optimizer or with the reasoning
   model followed by validation against the candidates
6. Persist best-effort and respond
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..config import PlannerConfig, get_config
from ..domain.categories import slugify, visit_duration_minutes, visiting_info
from ..domain.errors import (
    GenerationError,
    ItineraryNotFoundError,
    LocationNotFoundError,
    PersistenceError,
    RenderingError,
    RequestValidationError,
)
from ..domain.ids import generate_id
from ..domain.models import (
    GeoLocation,
    ItineraryPreferences,
    ItineraryRecord,
    Place,
    RouteEstimate,
    Site,
    SiteCategory,
)
from ..ports.geocoding import GeocoderPort
from ..ports.persistence import ItineraryRepositoryPort
from ..ports.reasoning import ReasoningModelPort
from ..ports.rendering import MapRendererPort
from ..ports.routing import RoutingPort
from ..ports.sites import KnowledgeGraphPort, PointsOfInterestPort
from .aggregation import deduplicate_sites, merge_sources, select_candidates
from .enrichment import SiteEnricher
from .route_optimizer import RouteOptimizer, summarize
from .validation import validate_itinerary

MODES = ("ai", "optimize")
MAX_DAYS = 14

PLANNING_RULES = (
    "Use ONLY the provided heritage sites",
    "Reference each site by its exact name in 'location' and its id in 'site_id'",
    "Optimize daily routes to minimize travel time (group nearby sites)",
    "Balance site count per day based on pace",
    "Put historical context and visiting tips in 'notes'",
    "Output valid JSON matching the requested schema",
)


@dataclass
class HeritagePlannerService:
    """Discovery and itinerary planning over the source adapters.

    Attributes:
        geocoder: Resolves the requested location
        knowledge_graph: Knowledge-graph site source
        points_of_interest: Points-of-interest site source
        enricher: Narrative enrichment stage
        optimizer: Greedy route optimizer
        reasoning: Reasoning model for AI itineraries
        repository: Itinerary storage
        config: Planner constants
        routing: Optional road-routing estimates for optimized days
        map_renderer: Optional map rendering for optimized schedules
        map_output_dir: Where rendered maps are written
    """

    geocoder: GeocoderPort
    knowledge_graph: KnowledgeGraphPort
    points_of_interest: PointsOfInterestPort
    enricher: SiteEnricher
    optimizer: RouteOptimizer
    reasoning: ReasoningModelPort
    repository: ItineraryRepositoryPort
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)
    routing: Optional[RoutingPort] = None
    map_renderer: Optional[MapRendererPort] = None
    map_output_dir: Optional[Path] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(
        self,
        location: str,
        radius_km: float = 10,
        categories: Sequence[SiteCategory] = (),
    ) -> Dict[str, Any]:
        """Find and enrich heritage sites around a location.

        Raises:
            RequestValidationError: If the location or radius is invalid.
            LocationNotFoundError: If the location cannot be geocoded.
            GeocodingError: If the geocoder is unreachable.
        """
        _require(bool(location and location.strip()), "location", "is required")
        _require(radius_km > 0, "radius", "must be positive")

        place = self._locate(location)
        candidates = self._candidates(
            place.location, radius_km, self.config.discovery_wikidata_limit
        )
        if categories:
            wanted = set(categories)
            candidates = [s for s in candidates if s.category in wanted]

        selected = select_candidates(candidates, self.config.discovery_enrich_cap)
        sites = self.enricher.enrich(selected)

        self._logger.info(
            "Discovery complete",
            extra={"location": location, "candidates": len(candidates), "sites": len(sites)},
        )
        return {
            "location": place.to_dict(),
            "sites": [_site_payload(s) for s in sites],
            "count": len(sites),
            "radius_km": radius_km,
        }

    # ------------------------------------------------------------------
    # Itineraries
    # ------------------------------------------------------------------

    def generate_itinerary(
        self,
        location: str,
        days: int,
        preferences: Optional[ItineraryPreferences] = None,
        radius_km: float = 50,
        mode: str = "ai",
    ) -> Dict[str, Any]:
        """Build a day-by-day itinerary.

        Args:
            location: Free-text trip location.
            days: Requested trip length (1-14).
            preferences: Categories, pace and daily window; defaults to
                the configured planner day window.
            radius_km: Search radius around the location.
            mode: "ai" to have the reasoning model write the plan, or
                "optimize" for the deterministic greedy schedule.

        Raises:
            RequestValidationError: If an argument is invalid.
            LocationNotFoundError: If the location cannot be geocoded.
            GeocodingError: If the geocoder is unreachable.
            GenerationError: In "ai" mode, if the model fails.
        """
        preferences = preferences or ItineraryPreferences(
            start_time=self.config.day_start, end_time=self.config.day_end
        )
        _require(bool(location and location.strip()), "location", "is required")
        _require(1 <= days <= MAX_DAYS, "days", f"must be between 1 and {MAX_DAYS}")
        _require(radius_km > 0, "radius", "must be positive")
        _require(mode in MODES, "mode", f"must be one of {', '.join(MODES)}")
        try:
            window = preferences.day_window()
        except ValueError as e:
            raise RequestValidationError(
                "Invalid day window", cause=e, field_errors={"preferences": str(e)}
            )

        place = self._locate(location)
        limit = min(days * self.config.wikidata_limit_per_day, self.config.max_wikidata_limit)
        candidates = _prefer_categories(
            self._candidates(place.location, radius_km, limit), preferences.categories
        )
        cap = min(days * self.config.candidates_per_day, self.config.max_candidates)
        sites = self.enricher.enrich(select_candidates(candidates, cap, exclude_terms=("hotel",)))

        itinerary_id = generate_id("itin")
        if mode == "optimize":
            response = self._optimized(place, sites, window, start=place.location)
            response["map_path"] = self._render_map(
                itinerary_id, response.pop("_days"), response.pop("_routes")
            )
        else:
            response = self._generated(place, days, preferences, sites, window)

        summary = response.get("summary") or f"A {days}-day trip to {location}"
        record = ItineraryRecord(
            id=itinerary_id,
            location_name=place.name,
            days=days,
            preferences=preferences.to_dict(),
            schedule=tuple(response["schedule"]),
            summary=summary,
        )
        itinerary_id = self._persist(record)

        self._logger.info(
            "Itinerary generated",
            extra={
                "itinerary_id": itinerary_id,
                "mode": mode,
                "total_sites": response["total_sites"],
            },
        )
        return {
            "itinerary_id": itinerary_id,
            "location": place.name,
            "days": days,
            "schedule": response["schedule"],
            "summary": summary,
            "total_sites": response["total_sites"],
            "preferences": preferences.to_dict(),
            "mode": mode,
            **{k: v for k, v in response.items() if k in ("optimization", "map_path", "dropped")},
        }

    def get_itinerary(self, itinerary_id: str) -> Dict[str, Any]:
        """Load a stored itinerary.

        Raises:
            ItineraryNotFoundError: If no itinerary has this id.
            PersistenceError: If the store cannot be queried.
        """
        record = self.repository.get(itinerary_id)
        if record is None:
            raise ItineraryNotFoundError(
                f"Itinerary '{itinerary_id}' not found", itinerary_id=itinerary_id
            )
        return record.to_dict()

    def _optimized(
        self, place: Place, sites: List[Site], window: Any, start: GeoLocation
    ) -> Dict[str, Any]:
        days = self.optimizer.optimize(sites, window, start=start)
        total = sum(len(d.stops) for d in days)
        schedule = []
        routes: List[Optional[RouteEstimate]] = []
        for day in days:
            entry = day.to_dict()
            route = None
            if self.routing is not None:
                points = [start, *(stop.site.location for stop in day.stops)]
                route = self.routing.route(points)
                entry["route"] = route.to_dict()
            routes.append(route)
            schedule.append(entry)
        return {
            "schedule": schedule,
            "summary": (
                f"{total} heritage sites around {place.name} "
                f"scheduled over {len(days)} day(s)"
            ),
            "total_sites": total,
            "optimization": summarize(days, window),
            "_days": days,
            "_routes": routes,
        }

    def _generated(
        self,
        place: Place,
        days: int,
        preferences: ItineraryPreferences,
        sites: List[Site],
        window: Any,
    ) -> Dict[str, Any]:
        context = self.build_context(place, days, preferences, sites, window)
        try:
            proposal = self.reasoning.generate_itinerary(context)
        except GenerationError as e:
            raise GenerationError(
                e.message,
                cause=e.cause or e,
                fallback_summary=_fallback_summary(place, sites),
            )

        validated = validate_itinerary(proposal, sites)
        return {
            "schedule": [d.to_dict() for d in validated.days],
            "summary": proposal.summary,
            "total_sites": validated.total_sites,
            "dropped": validated.dropped,
        }

    def build_context(
        self,
        place: Place,
        days: int,
        preferences: ItineraryPreferences,
        sites: Sequence[Site],
        window: Any,
    ) -> Dict[str, Any]:
        """Structured prompt data for the reasoning model."""
        return {
            "task": "Generate optimized heritage itinerary",
            "location": place.to_dict(),
            "duration_days": days,
            "preferences": preferences.to_dict(),
            "constraints": {
                "daily_hours": round(window.length_minutes / 60, 1),
                "start_time": preferences.start_time,
                "end_time": preferences.end_time,
                "pace": preferences.pace,
            },
            "heritage_sites": [
                {
                    "id": s.id,
                    "name": s.name,
                    "category": s.category.value,
                    "coordinates": s.location.to_dict(),
                    "summary": self._short_summary(s),
                    "visiting_duration_estimate": f"{visit_duration_minutes(s.category)} min",
                }
                for s in sites
            ],
            "rules": list(PLANNING_RULES),
        }

    def _short_summary(self, site: Site) -> str:
        if not site.verified or not site.summary:
            return "Available on request"
        limit = self.config.summary_max_chars
        if len(site.summary) <= limit:
            return site.summary
        return site.summary[:limit] + "..."

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _locate(self, location: str) -> Place:
        place = self.geocoder.geocode(location.strip())
        if place is None:
            raise LocationNotFoundError(
                f'Location "{location}" not found', location=location
            )
        return place

    def _candidates(self, center: GeoLocation, radius_km: float, limit: int) -> List[Site]:
        """Fetch both sources concurrently, then merge in source order."""
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="sources") as pool:
            graph = pool.submit(self.knowledge_graph.search, center, radius_km, limit)
            pois = pool.submit(
                self.points_of_interest.nearby,
                center.latitude,
                center.longitude,
                int(radius_km * 1000),
            )
            merged = merge_sources(
                self._collect(graph, "knowledge-graph"),
                self._collect(pois, "points-of-interest"),
            )

        unique = deduplicate_sites(merged, self.config.dedup_tolerance_deg)
        self._logger.info(
            "Candidates merged",
            extra={"fetched": len(merged), "unique": len(unique)},
        )
        return unique

    def _collect(self, future: "Future[List[Site]]", source: str) -> List[Site]:
        try:
            return future.result()
        except Exception as e:
            self._logger.warning(
                "Site source failed",
                extra={"source": source, "error": str(e)},
            )
            return []

    def _persist(self, record: ItineraryRecord) -> str:
        try:
            return self.repository.save(record)
        except PersistenceError as e:
            self._logger.warning(
                "Itinerary not persisted",
                extra={"itinerary_id": record.id, "error": str(e)},
            )
            return record.id

    def _render_map(
        self,
        itinerary_id: str,
        days: Sequence[Any],
        routes: Sequence[Optional[RouteEstimate]],
    ) -> Optional[str]:
        if self.map_renderer is None or self.map_output_dir is None or not days:
            return None
        try:
            path = self.map_renderer.render(
                days, self.map_output_dir / f"{itinerary_id}.html", routes=routes
            )
        except RenderingError as e:
            # Log but don't fail the request
            self._logger.warning("Map generation failed", extra={"error": str(e)})
            return None
        return str(path)


def _require(condition: bool, field_name: str, message: str) -> None:
    if not condition:
        raise RequestValidationError(
            f"{field_name} {message}", field_errors={field_name: message}
        )


def _prefer_categories(sites: List[Site], categories: Sequence[SiteCategory]) -> List[Site]:
    """Keep preferred categories when that leaves at least one site."""
    if not categories:
        return sites
    wanted = set(categories)
    preferred = [s for s in sites if s.category in wanted]
    return preferred or sites


def _site_payload(site: Site) -> Dict[str, Any]:
    return {**site.to_dict(), "slug": slugify(site.name), **visiting_info(site)}


def _fallback_summary(place: Place, sites: Sequence[Site]) -> Optional[str]:
    known = [s for s in sites if s.verified and s.summary][:5]
    if not known:
        return None
    lines = [f"- {s.name}: {s.summary}" for s in known]
    return f"Heritage highlights near {place.name}:\n" + "\n".join(lines)
