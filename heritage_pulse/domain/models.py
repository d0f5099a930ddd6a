"""Immutable domain models for Heritage Pulse.

All models are frozen dataclasses with slots. They carry no knowledge of
the upstream services that produced them: adapters normalise their source
schema into these types at the boundary, and everything downstream only
ever sees a Site, a NarrativeSummary or a RouteEstimate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class SiteCategory(str, Enum):
    """Canonical heritage site category."""

    UNESCO = "UNESCO"
    TEMPLE = "Temple"
    FORT = "Fort"
    MUSEUM = "Museum"
    PALACE = "Palace"
    MONUMENT = "Monument"
    RUINS = "Ruins"
    MEMORIAL = "Memorial"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str) -> SiteCategory:
        """Parse a category name case-insensitively.

        Raises:
            ValueError: If the name is not a known category.
        """
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unknown site category: {value!r}")


class SiteSource(str, Enum):
    """Which kind of upstream a Site record came from."""

    KNOWLEDGE_GRAPH = "knowledge-graph"
    POINTS_OF_INTEREST = "points-of-interest"
    NARRATIVE = "narrative"
    MANUAL = "manual"


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate that coordinates are finite and in range."""
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError(
                f"Coordinates must be finite, got ({self.latitude}, {self.longitude})"
            )
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.latitude, "lng": self.longitude}


@dataclass(frozen=True, slots=True)
class Site:
    """A heritage site candidate.

    Attributes:
        id: Identifier, stable within a single request
        name: Display name (English where the source offers one)
        category: Canonical category
        location: Coordinates of the site
        source: Upstream the record came from
        summary: Narrative summary, filled in by enrichment
        verified: True when a narrative source confirmed the site
        images: Ordered image URLs
        wikipedia_url: Article URL when the source links one
        image_url: Image supplied by the source itself
        local_name: Name in the local language, when different
        tags: Raw source tags kept for visiting-info defaults
    """

    id: str
    name: str
    category: SiteCategory
    location: GeoLocation
    source: SiteSource
    summary: Optional[str] = None
    verified: bool = False
    images: tuple[str, ...] = field(default_factory=tuple)
    wikipedia_url: Optional[str] = None
    image_url: Optional[str] = None
    local_name: Optional[str] = None
    tags: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def latitude(self) -> float:
        return self.location.latitude

    @property
    def longitude(self) -> float:
        return self.location.longitude

    def enriched(
        self, summary: str, images: tuple[str, ...], verified: bool
    ) -> Site:
        """Return a copy carrying narrative enrichment."""
        return replace(self, summary=summary, images=images, verified=verified)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the public JSON shape."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "coordinates": self.location.to_dict(),
            "source": self.source.value,
            "summary": self.summary,
            "verified": self.verified,
            "images": list(self.images),
        }
        if self.wikipedia_url:
            data["wikipedia_url"] = self.wikipedia_url
        if self.local_name:
            data["local_name"] = self.local_name
        return data


@dataclass(frozen=True, slots=True)
class Place:
    """A geocoded location.

    Attributes:
        name: Display name returned by the geocoder
        location: Coordinates of the place
        place_type: Geocoder classification (city, town, ...)
        address: Structured address components
        bounding_box: (south, north, west, east) when available
    """

    name: str
    location: GeoLocation
    place_type: Optional[str] = None
    address: Mapping[str, str] = field(default_factory=dict, compare=False)
    bounding_box: Optional[tuple[float, float, float, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "coordinates": self.location.to_dict()}


UNAVAILABLE_SUMMARY = "Historical context currently unavailable"


@dataclass(frozen=True, slots=True)
class NarrativeSummary:
    """Result of a narrative lookup for one title."""

    found: bool
    title: str
    summary: str
    url: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def unavailable(cls, title: str) -> NarrativeSummary:
        """Neutral stub used whenever a lookup misses or fails."""
        return cls(found=False, title=title, summary=UNAVAILABLE_SUMMARY)


@dataclass(frozen=True, slots=True)
class RouteEstimate:
    """Distance and duration along a list of coordinates.

    A fallback estimate has exactly the same fields as a routed one; only
    ``source`` tells them apart.
    """

    distance_km: float
    duration_hours: float
    source: str = "routed"
    geometry: Optional[tuple[tuple[float, float], ...]] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distance_km": self.distance_km,
            "duration_hours": self.duration_hours,
            "source": self.source,
        }


def parse_clock(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight.

    Raises:
        ValueError: If the value is not a valid 24h time.
    """
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def format_clock(minutes: float) -> str:
    """Format minutes since midnight as "HH:MM", rounding to the minute."""
    total = int(round(minutes))
    return f"{total // 60:02d}:{total % 60:02d}"


@dataclass(frozen=True, slots=True)
class DayWindow:
    """Time-of-day bounds for one schedule day, in minutes since midnight."""

    start_minutes: int
    end_minutes: int

    def __post_init__(self) -> None:
        if self.end_minutes <= self.start_minutes:
            raise ValueError("Day window must end after it starts")

    @classmethod
    def from_strings(cls, start: str, end: str) -> DayWindow:
        return cls(parse_clock(start), parse_clock(end))

    @property
    def length_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


@dataclass(frozen=True, slots=True)
class ScheduledStop:
    """One visit inside a schedule day.

    Attributes:
        site: The visited site
        arrival_minutes: Arrival time, minutes since midnight
        visit_minutes: Time spent at the site
        travel_minutes: Travel time from the previous anchor
        travel_distance_km: Straight-line distance from the previous anchor
        forced: True when the stop was assigned despite not fitting the day
    """

    site: Site
    arrival_minutes: int
    visit_minutes: int
    travel_minutes: int
    travel_distance_km: float
    forced: bool = False

    @property
    def departure_minutes(self) -> int:
        return self.arrival_minutes + self.visit_minutes

    @property
    def arrival_time(self) -> str:
        return format_clock(self.arrival_minutes)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "site": self.site.to_dict(),
            "arrival_time": self.arrival_time,
            "departure_time": format_clock(self.departure_minutes),
            "visit_duration": self.visit_minutes,
            "travel_time": self.travel_minutes,
            "travel_distance_km": round(self.travel_distance_km, 2),
        }
        if self.forced:
            data["forced"] = True
        return data


@dataclass(frozen=True, slots=True)
class DayStats:
    """Totals for one schedule day."""

    total_distance_km: float
    total_travel_minutes: int
    total_visit_minutes: int
    stop_count: int

    @property
    def total_minutes(self) -> int:
        return self.total_travel_minutes + self.total_visit_minutes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_distance_km": round(self.total_distance_km, 2),
            "total_travel_minutes": self.total_travel_minutes,
            "total_visit_minutes": self.total_visit_minutes,
            "site_count": self.stop_count,
        }


@dataclass(frozen=True, slots=True)
class ScheduleDay:
    """An ordered list of stops for one day (1-based index)."""

    day: int
    stops: tuple[ScheduledStop, ...] = field(default_factory=tuple)

    @property
    def has_forced_stop(self) -> bool:
        return any(stop.forced for stop in self.stops)

    def stats(self) -> DayStats:
        return DayStats(
            total_distance_km=sum(s.travel_distance_km for s in self.stops),
            total_travel_minutes=sum(s.travel_minutes for s in self.stops),
            total_visit_minutes=sum(s.visit_minutes for s in self.stops),
            stop_count=len(self.stops),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "sites": [stop.to_dict() for stop in self.stops],
            "stats": self.stats().to_dict(),
        }


PACES = ("relaxed", "moderate", "packed")


@dataclass(frozen=True, slots=True)
class ItineraryPreferences:
    """Traveller preferences for itinerary generation."""

    categories: tuple[SiteCategory, ...] = field(default_factory=tuple)
    pace: str = "moderate"
    start_time: str = "09:00"
    end_time: str = "18:00"

    def __post_init__(self) -> None:
        if self.pace not in PACES:
            raise ValueError(f"Pace must be one of {PACES}, got {self.pace!r}")

    def day_window(self) -> DayWindow:
        return DayWindow.from_strings(self.start_time, self.end_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [c.value for c in self.categories],
            "pace": self.pace,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass(frozen=True, slots=True)
class ProposedActivity:
    """An activity as written by the reasoning model, not yet trusted."""

    time: str
    activity: str
    location: str
    notes: str = ""
    site_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ProposedDay:
    day: int
    theme: str = ""
    activities: tuple[ProposedActivity, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ProposedItinerary:
    """Parsed reasoning-model output."""

    summary: str
    days: tuple[ProposedDay, ...] = field(default_factory=tuple)
    title: str = ""


@dataclass(frozen=True, slots=True)
class ValidatedActivity:
    """A proposed activity that matched a known candidate site."""

    time: str
    activity: str
    location: str
    notes: str
    site: Site

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "activity": self.activity,
            "location": self.location,
            "notes": self.notes,
            "site_details": self.site.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class ValidatedDay:
    day: int
    theme: str
    activities: tuple[ValidatedActivity, ...] = field(default_factory=tuple)

    @property
    def site_count(self) -> int:
        return len(self.activities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "theme": self.theme,
            "activities": [a.to_dict() for a in self.activities],
            "site_count": self.site_count,
        }


@dataclass(frozen=True, slots=True)
class ValidatedItinerary:
    """Validator output: matched days plus how many entries were dropped."""

    days: tuple[ValidatedDay, ...]
    dropped: int = 0

    @property
    def total_sites(self) -> int:
        return sum(day.site_count for day in self.days)


@dataclass(frozen=True, slots=True)
class ItineraryRecord:
    """A persisted itinerary."""

    id: str
    location_name: str
    days: int
    preferences: Mapping[str, Any]
    schedule: tuple[Mapping[str, Any], ...]
    summary: str
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itinerary_id": self.id,
            "location": self.location_name,
            "days": self.days,
            "preferences": dict(self.preferences),
            "schedule": [dict(day) for day in self.schedule],
            "summary": self.summary,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """One message of a chat conversation."""

    role: str
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, str]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
