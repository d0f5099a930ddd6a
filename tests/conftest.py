"""Shared fixtures: site factories and in-process fakes for every port."""

from __future__ import annotations

import itertools
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pytest

from heritage_pulse.config import PlannerConfig, reset_config
from heritage_pulse.domain.models import (
    ChatMessage,
    GeoLocation,
    NarrativeSummary,
    Place,
    ProposedItinerary,
    RouteEstimate,
    Site,
    SiteCategory,
    SiteSource,
)

DELHI = GeoLocation(28.6139, 77.2090)

_ids = itertools.count(1)


def make_site(
    name: str = "Red Fort",
    lat: float = 28.6562,
    lng: float = 77.2410,
    category: SiteCategory = SiteCategory.FORT,
    source: SiteSource = SiteSource.KNOWLEDGE_GRAPH,
    site_id: Optional[str] = None,
    **kwargs: Any,
) -> Site:
    return Site(
        id=site_id or f"site_{next(_ids)}",
        name=name,
        category=category,
        location=GeoLocation(lat, lng),
        source=source,
        **kwargs,
    )


class FakeGeocoder:
    def __init__(self, place: Optional[Place] = None) -> None:
        self.place = place
        self.queries: List[str] = []

    def geocode(self, query: str) -> Optional[Place]:
        self.queries.append(query)
        return self.place


class FakeKnowledgeGraph:
    def __init__(self, sites: Sequence[Site] = (), error: Optional[Exception] = None) -> None:
        self.sites = list(sites)
        self.error = error
        self.calls: List[tuple] = []

    def search(self, center: GeoLocation, radius_km: float, limit: int = 50) -> List[Site]:
        self.calls.append((center, radius_km, limit))
        if self.error:
            raise self.error
        return list(self.sites)


class FakePointsOfInterest:
    def __init__(self, sites: Sequence[Site] = (), error: Optional[Exception] = None) -> None:
        self.sites = list(sites)
        self.error = error
        self.calls: List[tuple] = []

    def nearby(self, latitude: float, longitude: float, radius_meters: int) -> List[Site]:
        self.calls.append((latitude, longitude, radius_meters))
        if self.error:
            raise self.error
        return list(self.sites)


class FakeNarrative:
    """Summaries keyed by title; titles in ``failing`` raise."""

    def __init__(
        self,
        summaries: Optional[Mapping[str, str]] = None,
        failing: Sequence[str] = (),
    ) -> None:
        self.summaries = dict(summaries or {})
        self.failing = set(failing)
        self.titles: List[str] = []

    def summarize(self, title: str, lang: str = "en") -> NarrativeSummary:
        self.titles.append(title)
        if title in self.failing:
            raise RuntimeError(f"lookup failed for {title}")
        if title not in self.summaries:
            return NarrativeSummary.unavailable(title)
        return NarrativeSummary(
            found=True,
            title=title,
            summary=self.summaries[title],
            url=f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}",
            image_url=f"https://img.example/{title.replace(' ', '_')}.jpg",
        )


class FakeReasoning:
    def __init__(
        self,
        itinerary: Optional[ProposedItinerary] = None,
        reply: str = "The Red Fort was built in 1639.",
        error: Optional[Exception] = None,
    ) -> None:
        self.itinerary = itinerary
        self.reply = reply
        self.error = error
        self.contexts: List[Mapping[str, Any]] = []
        self.chats: List[tuple] = []

    def generate_itinerary(self, context: Mapping[str, Any]) -> ProposedItinerary:
        self.contexts.append(context)
        if self.error:
            raise self.error
        assert self.itinerary is not None
        return self.itinerary

    def chat(
        self,
        messages: Sequence[ChatMessage],
        context: Optional[Mapping[str, Any]] = None,
    ) -> str:
        self.chats.append((list(messages), context))
        if self.error:
            raise self.error
        return self.reply


class FakeRouting:
    def __init__(self) -> None:
        self.calls: List[List[GeoLocation]] = []

    def route(self, coordinates: Sequence[GeoLocation], optimize: bool = False) -> RouteEstimate:
        self.calls.append(list(coordinates))
        return RouteEstimate(distance_km=12.5, duration_hours=0.4, source="routed")


class FakeSessionStore:
    def __init__(self) -> None:
        self.data: Dict[str, List[ChatMessage]] = {}

    def get(self, conversation_id: str) -> List[ChatMessage]:
        return list(self.data.get(conversation_id, []))

    def put(self, conversation_id: str, messages: Sequence[ChatMessage]) -> None:
        self.data[conversation_id] = list(messages)

    def append(
        self, conversation_id: str, messages: Sequence[ChatMessage], max_messages: int
    ) -> List[ChatMessage]:
        history = (self.data.get(conversation_id, []) + list(messages))[-max_messages:]
        self.data[conversation_id] = history
        return list(history)

    def evict(self, conversation_id: str) -> bool:
        return self.data.pop(conversation_id, None) is not None


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """Isolate tests from the caller's HP_* environment."""
    for key in list(os.environ):
        if key.startswith("HP_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
    # create_app() installs a non-propagating handler; give caplog its records back
    package_logger = logging.getLogger("heritage_pulse")
    package_logger.propagate = True
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def site_factory():
    return make_site


@pytest.fixture
def delhi_place() -> Place:
    return Place(name="New Delhi, Delhi, India", location=DELHI, place_type="city")


@pytest.fixture
def planner_config() -> PlannerConfig:
    return PlannerConfig()
