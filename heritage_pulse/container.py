"""Dependency injection container.

Wires the site sources, the reasoning model, storage and the planner
services together. Factories are registered per port type and run on
first resolve; tests register fakes for the ports they need and let the
default factories build everything else.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        planner = container.resolve(HeritagePlannerService)

        # Testing
        container = Container()
        container.register(GeocoderPort, lambda: FakeGeocoder())
        geocoder = container.resolve(GeocoderPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Adapters are only built when first resolved, so creating the
        container never touches the network or the database.

        Args:
            config: Optional configuration override.
        """
        from .adapters.cache import InMemoryCache
        from .adapters.geocoding import NominatimGeocoderAdapter
        from .adapters.http import HttpClient
        from .adapters.narrative import WikipediaNarrativeAdapter
        from .adapters.persistence import (
            InMemoryItineraryRepository,
            PostgresItineraryRepository,
        )
        from .adapters.reasoning import OpenRouterReasoningAdapter
        from .adapters.rendering import FoliumMapRenderer
        from .adapters.routing import OSRMRoutingAdapter
        from .adapters.sessions import InMemorySessionStore
        from .adapters.sites import OverpassSiteAdapter, WikidataSiteAdapter
        from .ports import (
            CachePort,
            GeocoderPort,
            ItineraryRepositoryPort,
            KnowledgeGraphPort,
            MapRendererPort,
            NarrativePort,
            PointsOfInterestPort,
            ReasoningModelPort,
            RoutingPort,
            SessionStorePort,
        )
        from .services import (
            ChatService,
            HeritagePlannerService,
            RouteOptimizer,
            SiteEnricher,
        )

        config = config or get_config()
        container = cls(config=config)

        # Cache (shared by the geocoder)
        cache: InMemoryCache[Any] = InMemoryCache(name="global", max_size=5000)
        container.register(CachePort, lambda: cache)

        # One HTTP session for every REST/SPARQL upstream
        container.register(HttpClient, lambda: HttpClient(config.http))

        # Sources
        container.register(
            GeocoderPort,
            lambda: NominatimGeocoderAdapter(config.geocoding, container.resolve(CachePort)),
        )
        container.register(
            KnowledgeGraphPort,
            lambda: WikidataSiteAdapter(config.wikidata, container.resolve(HttpClient)),
        )
        container.register(
            PointsOfInterestPort,
            lambda: OverpassSiteAdapter(config.overpass, container.resolve(HttpClient)),
        )
        container.register(
            NarrativePort,
            lambda: WikipediaNarrativeAdapter(config.wikipedia, container.resolve(HttpClient)),
        )
        container.register(
            RoutingPort,
            lambda: OSRMRoutingAdapter(config.routing, container.resolve(HttpClient)),
        )
        container.register(
            ReasoningModelPort,
            lambda: OpenRouterReasoningAdapter(config.reasoning),
        )

        # Storage based on config
        def create_repository() -> ItineraryRepositoryPort:
            if config.persistence.database_url:
                return PostgresItineraryRepository(config.persistence)
            return InMemoryItineraryRepository()

        container.register(ItineraryRepositoryPort, create_repository)
        container.register(
            SessionStorePort,
            lambda: InMemorySessionStore(config.sessions),
        )

        # Rendering
        container.register(MapRendererPort, lambda: FoliumMapRenderer())

        # Pipeline stages
        container.register(
            SiteEnricher,
            lambda: SiteEnricher(
                narrative=container.resolve(NarrativePort),
                max_workers=config.planner.enrichment_workers,
            ),
        )
        container.register(
            RouteOptimizer,
            lambda: RouteOptimizer(
                speed_kmh=config.planner.city_speed_kmh,
                buffer_minutes=config.planner.travel_buffer_minutes,
            ),
        )

        # Main services
        def create_planner() -> HeritagePlannerService:
            map_dir = config.api.map_output_dir
            return HeritagePlannerService(
                geocoder=container.resolve(GeocoderPort),
                knowledge_graph=container.resolve(KnowledgeGraphPort),
                points_of_interest=container.resolve(PointsOfInterestPort),
                enricher=container.resolve(SiteEnricher),
                optimizer=container.resolve(RouteOptimizer),
                reasoning=container.resolve(ReasoningModelPort),
                repository=container.resolve(ItineraryRepositoryPort),
                config=config.planner,
                routing=container.resolve(RoutingPort),
                map_renderer=container.resolve(MapRendererPort) if map_dir else None,
                map_output_dir=Path(map_dir) if map_dir else None,
            )

        container.register(HeritagePlannerService, create_planner)
        container.register(
            ChatService,
            lambda: ChatService(
                reasoning=container.resolve(ReasoningModelPort),
                sessions=container.resolve(SessionStorePort),
                narrative=container.resolve(NarrativePort),
                max_messages=config.sessions.max_messages,
            ),
        )

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
