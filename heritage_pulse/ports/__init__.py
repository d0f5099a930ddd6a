"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the planning services and the
external systems they depend on. Every adapter in ``heritage_pulse.adapters``
implements exactly one of these protocols.
"""

from .cache import CachePort
from .geocoding import GeocoderPort
from .narrative import NarrativePort
from .persistence import ItineraryRepositoryPort
from .reasoning import ReasoningModelPort
from .rendering import MapRendererPort
from .routing import RoutingPort
from .sessions import SessionStorePort
from .sites import KnowledgeGraphPort, PointsOfInterestPort

__all__ = [
    # Sources
    "GeocoderPort",
    "KnowledgeGraphPort",
    "PointsOfInterestPort",
    "NarrativePort",
    "RoutingPort",
    "ReasoningModelPort",
    # Storage
    "ItineraryRepositoryPort",
    "SessionStorePort",
    "CachePort",
    # Rendering
    "MapRendererPort",
]
