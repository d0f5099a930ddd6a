"""Domain layer - Core heritage models, typed errors and pure helpers.

Nothing in this package performs I/O or imports a third-party library.
"""

from .errors import (
    ConfigurationError,
    GenerationError,
    GeocodingError,
    HeritagePulseError,
    ItineraryNotFoundError,
    LocationNotFoundError,
    PersistenceError,
    RenderingError,
    RequestValidationError,
    TransportError,
    UpstreamFormatError,
)
from .models import (
    ChatMessage,
    DayStats,
    DayWindow,
    GeoLocation,
    ItineraryPreferences,
    ItineraryRecord,
    NarrativeSummary,
    Place,
    ProposedActivity,
    ProposedDay,
    ProposedItinerary,
    RouteEstimate,
    ScheduleDay,
    ScheduledStop,
    Site,
    SiteCategory,
    SiteSource,
    ValidatedActivity,
    ValidatedDay,
    ValidatedItinerary,
)

__all__ = [
    # Models
    "GeoLocation",
    "Site",
    "SiteCategory",
    "SiteSource",
    "Place",
    "NarrativeSummary",
    "RouteEstimate",
    "DayWindow",
    "ScheduledStop",
    "ScheduleDay",
    "DayStats",
    "ItineraryPreferences",
    "ProposedActivity",
    "ProposedDay",
    "ProposedItinerary",
    "ValidatedActivity",
    "ValidatedDay",
    "ValidatedItinerary",
    "ItineraryRecord",
    "ChatMessage",
    # Errors
    "HeritagePulseError",
    "TransportError",
    "UpstreamFormatError",
    "GeocodingError",
    "LocationNotFoundError",
    "ItineraryNotFoundError",
    "RequestValidationError",
    "GenerationError",
    "PersistenceError",
    "ConfigurationError",
    "RenderingError",
]
