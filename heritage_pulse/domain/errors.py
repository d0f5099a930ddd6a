"""Typed domain errors for Heritage Pulse.

Every external boundary converts its failures into one of these types so
callers never see raw transport exceptions. Only LocationNotFoundError,
GeocodingError and RequestValidationError abort a request; the others are
degraded to neutral results by the layer that catches them.

All errors inherit from HeritagePulseError and can optionally wrap a
root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class HeritagePulseError(Exception):
    """Base error for the heritage planning domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class TransportError(HeritagePulseError):
    """Network, timeout or HTTP status failure after retries were exhausted.

    Attributes:
        url: The URL that was being requested
        attempts: How many attempts were made
        status_code: Last HTTP status code, if a response was received
    """

    url: str = ""
    attempts: int = 0
    status_code: Optional[int] = None


@dataclass
class UpstreamFormatError(HeritagePulseError):
    """An upstream answered, but not in the shape we expected.

    Attributes:
        source: Name of the upstream service
    """

    source: str = ""


@dataclass
class GeocodingError(HeritagePulseError):
    """The geocoding service could not be reached.

    A geocoder that answers "no match" is not an error; see
    LocationNotFoundError for that case.

    Attributes:
        query: The location query that failed
    """

    query: str = ""


@dataclass
class LocationNotFoundError(HeritagePulseError):
    """The target location could not be geocoded.

    Attributes:
        location: The location name supplied by the caller
    """

    location: str = ""


@dataclass
class RequestValidationError(HeritagePulseError):
    """Malformed request, rejected before the pipeline runs.

    Attributes:
        field_errors: Mapping of field name to error message
    """

    field_errors: Dict[str, str] = field(default_factory=dict)


@dataclass
class GenerationError(HeritagePulseError):
    """The reasoning model was unreachable or its output unusable.

    Attributes:
        fallback_summary: Degraded reply built from enrichment data, if any
    """

    fallback_summary: Optional[str] = None


@dataclass
class PersistenceError(HeritagePulseError):
    """Storing or loading an itinerary failed.

    Attributes:
        operation: The repository operation that failed
    """

    operation: str = ""


@dataclass
class ConfigurationError(HeritagePulseError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None


@dataclass
class RenderingError(HeritagePulseError):
    """Map rendering failed.

    Attributes:
        output_path: Path where rendering was attempted
        renderer_type: Type of renderer that failed
    """

    output_path: Optional[str] = None
    renderer_type: str = ""


@dataclass
class ItineraryNotFoundError(HeritagePulseError):
    """No stored itinerary has the requested id.

    Attributes:
        itinerary_id: The id that was looked up
    """

    itinerary_id: str = ""
