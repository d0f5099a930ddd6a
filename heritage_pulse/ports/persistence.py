"""Persistence port - Storage for generated itineraries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import ItineraryRecord


class ItineraryRepositoryPort(Protocol):
    """Port for itinerary storage.

    Implementations:
    - adapters/persistence/postgres_repository.py - Production
    - adapters/persistence/memory_repository.py - Development and tests
    """

    def save(self, record: ItineraryRecord) -> str:
        """Store an itinerary and return its id.

        Raises:
            PersistenceError: If the record could not be stored.
        """
        ...

    def get(self, itinerary_id: str) -> Optional[ItineraryRecord]:
        """Load an itinerary, or None if it does not exist.

        Raises:
            PersistenceError: If the store could not be queried.
        """
        ...
