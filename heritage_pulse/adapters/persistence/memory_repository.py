"""In-memory itinerary repository for development and tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from ...domain.ids import generate_id
from ...domain.models import ItineraryRecord


@dataclass
class InMemoryItineraryRepository:
    """Implements ItineraryRepositoryPort with a process-local dict."""

    _records: Dict[str, ItineraryRecord] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def save(self, record: ItineraryRecord) -> str:
        itinerary_id = record.id or generate_id("itin")
        with self._lock:
            self._records[itinerary_id] = replace(record, id=itinerary_id)
        return itinerary_id

    def get(self, itinerary_id: str) -> Optional[ItineraryRecord]:
        with self._lock:
            return self._records.get(itinerary_id)

    def __len__(self) -> int:
        return len(self._records)
