"""Persistence adapters - Implementations of the ItineraryRepositoryPort."""

from .memory_repository import InMemoryItineraryRepository
from .postgres_repository import PostgresItineraryRepository

__all__ = ["InMemoryItineraryRepository", "PostgresItineraryRepository"]
