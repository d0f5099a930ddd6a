"""Narrative adapters - Implementations of the NarrativePort."""

from .wikipedia_adapter import WikipediaNarrativeAdapter

__all__ = ["WikipediaNarrativeAdapter"]
