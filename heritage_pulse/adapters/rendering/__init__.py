"""Rendering adapters - Implementations of the MapRendererPort."""

from .folium_adapter import FoliumMapRenderer

__all__ = ["FoliumMapRenderer"]
