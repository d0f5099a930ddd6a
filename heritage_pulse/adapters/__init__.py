"""Adapters layer - Concrete implementations of ports.

This package connects the planning services to external systems:
- Geocoding (Nominatim via geopy)
- Site sources (Wikidata SPARQL, Overpass)
- Narrative summaries (Wikipedia)
- Routing (OSRM)
- Reasoning model (OpenRouter via the openai SDK)
- Itinerary storage (PostgreSQL, in-memory)
- Chat sessions and caching (in-memory, TTL)
- Map rendering (Folium)
"""
