"""Heritage Pulse - cultural heritage discovery and itinerary planning.

The package discovers heritage sites near a location by querying several
public data sources (Wikidata, OpenStreetMap, Wikipedia, OSRM), merges and
deduplicates the results, enriches them with historical context and turns
them into a day-by-day visiting schedule.

Schedules are either built by the deterministic greedy route optimizer or
written by an external reasoning model and then validated against the known
candidate sites.
"""

__version__ = "1.0.0"
