"""Site search adapters - knowledge-graph and points-of-interest sources."""

from .overpass_adapter import OverpassSiteAdapter
from .wikidata_adapter import WikidataSiteAdapter

__all__ = ["OverpassSiteAdapter", "WikidataSiteAdapter"]
