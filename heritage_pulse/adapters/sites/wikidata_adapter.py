"""Wikidata SPARQL adapter for knowledge-graph heritage searches."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ...config import WikidataConfig, get_config
from ...domain.categories import categorize_site
from ...domain.errors import TransportError, UpstreamFormatError
from ...domain.models import GeoLocation, Site, SiteSource
from ..http.client import HttpClient
from ..http.retry import RetryPolicy

UNKNOWN_SITE = "Unknown Site"

# cultural heritage site, monument, architectural structure
HERITAGE_CLASSES = ("Q2065736", "Q4989906", "Q811979")

_POINT_RE = re.compile(r"Point\(([-\d.eE+]+) ([-\d.eE+]+)\)")

_QUERY_TEMPLATE = """
SELECT DISTINCT ?item ?itemLabel ?location ?category ?categoryLabel ?image ?article WHERE {{
  SERVICE wikibase:around {{
    ?item wdt:P625 ?location .
    bd:serviceParam wikibase:center "Point({lng} {lat})"^^geo:wktLiteral .
    bd:serviceParam wikibase:radius "{radius}" .
  }}
  VALUES ?classes {{ {classes} }}
  ?item wdt:P31/wdt:P279* ?classes .
  ?item wdt:P31 ?category .
  OPTIONAL {{ ?item wdt:P18 ?image . }}
  OPTIONAL {{
    ?article schema:about ?item .
    ?article schema:isPartOf <https://en.wikipedia.org/> .
  }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "[AUTO_LANGUAGE],en" . }}
}}
LIMIT {limit}
"""


def build_query(center: GeoLocation, radius_km: float, limit: int) -> str:
    """Render the radius search query for ``center``."""
    return _QUERY_TEMPLATE.format(
        lat=center.latitude,
        lng=center.longitude,
        radius=radius_km,
        classes=" ".join(f"wd:{q}" for q in HERITAGE_CLASSES),
        limit=int(limit),
    )


def parse_point(literal: str) -> Optional[GeoLocation]:
    """Parse a ``Point(lng lat)`` WKT literal, or None when malformed."""
    match = _POINT_RE.search(literal or "")
    if match is None:
        return None
    try:
        return GeoLocation(latitude=float(match.group(2)), longitude=float(match.group(1)))
    except ValueError:
        return None


@dataclass
class WikidataSiteAdapter:
    """Knowledge-graph search against the Wikidata query service.

    Implements KnowledgeGraphPort. Transport and format failures are
    logged and turned into an empty result.

    Attributes:
        config: Wikidata configuration
        http: Shared HTTP client
    """

    config: WikidataConfig = field(default_factory=lambda: get_config().wikidata)
    http: HttpClient = field(default_factory=HttpClient)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def search(self, center: GeoLocation, radius_km: float, limit: int) -> List[Site]:
        try:
            payload = self.http.get_json(
                self.config.endpoint,
                params={"query": build_query(center, radius_km, limit), "format": "json"},
                headers={"Accept": "application/sparql-results+json"},
                timeout=self.config.timeout_seconds,
                retry=RetryPolicy.from_settings(self.config),
            )
            bindings = _bindings(payload)
        except (TransportError, UpstreamFormatError) as e:
            self._logger.warning(
                "Wikidata search failed",
                extra={"radius_km": radius_km, "error": str(e)},
            )
            return []

        sites = self.parse_bindings(bindings)
        self._logger.info(
            "Wikidata search complete",
            extra={"bindings": len(bindings), "sites": len(sites)},
        )
        return sites

    def parse_bindings(self, bindings: List[Mapping[str, Any]]) -> List[Site]:
        """Normalise SPARQL bindings into Sites.

        Bindings without a parsable location are skipped. An item appearing
        in several rows (one per ``instance of`` class) is kept once.
        """
        sites: List[Site] = []
        seen: set[str] = set()
        for binding in bindings:
            site = self._to_site(binding)
            if site is None:
                self._logger.debug("Skipping malformed Wikidata binding")
                continue
            if site.id in seen:
                continue
            seen.add(site.id)
            sites.append(site)
        return sites

    def _to_site(self, binding: Mapping[str, Any]) -> Optional[Site]:
        item = _value(binding, "item")
        location = parse_point(_value(binding, "location") or "")
        if not item or location is None:
            return None

        name = _value(binding, "itemLabel") or UNKNOWN_SITE
        label = _value(binding, "categoryLabel") or ""
        image = _value(binding, "image")
        return Site(
            id=item.rstrip("/").rsplit("/", 1)[-1],
            name=name,
            category=categorize_site(label=label or "heritage site", name=name),
            location=location,
            source=SiteSource.KNOWLEDGE_GRAPH,
            image_url=image,
            images=(image,) if image else (),
            wikipedia_url=_value(binding, "article"),
        )


def _bindings(payload: Any) -> List[Mapping[str, Any]]:
    try:
        bindings = payload["results"]["bindings"]
    except (KeyError, TypeError) as e:
        raise UpstreamFormatError(
            "Wikidata response has no results.bindings", cause=e, source="wikidata"
        )
    if not isinstance(bindings, list):
        raise UpstreamFormatError("Wikidata bindings is not a list", source="wikidata")
    return bindings


def _value(binding: Mapping[str, Any], key: str) -> Optional[str]:
    cell: Dict[str, Any] = binding.get(key) or {}
    value = cell.get("value") if isinstance(cell, dict) else None
    return str(value) if value else None
