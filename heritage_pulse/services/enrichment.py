"""Narrative enrichment of candidate sites.

Each candidate is looked up independently on a bounded worker pool. A
lookup that fails only affects its own site, which is returned with a
placeholder summary; output order always matches input order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Sequence

from ..domain.categories import format_historical_context, narrative_title, site_images
from ..domain.models import Site
from ..ports.narrative import NarrativePort

SUMMARY_UNAVAILABLE = "Summary unavailable"


@dataclass
class SiteEnricher:
    """Attach narrative summaries and images to sites.

    Attributes:
        narrative: Narrative lookup
        max_workers: Upper bound on concurrent lookups
        max_summary_chars: Cleaned summaries are cut back to this length
        lang: Narrative language
    """

    narrative: NarrativePort
    max_workers: int = 6
    max_summary_chars: int = 500
    lang: str = "en"

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def enrich(self, sites: Sequence[Site]) -> List[Site]:
        """Enrich every site; never raises for a single failed lookup."""
        if not sites:
            return []

        workers = max(1, min(self.max_workers, len(sites)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="enrich") as pool:
            enriched = list(pool.map(self._enrich_one, sites))

        verified = sum(1 for s in enriched if s.verified)
        self._logger.info(
            "Enrichment complete",
            extra={"sites": len(enriched), "verified": verified},
        )
        return enriched

    def _enrich_one(self, site: Site) -> Site:
        title = narrative_title(site)
        try:
            narrative = self.narrative.summarize(title, lang=self.lang)
        except Exception as e:
            self._logger.warning(
                "Narrative lookup failed, using placeholder",
                extra={"site_id": site.id, "title": title, "error": str(e)},
            )
            return site.enriched(SUMMARY_UNAVAILABLE, site_images(site), verified=False)

        if not narrative.found:
            return site.enriched(SUMMARY_UNAVAILABLE, site_images(site), verified=False)

        return site.enriched(
            format_historical_context(narrative.summary, self.max_summary_chars),
            site_images(site, narrative),
            verified=True,
        )
