"""Wikipedia adapter for narrative summaries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import quote

from ...config import WikipediaConfig, get_config
from ...domain.errors import TransportError, UpstreamFormatError
from ...domain.models import NarrativeSummary
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache
from ..http.client import HttpClient
from ..http.retry import RetryPolicy


@dataclass
class WikipediaNarrativeAdapter:
    """Narrative lookup through the MediaWiki query API.

    Implements NarrativePort. Successful lookups (including "page does not
    exist") are cached; failures are not, so a later request retries them.

    Attributes:
        config: Wikipedia configuration
        http: Shared HTTP client
        cache: Cache of lookups keyed by language and title
    """

    config: WikipediaConfig = field(default_factory=lambda: get_config().wikipedia)
    http: HttpClient = field(default_factory=HttpClient)
    cache: Optional[CachePort[NarrativeSummary]] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.cache is None:
            self.cache = InMemoryCache(
                name="narrative",
                default_ttl_seconds=self.config.cache_ttl_seconds,
                max_size=2000,
            )

    def summarize(self, title: str, lang: str = "en") -> NarrativeSummary:
        if not title or not title.strip():
            return NarrativeSummary.unavailable(title or "")

        assert self.cache is not None
        cache_key = f"{lang}:{title.strip().lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            payload = self.http.get_json(
                self.config.api_url_template.format(lang=lang),
                params={
                    "action": "query",
                    "format": "json",
                    "prop": "extracts|pageimages|info",
                    "titles": title.strip(),
                    "exintro": 1,
                    "explaintext": 1,
                    "exchars": self.config.extract_chars,
                    "pithumbsize": self.config.thumbnail_size,
                    "inprop": "url",
                    "redirects": 1,
                },
                timeout=self.config.timeout_seconds,
                retry=RetryPolicy.from_settings(self.config),
            )
            summary = self._parse(payload, title, lang)
        except (TransportError, UpstreamFormatError) as e:
            self._logger.warning(
                "Wikipedia lookup failed",
                extra={"title": title, "error": str(e)},
            )
            return NarrativeSummary.unavailable(title)

        self.cache.set(cache_key, summary)
        return summary

    def _parse(self, payload: Any, title: str, lang: str) -> NarrativeSummary:
        try:
            pages: Mapping[str, Any] = payload["query"]["pages"]
            page_id, page = next(iter(pages.items()))
        except (KeyError, TypeError, StopIteration, AttributeError) as e:
            raise UpstreamFormatError(
                "Wikipedia response has no query.pages", cause=e, source="wikipedia"
            )

        page_title = page.get("title") or title
        if page_id == "-1" or "missing" in page:
            self._logger.info("Wikipedia page not found", extra={"title": page_title})
            return NarrativeSummary.unavailable(page_title)

        thumbnail = page.get("thumbnail") or {}
        return NarrativeSummary(
            found=True,
            title=page_title,
            summary=page.get("extract") or "No summary available.",
            url=page.get("fullurl")
            or f"https://{lang}.wikipedia.org/wiki/{quote(page_title.replace(' ', '_'))}",
            image_url=thumbnail.get("source"),
        )
