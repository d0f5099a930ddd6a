"""Site normalisation helpers.

Pure functions mapping raw upstream metadata (OSM tags, Wikidata class
labels, free text) onto the canonical category enum, and deriving the
per-category defaults used by scheduling and presentation.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional, Union
from urllib.parse import unquote, urlparse

from .models import NarrativeSummary, Site, SiteCategory

PLACEHOLDER_IMAGES = {
    SiteCategory.MUSEUM: "https://placehold.co/600x400?text=Museum",
    SiteCategory.TEMPLE: "https://placehold.co/600x400?text=Temple",
    SiteCategory.FORT: "https://placehold.co/600x400?text=Fort",
}
DEFAULT_PLACEHOLDER = "https://placehold.co/600x400?text=Heritage+Site"

NO_CONTEXT = "No historical context available."

_CITATION_RE = re.compile(r"\[\d+\]|\[citation needed\]")
_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_WORD_RE = re.compile(r"[a-z]+")

# OSM ``historic`` values that decide the category on their own
_HISTORIC_CATEGORIES = {
    "temple": SiteCategory.TEMPLE,
    "church": SiteCategory.TEMPLE,
    "mosque": SiteCategory.TEMPLE,
    "wayside_shrine": SiteCategory.TEMPLE,
    "fort": SiteCategory.FORT,
    "castle": SiteCategory.FORT,
    "fortification": SiteCategory.FORT,
    "palace": SiteCategory.PALACE,
    "memorial": SiteCategory.MEMORIAL,
    "war_memorial": SiteCategory.MEMORIAL,
    "ruins": SiteCategory.RUINS,
    "archaeological_site": SiteCategory.RUINS,
    "monument": SiteCategory.MONUMENT,
}

# Checked in order against the words of the label and name
_TEXT_CATEGORIES = (
    (SiteCategory.TEMPLE, ("temple", "church", "mosque", "shrine", "gurdwara", "cathedral")),
    (SiteCategory.FORT, ("fort", "castle", "fortress", "fortification")),
    (SiteCategory.PALACE, ("palace",)),
    (SiteCategory.MUSEUM, ("museum", "gallery")),
    (SiteCategory.MEMORIAL, ("memorial",)),
    (SiteCategory.RUINS, ("ruins",)),
)


def categorize_site(
    tags: Optional[Mapping[str, str]] = None,
    label: str = "",
    name: str = "",
) -> SiteCategory:
    """Map upstream metadata onto a canonical category.

    Explicit tags decide first; the label and name are only consulted,
    word by word, when no tag does.

    Args:
        tags: OSM-style tags (``historic``, ``tourism``, ``religion``, ``heritage``).
        label: Free-text class label, e.g. a Wikidata ``instance of`` label.
        name: Site name, used as a last hint.

    Returns:
        The first matching category, Monument for otherwise unclassified
        historic elements, Other when nothing hints at a heritage site.
    """
    tags = tags or {}
    label = (label or "").lower()
    historic = tags.get("historic", "").lower()
    tourism = tags.get("tourism", "").lower()

    if "unesco" in label or "world heritage" in label or str(tags.get("heritage", "")) == "1":
        return SiteCategory.UNESCO
    if historic in _HISTORIC_CATEGORIES:
        return _HISTORIC_CATEGORIES[historic]
    if tourism in ("museum", "gallery"):
        return SiteCategory.MUSEUM
    if tags.get("religion"):
        return SiteCategory.TEMPLE

    words = _words(label) | _words(name or tags.get("name", ""))
    for category, hints in _TEXT_CATEGORIES:
        if words.intersection(hints):
            return category
    if historic or label:
        return SiteCategory.MONUMENT
    return SiteCategory.OTHER


def _words(text: str) -> set[str]:
    return set(_WORD_RE.findall(text.lower()))


def visit_duration_minutes(category: Union[SiteCategory, str]) -> int:
    """Expected visit duration for a category or free-text category name."""
    text = category.value if isinstance(category, SiteCategory) else category
    if _words(text) & {"unesco", "palace", "fort", "museum", "gallery"}:
        return 90
    return 60


def format_historical_context(summary: Optional[str], max_length: int = 500) -> str:
    """Clean a narrative extract for display.

    Citation markers are removed and whitespace collapsed; long text is cut
    back to the last full sentence that fits in ``max_length``.
    """
    if not summary:
        return NO_CONTEXT

    clean = _WHITESPACE_RE.sub(" ", _CITATION_RE.sub("", summary)).strip()
    if len(clean) <= max_length:
        return clean

    truncated = clean[:max_length]
    last_period = truncated.rfind(".")
    if last_period > 0:
        return truncated[: last_period + 1]
    return truncated + "..."


def site_images(site: Site, narrative: Optional[NarrativeSummary] = None) -> tuple[str, ...]:
    """Images for a site: narrative image, then source image, then placeholder."""
    if narrative is not None and narrative.image_url:
        return (narrative.image_url,)
    if site.images:
        return site.images
    if site.image_url:
        return (site.image_url,)
    return (PLACEHOLDER_IMAGES.get(site.category, DEFAULT_PLACEHOLDER),)


def slugify(name: Optional[str]) -> str:
    """URL-safe slug for a site name."""
    if not name:
        return "unknown-site"
    return _SLUG_RE.sub("-", name.lower()).strip("-")


def visiting_info(site: Site) -> dict[str, str]:
    """Default visiting hours and entry fee for a site.

    An OSM ``opening_hours`` tag always wins over the category default.
    """
    hours, fee = "Sunrise to Sunset", "Varies, check official website"
    category = site.category
    if category is SiteCategory.MUSEUM:
        hours, fee = "10:00 - 17:00 (Closed Mondays)", "₹50 - ₹500"
    elif category is SiteCategory.TEMPLE:
        hours, fee = "06:00 - 20:00", "Free Entry"
    elif category in (SiteCategory.FORT, SiteCategory.PALACE):
        hours, fee = "09:00 - 17:00", "₹20 - ₹600"
    elif category is SiteCategory.UNESCO:
        hours, fee = "06:00 - 18:00", "₹50 (Indian) / ₹600 (Foreigner)"

    opening_hours = site.tags.get("opening_hours")
    if opening_hours:
        hours = opening_hours
    return {"visiting_hours": hours, "entry_fee": fee}


def title_from_url(url: Optional[str]) -> Optional[str]:
    """Extract the article title from a ``.../wiki/<Title>`` URL."""
    if not url:
        return None
    path = urlparse(url).path
    if "/wiki/" not in path:
        return None
    title = unquote(path.split("/wiki/", 1)[1]).replace("_", " ").strip()
    return title or None


def narrative_title(site: Site) -> str:
    """Title to look a site up under: its linked article, else its name."""
    return title_from_url(site.wikipedia_url) or site.name
