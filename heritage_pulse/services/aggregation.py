"""Merging and deduplication of multi-source site candidates.

Sources are concatenated in arrival order and collapsed with a pairwise
tolerance scan. The first record seen for a physical place is kept, so
the order in which sources are merged decides whose metadata survives.
The relation is neither transitive nor symmetric: A~B and B~C does not
merge A with C when A and C are further apart than the tolerance.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from ..domain.geo import within_tolerance
from ..domain.models import Site

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_DEG = 0.001
UNKNOWN_SITE = "Unknown Site"


def merge_sources(*sources: Iterable[Site]) -> List[Site]:
    """Concatenate per-source results, preserving source order."""
    merged: List[Site] = []
    for source in sources:
        merged.extend(source)
    return merged


def deduplicate_sites(
    sites: Sequence[Site], tolerance_deg: float = DEFAULT_TOLERANCE_DEG
) -> List[Site]:
    """Drop every site within ``tolerance_deg`` of an already accepted one.

    Args:
        sites: Candidates in arrival order.
        tolerance_deg: Per-axis tolerance; both |dlat| and |dlng| must be
            strictly below it for two sites to be the same place.

    Returns:
        Accepted sites, in arrival order.
    """
    unique: List[Site] = []
    for site in sites:
        if any(within_tolerance(site.location, kept.location, tolerance_deg) for kept in unique):
            continue
        unique.append(site)

    logger.debug(
        "Sites deduplicated",
        extra={"candidates": len(sites), "unique": len(unique)},
    )
    return unique


def select_candidates(
    sites: Sequence[Site],
    cap: int,
    exclude_terms: Sequence[str] = (),
) -> List[Site]:
    """Keep named sites, drop names containing an excluded term, cap the list."""
    terms = [t.lower() for t in exclude_terms]
    named = [
        s
        for s in sites
        if s.name
        and s.name != UNKNOWN_SITE
        and not any(term in s.name.lower() for term in terms)
    ]
    return named[: max(cap, 0)]
