"""Narrative port - Encyclopedia summaries for a site title."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import NarrativeSummary


class NarrativePort(Protocol):
    """Port for narrative lookups.

    Implementation: adapters/narrative/wikipedia_adapter.py
    """

    def summarize(self, title: str, lang: str = "en") -> NarrativeSummary:
        """Look up a summary for ``title``.

        Never raises for upstream problems: a missing page or an unreachable
        service both yield ``NarrativeSummary.unavailable(title)``.
        """
        ...
