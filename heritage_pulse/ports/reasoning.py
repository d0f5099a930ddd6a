"""Reasoning port - Generative model used for itineraries and chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import ChatMessage, ProposedItinerary


class ReasoningModelPort(Protocol):
    """Port for the external reasoning model.

    Implementation: adapters/reasoning/openrouter_adapter.py

    Output is untrusted. Itineraries it proposes must go through the
    itinerary validator before reaching a user.
    """

    def generate_itinerary(self, context: Mapping[str, Any]) -> ProposedItinerary:
        """Ask the model for a day-by-day plan.

        Args:
            context: Task description, trip constraints and candidate sites.

        Raises:
            GenerationError: If the model is unreachable or its reply cannot
                be parsed into an itinerary.
        """
        ...

    def chat(
        self,
        messages: Sequence[ChatMessage],
        context: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Answer the last user message of a conversation.

        Raises:
            GenerationError: If the model is unreachable.
        """
        ...
