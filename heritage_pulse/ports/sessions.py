"""Session store port - Chat history keyed by conversation id."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import ChatMessage


class SessionStorePort(Protocol):
    """Port for conversation state.

    Implementation: adapters/sessions/memory_session_store.py

    Entries expire after a TTL; an expired conversation reads as empty.
    """

    def get(self, conversation_id: str) -> List[ChatMessage]:
        """Return the stored history, oldest first (empty if unknown)."""
        ...

    def put(self, conversation_id: str, messages: Sequence[ChatMessage]) -> None:
        """Replace the stored history and refresh its TTL."""
        ...

    def append(
        self, conversation_id: str, messages: Sequence[ChatMessage], max_messages: int
    ) -> List[ChatMessage]:
        """Atomically add messages, keep the newest ``max_messages``.

        Returns the stored history after the append.
        """
        ...

    def evict(self, conversation_id: str) -> bool:
        """Drop a conversation. Returns True if it existed."""
        ...
