"""In-memory chat session store with TTL eviction."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ...config import SessionConfig, get_config
from ...domain.models import ChatMessage
from ..cache.memory_cache import InMemoryCache


@dataclass
class InMemorySessionStore:
    """Conversation histories kept in a TTL cache.

    Implements SessionStorePort. Each ``put`` refreshes the conversation's
    TTL; once it lapses the conversation reads as empty. When
    ``max_sessions`` is reached the least recently written one is dropped.
    Writes are serialized so concurrent appends to one conversation are
    never lost.

    Attributes:
        config: Session configuration
        cache: Backing cache, built from ``config`` when omitted
    """

    config: SessionConfig = field(default_factory=lambda: get_config().sessions)
    cache: Optional[InMemoryCache[tuple[ChatMessage, ...]]] = None

    _logger: logging.Logger = field(init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.cache is None:
            self.cache = InMemoryCache(
                name="sessions",
                default_ttl_seconds=self.config.ttl_seconds,
                max_size=self.config.max_sessions,
            )

    def get(self, conversation_id: str) -> List[ChatMessage]:
        assert self.cache is not None
        return list(self.cache.get(conversation_id) or ())

    def put(self, conversation_id: str, messages: Sequence[ChatMessage]) -> None:
        assert self.cache is not None
        with self._lock:
            self.cache.set(conversation_id, tuple(messages))

    def append(
        self, conversation_id: str, messages: Sequence[ChatMessage], max_messages: int
    ) -> List[ChatMessage]:
        assert self.cache is not None
        with self._lock:
            history = [*(self.cache.get(conversation_id) or ()), *messages][-max_messages:]
            self.cache.set(conversation_id, tuple(history))
        return history

    def evict(self, conversation_id: str) -> bool:
        assert self.cache is not None
        with self._lock:
            removed = self.cache.invalidate(conversation_id)
        if removed:
            self._logger.debug("Conversation evicted", extra={"conversation_id": conversation_id})
        return removed
